"""Tests for the processing pipeline with fake ffmpeg and storage."""

import io
import threading
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from fakes import FakeRunner, FakeStore, leftover_files
from slicr.errors import ClientInputError, DownloadError, FFmpegError, PipelineError, TranscriptionError
from slicr.models.music import MusicTrack
from slicr.models.pipeline import StageStatus
from slicr.models.request import InputSource, ProcessingRequest
from slicr.models.transcript import Transcript, TranscriptWord
from slicr.pipeline.orchestrator import PipelineOrchestrator
from slicr.services.ledger import ResourceLedger
from slicr.services.music_selector import MusicSelector

SHORT_TRACK = MusicTrack(
    id="1",
    title="Calm Piano",
    description="Soft keys",
    mood="calm",
    loudness_lufs=-18.0,
    duration_seconds=5.0,
    source_url="https://cdn.example.com/calm.mp3",
)


def _upload(data: bytes = b"RIFF-input-audio", name: str = "voice.wav") -> InputSource:
    return InputSource(upload=io.BytesIO(data), filename=name)


def _request(**kwargs) -> ProcessingRequest:
    kwargs.setdefault("left_padding", 0.0)
    kwargs.setdefault("right_padding", 0.0)
    return ProcessingRequest(**kwargs)


def _transcriber(transcript: Transcript | None = None, error: Exception | None = None, available: bool = True):
    transcriber = MagicMock()
    transcriber.is_available = available
    transcriber.transcribe = AsyncMock(return_value=transcript, side_effect=error)
    return transcriber


def _selector(track: MusicTrack | None = SHORT_TRACK, reply: str = "Calm Piano") -> MusicSelector:
    catalog = MagicMock()
    catalog.is_available = True
    catalog.list_tracks = AsyncMock(return_value=[track] if track else [])
    catalog.get_track = AsyncMock(return_value=track)
    classifier = MagicMock()
    classifier.is_available = True
    classifier.classify = AsyncMock(return_value=reply)
    return MusicSelector(catalog, classifier)


async def _fake_download(url: str, dest: Path, timeout: float | None = None, transport=None) -> Path:
    Path(dest).write_bytes(b"ID3-music")
    return Path(dest)


@pytest.fixture
def build(test_settings, fake_runner: FakeRunner, fake_store: FakeStore):
    def _build(transcriber=None, selector=None) -> PipelineOrchestrator:
        return PipelineOrchestrator.build(
            test_settings,
            runner=fake_runner,
            store=fake_store,
            transcriber=transcriber,
            selector=selector,
        )

    return _build


class TestStageOrder:
    def test_list_stages(self, build) -> None:
        names = [name for name, _ in build().list_stages()]
        assert names == [
            "acquire",
            "remove_silence",
            "probe_duration",
            "adjust_tempo",
            "transcribe",
            "select_music",
            "apply_music",
            "export_format",
            "publish",
        ]


class TestSuccessfulRuns:
    @pytest.mark.asyncio
    async def test_voice_only(self, build, fake_runner: FakeRunner, fake_store: FakeStore, work_dir: Path) -> None:
        result = await build().run(_request(), _upload())

        assert result.audio_url.startswith("https://cdn.example.com/processed/")
        assert result.audio_url.endswith(".wav")
        assert result.srt_url is None
        assert fake_runner.filters()[0] == (
            "silenceremove=stop_periods=-1:stop_duration=0.2000:stop_threshold=-40dB"
        )
        assert result.stages["adjust_tempo"].status == StageStatus.SKIPPED
        assert result.stages["transcribe"].status == StageStatus.SKIPPED
        assert result.stages["select_music"].status == StageStatus.SKIPPED
        assert list(fake_store.content_types.values()) == ["audio/wav"]
        assert leftover_files(work_dir) == []

    @pytest.mark.asyncio
    async def test_default_padding_shortens_stop_duration(self, build, fake_runner: FakeRunner) -> None:
        await build().run(ProcessingRequest(), _upload())
        assert ":stop_duration=0.1336:" in fake_runner.filters()[0]

    @pytest.mark.asyncio
    async def test_first_pass_writes_stereo_wav(self, build, fake_runner: FakeRunner) -> None:
        await build().run(_request(), _upload())
        first = fake_runner.calls[0]
        assert first["output"].suffix == ".wav"
        assert first["options"][:4] == ["-ar", "44100", "-ac", "2"]
        assert first["inputs"][0].suffix == ".wav"

    @pytest.mark.asyncio
    async def test_tempo_applied_to_reach_target(self, build, fake_runner: FakeRunner) -> None:
        fake_runner.duration = 8.0
        result = await build().run(_request(target_duration=4.0), _upload())

        assert "atempo=2.0000" in fake_runner.filters()
        assert result.stages["adjust_tempo"].data["rate"] == pytest.approx(2.0)

    @pytest.mark.asyncio
    async def test_no_tempo_when_already_short(self, build, fake_runner: FakeRunner) -> None:
        fake_runner.duration = 3.0
        result = await build().run(_request(target_duration=4.0), _upload())

        assert not any(f and f.startswith("atempo") for f in fake_runner.filters())
        assert result.stages["adjust_tempo"].status == StageStatus.SKIPPED

    @pytest.mark.asyncio
    async def test_probe_failure_skips_tempo(self, build, fake_runner: FakeRunner) -> None:
        fake_runner.probe_error = FFmpegError("ffprobe failed (exit 1)")
        result = await build().run(_request(target_duration=4.0), _upload())

        assert result.stages["probe_duration"].status == StageStatus.FAILED
        assert result.stages["adjust_tempo"].status == StageStatus.SKIPPED
        assert result.audio_url

    @pytest.mark.asyncio
    async def test_subtitles_published(self, build, fake_runner: FakeRunner, fake_store: FakeStore, work_dir: Path) -> None:
        transcript = Transcript(
            text="Hello world",
            words=[
                TranscriptWord(text="Hello", start=0.0, end=0.4),
                TranscriptWord(text="world", start=0.5, end=0.9),
            ],
        )
        transcriber = _transcriber(transcript)
        result = await build(transcriber=transcriber).run(_request(transcribe=True), _upload())

        assert result.srt_url is not None and result.srt_url.endswith(".srt")
        srt_key = result.srt_url.removeprefix("https://cdn.example.com/")
        assert fake_store.uploads[srt_key].decode().startswith("1\n00:00:00,000 --> 00:00:00,400\nHello\n")
        assert fake_store.content_types[srt_key] == "application/x-subrip"

        proxy = transcriber.transcribe.call_args.args[0]
        assert proxy.suffix == ".mp3"
        proxy_call = next(c for c in fake_runner.calls if c["output"] == proxy)
        assert "16000" in proxy_call["options"]
        assert leftover_files(work_dir) == []

    @pytest.mark.asyncio
    async def test_no_srt_without_valid_words(self, build) -> None:
        transcript = Transcript(text="...", words=[TranscriptWord(text=" ", start=0.0, end=0.1)])
        result = await build(transcriber=_transcriber(transcript)).run(_request(transcribe=True), _upload())
        assert result.srt_url is None

    @pytest.mark.asyncio
    async def test_mp3_export(self, build, fake_runner: FakeRunner, fake_store: FakeStore) -> None:
        result = await build().run(_request(export_format="mp3"), _upload())

        assert result.audio_url.endswith(".mp3")
        assert list(fake_store.content_types.values()) == ["audio/mpeg"]
        assert fake_runner.calls[-1]["options"] == ["-c:a", "libmp3lame", "-b:a", "192k"]

    @pytest.mark.asyncio
    async def test_url_input(self, build, fake_runner: FakeRunner) -> None:
        with patch("slicr.pipeline.stages.acquire.download_to_path", new=_fake_download):
            result = await build().run(_request(), InputSource(url="https://cdn.example.com/in.mp3"))

        assert result.audio_url
        assert fake_runner.calls[0]["inputs"][0].suffix == ".mp3"


class TestMusic:
    @pytest.mark.asyncio
    async def test_manual_track_mixed(self, build, fake_runner: FakeRunner, work_dir: Path) -> None:
        fake_runner.duration = 8.0
        request = _request(add_music=True, music_track_id="1")

        with patch("slicr.pipeline.stages.music.download_to_path", new=_fake_download):
            result = await build(selector=_selector()).run(request, _upload())

        assert result.stages["select_music"].data["track_id"] == "1"
        assert result.stages["apply_music"].status == StageStatus.COMPLETED

        filters = fake_runner.filters()
        assert "volume=-5.00dB" in filters
        assert "afade=t=out:st=2.000:d=3.000,atrim=start=0:end=8.000,asetpts=PTS-STARTPTS" in filters

        mix = fake_runner.calls[-1]
        assert mix["filter"].startswith("[1:a]volume=-6.00dB[bg];")
        assert mix["filter"].endswith(":normalize=0[out]")
        assert len(mix["inputs"]) == 2
        assert mix["options"][:2] == ["-map", "[out]"]
        assert leftover_files(work_dir) == []

    @pytest.mark.asyncio
    async def test_long_track_not_faded(self, build, fake_runner: FakeRunner) -> None:
        track = SHORT_TRACK.model_copy(update={"duration_seconds": 60.0, "loudness_lufs": None})
        request = _request(add_music=True, music_track_id="1", music_ducking_db=-12)

        with patch("slicr.pipeline.stages.music.download_to_path", new=_fake_download):
            await build(selector=_selector(track)).run(request, _upload())

        filters = fake_runner.filters()
        assert not any(f and f.startswith("afade") for f in filters)
        assert not any(f and f.startswith("volume=") for f in filters)
        assert fake_runner.calls[-1]["filter"].startswith("[1:a]volume=-12.00dB[bg];")

    @pytest.mark.asyncio
    async def test_auto_selected_from_transcript(self, build) -> None:
        transcriber = _transcriber(Transcript(text="A calm story"))
        selector = _selector(reply=" Calm Piano ")
        request = _request(add_music=True, auto_select_music=True)

        with patch("slicr.pipeline.stages.music.download_to_path", new=_fake_download):
            result = await build(transcriber=transcriber, selector=selector).run(request, _upload())

        assert result.stages["select_music"].data["title"] == "Calm Piano"
        assert result.stages["apply_music"].status == StageStatus.COMPLETED
        assert result.srt_url is None

    @pytest.mark.asyncio
    async def test_auto_select_without_transcription_service(self, build, fake_store: FakeStore) -> None:
        selector = _selector()
        request = _request(add_music=True, auto_select_music=True)

        result = await build(transcriber=_transcriber(available=False), selector=selector).run(request, _upload())

        assert result.audio_url
        assert result.stages["transcribe"].status == StageStatus.SKIPPED
        assert result.stages["select_music"].status == StageStatus.SKIPPED
        assert result.stages["apply_music"].status == StageStatus.SKIPPED
        assert len(fake_store.uploads) == 1

    @pytest.mark.asyncio
    async def test_mix_failure_reverts_to_voice(self, build, fake_runner: FakeRunner, work_dir: Path) -> None:
        fake_runner.fail_when = lambda graph, output: bool(graph) and graph.startswith("[1:a]")
        request = _request(add_music=True, music_track_id="1", export_format="mp3")

        with patch("slicr.pipeline.stages.music.download_to_path", new=_fake_download):
            result = await build(selector=_selector()).run(request, _upload())

        assert result.stages["apply_music"].status == StageStatus.FAILED
        pass1 = fake_runner.calls[0]["output"]
        export = fake_runner.calls[-1]
        assert export["inputs"] == [pass1]
        assert result.audio_url.endswith(".mp3")
        assert result.dropped_features == ["apply_music"]
        assert leftover_files(work_dir) == []

    @pytest.mark.asyncio
    async def test_track_download_failure_is_non_fatal(self, build, work_dir: Path) -> None:
        request = _request(add_music=True, music_track_id="1")
        failing = AsyncMock(side_effect=DownloadError("Download failed with HTTP 403"))

        with patch("slicr.pipeline.stages.music.download_to_path", new=failing):
            result = await build(selector=_selector()).run(request, _upload())

        assert result.stages["apply_music"].status == StageStatus.FAILED
        assert "403" in result.stages["apply_music"].message
        assert result.audio_url
        assert leftover_files(work_dir) == []


class TestNonFatalFailures:
    @pytest.mark.asyncio
    async def test_transcription_failure(self, build, fake_store: FakeStore, work_dir: Path) -> None:
        transcriber = _transcriber(error=TranscriptionError("Transcription API returned 500"))
        result = await build(transcriber=transcriber).run(_request(transcribe=True), _upload())

        assert result.stages["transcribe"].status == StageStatus.FAILED
        assert result.srt_url is None
        assert len(fake_store.uploads) == 1
        assert leftover_files(work_dir) == []

    @pytest.mark.asyncio
    async def test_export_failure_publishes_wav(
        self, build, fake_runner: FakeRunner, fake_store: FakeStore, work_dir: Path
    ) -> None:
        fake_runner.fail_when = lambda graph, output: output.suffix == ".mp3"
        result = await build().run(_request(export_format="mp3"), _upload())

        assert result.stages["export_format"].status == StageStatus.FAILED
        assert result.audio_url.endswith(".wav")
        assert list(fake_store.content_types.values()) == ["audio/wav"]
        assert result.dropped_features == ["export_format"]
        assert leftover_files(work_dir) == []


class TestFatalFailuresCleanUp:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "request_kwargs,fail_on,message",
        [
            ({}, "silenceremove", "Silence removal failed"),
            ({"target_duration": 4.0}, "atempo", "Tempo adjustment failed"),
        ],
    )
    async def test_tool_failure(
        self,
        build,
        fake_runner: FakeRunner,
        fake_store: FakeStore,
        work_dir: Path,
        request_kwargs: dict,
        fail_on: str,
        message: str,
    ) -> None:
        fake_runner.fail_when = lambda graph, output: bool(graph) and graph.startswith(fail_on)

        with pytest.raises(PipelineError, match=message):
            await build().run(_request(**request_kwargs), _upload())

        assert fake_store.uploads == {}
        assert leftover_files(work_dir) == []

    @pytest.mark.asyncio
    async def test_publish_failure(self, test_settings, fake_runner: FakeRunner, work_dir: Path) -> None:
        orchestrator = PipelineOrchestrator.build(test_settings, runner=fake_runner, store=FakeStore(fail=True))

        with pytest.raises(PipelineError, match="Publish failed"):
            await orchestrator.run(_request(export_format="mp3"), _upload())

        assert leftover_files(work_dir) == []

    @pytest.mark.asyncio
    async def test_publish_failure_after_subtitles(self, test_settings, fake_runner: FakeRunner, work_dir: Path) -> None:
        transcript = Transcript(text="Hi", words=[TranscriptWord(text="Hi", start=0.0, end=0.2)])
        orchestrator = PipelineOrchestrator.build(
            test_settings, runner=fake_runner, store=FakeStore(fail=True), transcriber=_transcriber(transcript)
        )

        with pytest.raises(PipelineError):
            await orchestrator.run(_request(transcribe=True), _upload())

        assert leftover_files(work_dir) == []

    @pytest.mark.asyncio
    async def test_empty_upload(self, build, fake_runner: FakeRunner, work_dir: Path) -> None:
        with pytest.raises(ClientInputError, match="empty"):
            await build().run(_request(), _upload(data=b""))

        assert fake_runner.calls == []
        assert leftover_files(work_dir) == []

    @pytest.mark.asyncio
    async def test_url_download_failure(self, build, work_dir: Path) -> None:
        failing = AsyncMock(side_effect=DownloadError("Download failed with HTTP 404"))
        with patch("slicr.pipeline.stages.acquire.download_to_path", new=failing):
            with pytest.raises(ClientInputError, match="404"):
                await build().run(_request(), InputSource(url="https://cdn.example.com/missing.wav"))

        assert leftover_files(work_dir) == []

    @pytest.mark.asyncio
    async def test_missing_source(self, build) -> None:
        with pytest.raises(ClientInputError):
            await build().run(_request(), InputSource())

    @pytest.mark.asyncio
    async def test_release_runs_off_the_event_loop(self, build) -> None:
        threads: list[int] = []
        release_all = ResourceLedger.release_all

        def recording_release(ledger: ResourceLedger) -> None:
            threads.append(threading.get_ident())
            release_all(ledger)

        with patch.object(ResourceLedger, "release_all", recording_release):
            await build().run(_request(), _upload())

        assert len(threads) == 1
        assert threads[0] != threading.get_ident()
