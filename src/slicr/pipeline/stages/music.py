"""Background music stages: selection and mixing."""

import logging

from slicr.models.pipeline import StageResult
from slicr.pipeline.base import WAV_OUTPUT_OPTIONS, PipelineStage
from slicr.pipeline.context import PipelineState
from slicr.services.download import download_to_path, url_suffix
from slicr.services.filters import (
    fade_out_filter,
    gain_filter,
    mix_filter,
    trim_filter,
)
from slicr.services.interfaces import IAudioStageRunner
from slicr.services.music_selector import MusicSelector

logger = logging.getLogger(__name__)


class SelectMusicStage(PipelineStage):
    """Resolves the manual track id or asks the classifier for one."""

    fatal = False

    def __init__(self, selector: MusicSelector | None) -> None:
        self._selector = selector

    @property
    def name(self) -> str:
        return "select_music"

    @property
    def display_name(self) -> str:
        return "Music selection"

    async def validate(self, state: PipelineState) -> bool:
        if not state.request.add_music:
            return False
        if self._selector is None:
            logger.info("[%s] Music requested but no catalog configured", state.request_id)
            return False
        return True

    async def execute(self, state: PipelineState) -> StageResult:
        req = state.request
        track = await self._selector.select(
            manual_track_id=req.music_track_id,
            auto_select=req.auto_select_music,
            transcript=state.transcript_text,
        )
        if track is None:
            return StageResult.skipped("No music track selected")

        state.music_track = track
        logger.info("[%s] Selected music track %s (%s)", state.request_id, track.id, track.title)
        return StageResult.success(data={"track_id": track.id, "title": track.title})


class ApplyMusicStage(PipelineStage):
    """Mixes the selected track under the voice-over.

    The track is gain-normalized to the target loudness when its LUFS is
    known, faded out at its natural end when shorter than the voice, cut
    to the voice length, and mixed at the ducking level. The working file
    only changes once the final mix exists.
    """

    fatal = False

    def __init__(
        self,
        runner: IAudioStageRunner,
        target_lufs: float = -23.0,
        ducking_db: float = -6.0,
        fade_out_seconds: float = 3.0,
        download_timeout: float | None = 120.0,
    ) -> None:
        self._runner = runner
        self.target_lufs = target_lufs
        self.ducking_db = ducking_db
        self.fade_out_seconds = fade_out_seconds
        self.download_timeout = download_timeout

    @property
    def name(self) -> str:
        return "apply_music"

    @property
    def display_name(self) -> str:
        return "Music mixing"

    async def validate(self, state: PipelineState) -> bool:
        return state.music_track is not None

    async def execute(self, state: PipelineState) -> StageResult:
        track = state.music_track
        req = state.request
        voice = state.require_working_file()
        target_lufs = req.music_target_lufs if req.music_target_lufs is not None else self.target_lufs
        ducking_db = req.music_ducking_db if req.music_ducking_db is not None else self.ducking_db

        music = state.temp_path("music_src", url_suffix(track.source_url, ".mp3"))
        await download_to_path(track.source_url, music, timeout=self.download_timeout)

        if track.loudness_lufs is not None:
            gain = target_lufs - track.loudness_lufs
            normalized = state.temp_path("music_norm", ".wav")
            await self._runner.run([music], gain_filter(gain), normalized, WAV_OUTPUT_OPTIONS)
            music = normalized
            logger.info("[%s] Normalized music by %.2f dB", state.request_id, gain)

        voice_duration = await self._runner.probe_duration(voice)

        track_duration = track.duration_seconds
        if track_duration is None:
            track_duration = await self._runner.probe_duration(music)

        filters = []
        if track_duration < voice_duration:
            filters.append(fade_out_filter(track_duration, self.fade_out_seconds))
        filters.append(trim_filter(voice_duration))

        fitted = state.temp_path("music_fit", ".wav")
        await self._runner.run([music], ",".join(filters), fitted, WAV_OUTPUT_OPTIONS)

        mixed = state.temp_path("mixed", ".wav")
        await self._runner.run(
            [voice, fitted],
            mix_filter(ducking_db),
            mixed,
            ("-map", "[out]", *WAV_OUTPUT_OPTIONS),
        )
        state.working_file = mixed

        logger.info(
            "[%s] Mixed music %s at %.1f dB under %.3fs of voice",
            state.request_id,
            track.id,
            ducking_db,
            voice_duration,
        )
        return StageResult.success(
            data={"track_id": track.id, "ducking_db": ducking_db, "voice_duration": voice_duration}
        )
