"""Pipeline orchestrator: runs the stages for one request."""

import asyncio
import logging
import time
from pathlib import Path

from slicr.config import Settings
from slicr.errors import ClientInputError, PipelineError, SlicrError
from slicr.models.pipeline import PipelineResult, StageResult, StageStatus
from slicr.models.request import InputSource, ProcessingRequest
from slicr.pipeline.base import PipelineStage
from slicr.pipeline.context import PipelineState
from slicr.pipeline.stages import (
    AcquireStage,
    AdjustTempoStage,
    ApplyMusicStage,
    ExportFormatStage,
    ProbeDurationStage,
    PublishStage,
    RemoveSilenceStage,
    SelectMusicStage,
    TranscribeStage,
)
from slicr.services.catalog import NocoDBMusicCatalog
from slicr.services.classifier import ClaudeTrackClassifier
from slicr.services.interfaces import (
    IAudioStageRunner,
    IMusicCatalog,
    IObjectStore,
    ITranscriptionService,
)
from slicr.services.media import AudioStageRunner
from slicr.services.music_selector import MusicSelector
from slicr.services.storage import build_object_store
from slicr.services.transcription import WhisperTranscriptionService

logger = logging.getLogger(__name__)


class PipelineOrchestrator:
    """Runs the stages strictly in order, once each, for every request.

    A failing fatal stage aborts the run. A failing non-fatal stage is
    recorded and the run continues without its feature. Every temp file
    is released when the run ends, whatever the outcome.
    """

    def __init__(self, stages: list[PipelineStage], work_dir: Path) -> None:
        self._stages = list(stages)
        self.work_dir = Path(work_dir)

    @classmethod
    def build(
        cls,
        settings: Settings,
        runner: IAudioStageRunner,
        store: IObjectStore,
        transcriber: ITranscriptionService | None = None,
        selector: MusicSelector | None = None,
    ) -> "PipelineOrchestrator":
        """Assemble the standard stage sequence from configuration."""
        stages: list[PipelineStage] = [
            AcquireStage(download_timeout=settings.download_timeout),
            RemoveSilenceStage(runner),
            ProbeDurationStage(runner),
            AdjustTempoStage(runner, tolerance=settings.tempo_tolerance),
            TranscribeStage(runner, transcriber),
            SelectMusicStage(selector),
            ApplyMusicStage(
                runner,
                target_lufs=settings.music_target_lufs,
                ducking_db=settings.music_ducking_db,
                fade_out_seconds=settings.fade_out_seconds,
                download_timeout=settings.download_timeout,
            ),
            ExportFormatStage(runner, bitrate=settings.mp3_bitrate),
            PublishStage(store, prefix=settings.s3_prefix),
        ]
        return cls(stages, work_dir=settings.temp_dir)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        store: IObjectStore | None = None,
        catalog: IMusicCatalog | None = None,
    ) -> "PipelineOrchestrator":
        """Build the real adapters from configuration and assemble the stages."""
        runner = AudioStageRunner(
            ffmpeg_path=settings.ffmpeg_path,
            ffprobe_path=settings.ffprobe_path,
            timeout=settings.ffmpeg_timeout,
            probe_timeout=settings.ffprobe_timeout,
        )
        transcriber = WhisperTranscriptionService(
            api_key=settings.openai_api_key,
            base_url=settings.transcription_base_url,
            model=settings.transcription_model,
            timeout=settings.transcription_timeout,
            max_upload_bytes=settings.transcription_max_bytes,
        )
        if catalog is None:
            catalog = build_catalog(settings)

        selector = None
        if catalog.is_available:
            classifier = ClaudeTrackClassifier(
                api_key=settings.anthropic_api_key,
                model=settings.classifier_model,
                timeout=settings.classifier_timeout,
            )
            selector = MusicSelector(catalog, classifier)

        return cls.build(
            settings,
            runner=runner,
            store=store or build_object_store(settings),
            transcriber=transcriber,
            selector=selector,
        )

    def list_stages(self) -> list[tuple[str, str]]:
        """List stages as (name, display_name) tuples."""
        return [(s.name, s.display_name) for s in self._stages]

    async def run(self, request: ProcessingRequest, source: InputSource) -> PipelineResult:
        """Process one request end to end.

        Raises:
            ClientInputError: If the input is missing or unusable
            PipelineError: If any other fatal stage fails
        """
        self.work_dir.mkdir(parents=True, exist_ok=True)
        state = PipelineState.create(request, source, self.work_dir)
        logger.info("[%s] Processing %r", state.request_id, source)

        try:
            for stage in self._stages:
                state.stage_results[stage.name] = await self._run_stage(stage, state)

            if state.audio_url is None:
                raise PipelineError("Pipeline finished without publishing audio")

            result = PipelineResult(
                request_id=state.request_id,
                audio_url=state.audio_url,
                srt_url=state.srt_url,
                stages=state.stage_results,
            )
            if result.dropped_features:
                logger.warning(
                    "[%s] Completed without: %s", state.request_id, ", ".join(result.dropped_features)
                )
            logger.info("[%s] Processing complete: %s", state.request_id, state.audio_url)
            return result
        finally:
            await asyncio.to_thread(state.ledger.release_all)

    async def _run_stage(self, stage: PipelineStage, state: PipelineState) -> StageResult:
        rid = state.request_id

        if not await stage.validate(state):
            logger.info("[%s] Skipping stage: %s", rid, stage.name)
            return StageResult.skipped()

        logger.info("[%s] Running stage: %s", rid, stage.name)
        started = time.monotonic()
        try:
            result = await stage.execute(state)
        except ClientInputError:
            raise
        except Exception as e:
            if stage.fatal:
                logger.error("[%s] %s failed: %s", rid, stage.display_name, e)
                raise PipelineError(f"{stage.display_name} failed: {e}") from e
            if isinstance(e, SlicrError):
                logger.warning("[%s] %s failed, continuing without it: %s", rid, stage.display_name, e)
            else:
                logger.exception("[%s] %s failed unexpectedly, continuing without it", rid, stage.display_name)
            return StageResult.failure(str(e)).timed(started)

        if result.status == StageStatus.FAILED and stage.fatal:
            raise PipelineError(f"{stage.display_name} failed: {result.message}")
        result = result.timed(started)
        logger.info("[%s] Stage %s: %s (%.2fs)", rid, stage.name, result.status.value, result.elapsed)
        return result


def build_catalog(settings: Settings) -> NocoDBMusicCatalog:
    return NocoDBMusicCatalog(
        api_url=settings.nocodb_api_url,
        auth_token=settings.nocodb_auth_token,
        table_id=settings.nocodb_table_id,
        timeout=settings.catalog_timeout,
    )
