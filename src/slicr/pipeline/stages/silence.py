"""Silence removal stage (Pass 1)."""

import logging

from slicr.models.pipeline import StageResult
from slicr.pipeline.base import WAV_OUTPUT_OPTIONS, PipelineStage
from slicr.pipeline.context import PipelineState
from slicr.services.filters import (
    effective_min_duration,
    should_remove_silence,
    silence_filter,
)
from slicr.services.interfaces import IAudioStageRunner

logger = logging.getLogger(__name__)


class RemoveSilenceStage(PipelineStage):
    """Cuts silent stretches with ffmpeg ``silenceremove``.

    The stop duration is the minimum silence length minus the padding the
    user wants kept around speech. When padding leaves nothing to cut the
    input is only re-encoded to the working WAV format.
    """

    def __init__(self, runner: IAudioStageRunner) -> None:
        self._runner = runner

    @property
    def name(self) -> str:
        return "remove_silence"

    @property
    def display_name(self) -> str:
        return "Silence removal"

    async def execute(self, state: PipelineState) -> StageResult:
        req = state.request
        stop_duration = effective_min_duration(req.min_duration, req.left_padding, req.right_padding)

        graph: str | None = None
        if should_remove_silence(req.min_duration, req.left_padding, req.right_padding):
            graph = silence_filter(req.threshold_db, stop_duration)
            logger.info(
                "[%s] Applying silenceremove: stop_duration=%.4f, stop_threshold=%sdB",
                state.request_id,
                stop_duration,
                req.threshold_db,
            )
        else:
            logger.info(
                "[%s] Skipping silenceremove: effective duration %.4f >= min duration %.4f",
                state.request_id,
                stop_duration,
                req.min_duration,
            )

        output = state.temp_path("pass1", ".wav")
        await self._runner.run(
            [state.require_working_file()], graph, output, WAV_OUTPUT_OPTIONS
        )
        state.working_file = output

        return StageResult.success(
            message="Silence removed" if graph else "Silence removal skipped",
            data={"filter": graph, "effective_min_duration": round(stop_duration, 4)},
        )
