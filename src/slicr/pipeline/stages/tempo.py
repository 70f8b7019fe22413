"""Tempo adjustment stage (Pass 2)."""

import logging

from slicr.models.pipeline import StageResult
from slicr.pipeline.base import WAV_OUTPUT_OPTIONS, PipelineStage
from slicr.pipeline.context import PipelineState
from slicr.services.filters import compute_playback_rate, tempo_filter
from slicr.services.interfaces import IAudioStageRunner

logger = logging.getLogger(__name__)


class AdjustTempoStage(PipelineStage):
    """Speeds audio up to fit the requested target duration.

    Runs only when the probed duration exceeds the target by more than the
    tolerance; never slows audio down.
    """

    def __init__(self, runner: IAudioStageRunner, tolerance: float = 0.01) -> None:
        self._runner = runner
        self.tolerance = tolerance

    @property
    def name(self) -> str:
        return "adjust_tempo"

    @property
    def display_name(self) -> str:
        return "Tempo adjustment"

    def _rate(self, state: PipelineState) -> float | None:
        return compute_playback_rate(
            state.probed_duration, state.request.target_duration, self.tolerance
        )

    async def validate(self, state: PipelineState) -> bool:
        return self._rate(state) is not None

    async def execute(self, state: PipelineState) -> StageResult:
        rate = self._rate(state)
        if rate is None:
            return StageResult.skipped("No tempo change needed")

        logger.info(
            "[%s] Target %.3fs from %.3fs: applying atempo=%.4f",
            state.request_id,
            state.request.target_duration,
            state.probed_duration,
            rate,
        )
        output = state.temp_path("tempo", ".wav")
        await self._runner.run(
            [state.require_working_file()], tempo_filter(rate), output, WAV_OUTPUT_OPTIONS
        )
        state.working_file = output
        state.playback_rate = rate

        return StageResult.success(message=f"Tempo x{rate:.4f}", data={"rate": rate})
