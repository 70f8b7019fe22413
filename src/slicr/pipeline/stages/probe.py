"""Duration probe stage."""

import logging

from slicr.models.pipeline import StageResult
from slicr.pipeline.base import PipelineStage
from slicr.pipeline.context import PipelineState
from slicr.services.interfaces import IAudioStageRunner

logger = logging.getLogger(__name__)


class ProbeDurationStage(PipelineStage):
    """Measures the Pass-1 output. Failure only disables tempo adjustment."""

    fatal = False

    def __init__(self, runner: IAudioStageRunner) -> None:
        self._runner = runner

    @property
    def name(self) -> str:
        return "probe_duration"

    @property
    def display_name(self) -> str:
        return "Duration probe"

    async def execute(self, state: PipelineState) -> StageResult:
        duration = await self._runner.probe_duration(state.require_working_file())
        state.probed_duration = duration
        logger.info("[%s] Duration after silence removal: %.3fs", state.request_id, duration)
        return StageResult.success(data={"duration": duration})
