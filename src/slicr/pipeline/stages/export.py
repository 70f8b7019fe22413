"""Output format stage."""

import logging

from slicr.models.pipeline import StageResult
from slicr.models.request import ExportFormat
from slicr.pipeline.base import PipelineStage
from slicr.pipeline.context import PipelineState
from slicr.services.interfaces import IAudioStageRunner

logger = logging.getLogger(__name__)


class ExportFormatStage(PipelineStage):
    """Transcodes the final WAV to MP3 when requested.

    On failure the WAV is published instead.
    """

    fatal = False

    def __init__(self, runner: IAudioStageRunner, bitrate: str = "192k") -> None:
        self._runner = runner
        self.bitrate = bitrate

    @property
    def name(self) -> str:
        return "export_format"

    @property
    def display_name(self) -> str:
        return "MP3 export"

    async def validate(self, state: PipelineState) -> bool:
        return state.request.export_format == ExportFormat.MP3

    async def execute(self, state: PipelineState) -> StageResult:
        output = state.temp_path("export", ".mp3")
        await self._runner.run(
            [state.require_working_file()],
            None,
            output,
            ("-c:a", "libmp3lame", "-b:a", self.bitrate),
        )
        state.working_file = output
        logger.info("[%s] Exported MP3 at %s", state.request_id, self.bitrate)
        return StageResult.success(data={"bitrate": self.bitrate})
