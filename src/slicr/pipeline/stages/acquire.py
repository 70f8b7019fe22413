"""Input acquisition stage: materialize the upload or remote URL locally."""

import asyncio
import logging
import shutil
from pathlib import Path
from typing import BinaryIO

from slicr.errors import ClientInputError, DownloadError
from slicr.models.pipeline import StageResult
from slicr.pipeline.base import PipelineStage
from slicr.pipeline.context import PipelineState
from slicr.services.download import download_to_path, url_suffix

logger = logging.getLogger(__name__)


def _copy_stream(stream: BinaryIO, dest: Path) -> int:
    stream.seek(0)
    with open(dest, "wb") as f:
        shutil.copyfileobj(stream, f)
    return dest.stat().st_size


class AcquireStage(PipelineStage):
    """Copies the uploaded bytes, or downloads the remote URL, to a temp file."""

    def __init__(self, download_timeout: float | None = 120.0) -> None:
        self.download_timeout = download_timeout

    @property
    def name(self) -> str:
        return "acquire"

    @property
    def display_name(self) -> str:
        return "Input acquisition"

    async def execute(self, state: PipelineState) -> StageResult:
        source = state.source
        if not source.is_valid:
            raise ClientInputError("Provide exactly one of audioFile or audioUrl")

        if source.is_upload:
            suffix = Path(source.filename or "").suffix.lower() or ".bin"
            dest = state.temp_path("input", suffix)
            size = await asyncio.to_thread(_copy_stream, source.upload, dest)
            if size == 0:
                raise ClientInputError("Uploaded audio file is empty")
            origin = "upload"
        else:
            dest = state.temp_path("input", url_suffix(source.url))
            try:
                await download_to_path(source.url, dest, timeout=self.download_timeout)
            except DownloadError as e:
                raise ClientInputError(f"Could not fetch audioUrl: {e}") from e
            size = dest.stat().st_size
            origin = "url"

        state.working_file = dest
        logger.info("[%s] Acquired input from %s (%d bytes)", state.request_id, origin, size)
        return StageResult.success(
            message=f"Input acquired from {origin}",
            data={"origin": origin, "bytes": size},
        )
