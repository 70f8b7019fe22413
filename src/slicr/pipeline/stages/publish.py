"""Publish stage: upload the final audio and subtitles."""

import logging
import time

from slicr.models.pipeline import StageResult
from slicr.pipeline.base import PipelineStage
from slicr.pipeline.context import PipelineState
from slicr.services.interfaces import IObjectStore
from slicr.services.storage import content_type_for

logger = logging.getLogger(__name__)


class PublishStage(PipelineStage):
    """Uploads artifacts to the object store under per-request keys."""

    def __init__(self, store: IObjectStore, prefix: str = "processed") -> None:
        self._store = store
        self.prefix = prefix.strip("/")

    @property
    def name(self) -> str:
        return "publish"

    @property
    def display_name(self) -> str:
        return "Publish"

    def object_key(self, state: PipelineState, suffix: str, timestamp: int) -> str:
        stem = f"{state.request_id}_{timestamp}{suffix}"
        return f"{self.prefix}/{stem}" if self.prefix else stem

    async def execute(self, state: PipelineState) -> StageResult:
        audio = state.require_working_file()
        timestamp = int(time.time() * 1000)

        key = self.object_key(state, audio.suffix, timestamp)
        state.audio_url = await self._store.upload(audio, key, content_type_for(audio))

        if state.subtitle_file is not None:
            srt_key = self.object_key(state, ".srt", timestamp)
            state.srt_url = await self._store.upload(
                state.subtitle_file, srt_key, content_type_for(state.subtitle_file)
            )

        logger.info("[%s] Published %s", state.request_id, state.audio_url)
        return StageResult.success(data={"audio_url": state.audio_url, "srt_url": state.srt_url})
