"""Transcription stage: transcript text for music selection, optional SRT."""

import logging

from slicr.models.pipeline import StageResult
from slicr.pipeline.base import PipelineStage
from slicr.pipeline.context import PipelineState
from slicr.services.interfaces import IAudioStageRunner, ITranscriptionService
from slicr.services.subtitles import write_srt

logger = logging.getLogger(__name__)

# Compact proxy keeps long recordings under the transcription upload limit
PROXY_OUTPUT_OPTIONS = ("-ar", "16000", "-ac", "1", "-c:a", "libmp3lame", "-b:a", "64k")


class TranscribeStage(PipelineStage):
    """Transcribes the processed voice-over.

    Runs when subtitles were requested or music must be auto-selected.
    Failure leaves the run without a transcript or subtitles.
    """

    fatal = False

    def __init__(
        self,
        runner: IAudioStageRunner,
        transcriber: ITranscriptionService | None,
    ) -> None:
        self._runner = runner
        self._transcriber = transcriber

    @property
    def name(self) -> str:
        return "transcribe"

    @property
    def display_name(self) -> str:
        return "Transcription"

    async def validate(self, state: PipelineState) -> bool:
        if not state.request.needs_transcript:
            return False
        if self._transcriber is None or not self._transcriber.is_available:
            logger.info("[%s] Transcription requested but no service configured", state.request_id)
            return False
        return True

    async def execute(self, state: PipelineState) -> StageResult:
        proxy = state.temp_path("transcript_proxy", ".mp3")
        await self._runner.run([state.require_working_file()], None, proxy, PROXY_OUTPUT_OPTIONS)

        transcript = await self._transcriber.transcribe(proxy)
        state.transcript = transcript
        logger.info(
            "[%s] Transcribed %d characters, %d words",
            state.request_id,
            len(transcript.text),
            len(transcript.words),
        )

        cues = 0
        if state.request.transcribe:
            srt_path = state.temp_path("subtitles", ".srt")
            if write_srt(transcript.words, srt_path) is not None:
                state.subtitle_file = srt_path
                cues = sum(1 for w in transcript.words if w.is_valid)
            else:
                logger.info("[%s] No valid word timings; no subtitles written", state.request_id)

        return StageResult.success(
            data={"characters": len(transcript.text), "words": len(transcript.words), "cues": cues}
        )
