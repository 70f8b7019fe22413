"""Word-level transcription through an OpenAI-compatible Whisper API."""

import logging
from pathlib import Path
from typing import Any

import httpx

from slicr.errors import TranscriptionError
from slicr.models.transcript import Transcript, TranscriptWord

logger = logging.getLogger(__name__)


class WhisperTranscriptionService:
    """Client for the ``/audio/transcriptions`` endpoint.

    Requests ``verbose_json`` with word timestamps. A missing API key marks
    the service unavailable instead of failing at construction.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str = "https://api.openai.com/v1",
        model: str = "whisper-1",
        timeout: float = 300.0,
        max_upload_bytes: int = 25 * 1024 * 1024,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the transcription client.

        Args:
            api_key: Bearer token for the API.
            base_url: API base URL (without trailing ``/audio/...``).
            model: Transcription model name.
            timeout: HTTP timeout in seconds.
            max_upload_bytes: Largest file the API accepts.
            transport: Optional httpx transport (tests).
        """
        self._api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self.max_upload_bytes = max_upload_bytes
        self._transport = transport

        if not self._api_key:
            logger.warning("WhisperTranscriptionService: No API key found, service unavailable")

    @property
    def is_available(self) -> bool:
        """Whether an API key is configured."""
        return bool(self._api_key)

    async def transcribe(self, audio_path: Path, language: str | None = None) -> Transcript:
        """Transcribe an audio file.

        Args:
            audio_path: Path to the audio file.
            language: Optional ISO-639-1 language hint.

        Returns:
            Transcript with full text and word timings.

        Raises:
            TranscriptionError: If the service is unavailable, the file is
                too large, or the request fails.
        """
        if not self.is_available:
            raise TranscriptionError("Transcription service is not configured (no API key)")

        audio_path = Path(audio_path)
        if not audio_path.exists():
            raise TranscriptionError(f"Audio file not found: {audio_path}")

        size = audio_path.stat().st_size
        if size > self.max_upload_bytes:
            raise TranscriptionError(
                f"Audio is too large to transcribe ({size} bytes > {self.max_upload_bytes})"
            )

        data: dict[str, Any] = {
            "model": self.model,
            "response_format": "verbose_json",
            "timestamp_granularities[]": "word",
        }
        if language:
            data["language"] = language

        headers = {"Authorization": f"Bearer {self._api_key}"}

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            with open(audio_path, "rb") as f:
                files = {"file": (audio_path.name, f, "audio/mpeg")}
                try:
                    response = await client.post(
                        f"{self.base_url}/audio/transcriptions",
                        headers=headers,
                        files=files,
                        data=data,
                    )
                except httpx.RequestError as e:
                    raise TranscriptionError(
                        f"Failed to connect to transcription API: {e}"
                    ) from e

        if response.status_code != 200:
            raise TranscriptionError(
                f"Transcription API returned {response.status_code}: {response.text[:500]}"
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise TranscriptionError("Transcription API returned invalid JSON") from e

        transcript = self._parse_response(payload)
        logger.info(
            "Transcribed '%s': %d words, %d chars",
            audio_path.name,
            len(transcript.words),
            len(transcript.text),
        )
        return transcript

    @staticmethod
    def _parse_response(payload: dict[str, Any]) -> Transcript:
        """Convert a ``verbose_json`` payload to a Transcript.

        Payload format:
            {
                "text": "full text...",
                "language": "english",
                "words": [{"word": "Hello", "start": 0.0, "end": 0.4}, ...]
            }
        """
        words: list[TranscriptWord] = []
        for item in payload.get("words") or []:
            try:
                words.append(
                    TranscriptWord(
                        text=str(item.get("word", "")),
                        start=float(item["start"]),
                        end=float(item["end"]),
                    )
                )
            except (KeyError, TypeError, ValueError):
                logger.debug("Skipping malformed word entry: %r", item)

        return Transcript(
            text=str(payload.get("text") or "").strip(),
            words=words,
            language=str(payload.get("language") or ""),
        )
