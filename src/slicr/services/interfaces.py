"""Service interfaces (Protocols) for Slicr.

These protocols define the contracts the pipeline expects from its
external collaborators, so tests and alternative backends can stand in
for the real clients.
"""

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from slicr.models.music import MusicTrack
from slicr.models.transcript import Transcript


class IAudioStageRunner(Protocol):
    """Interface for one-shot transcoder invocations (FFmpeg wrapper)."""

    async def run(
        self,
        input_paths: Sequence[Path],
        filter_graph: str | None,
        output_path: Path,
        output_options: Sequence[str] = (),
    ) -> Path:
        """Run one filter/encode operation and return the output path."""
        ...

    async def probe_duration(self, path: Path) -> float:
        """Return a media file's duration in seconds."""
        ...


class ITranscriptionService(Protocol):
    """Interface for speech-to-text with word timings."""

    @property
    def is_available(self) -> bool:
        ...

    async def transcribe(self, audio_path: Path, language: str | None = None) -> Transcript:
        """Transcribe audio to text with word timestamps."""
        ...


class IMusicCatalog(Protocol):
    """Interface for the music track catalog."""

    @property
    def is_available(self) -> bool:
        ...

    async def list_tracks(self) -> list[MusicTrack]:
        ...

    async def get_track(self, track_id: str) -> MusicTrack | None:
        ...


class ITrackClassifier(Protocol):
    """Interface for the prompt-in, text-out model call."""

    @property
    def is_available(self) -> bool:
        ...

    async def classify(self, prompt: str) -> str:
        ...


class IObjectStore(Protocol):
    """Interface for durable artifact storage."""

    async def upload(self, path: Path, key: str, content_type: str) -> str:
        """Upload a file under ``key`` and return its public URL."""
        ...
