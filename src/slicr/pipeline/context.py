"""Pipeline execution state."""

import time
import uuid
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from slicr.models.music import MusicTrack
from slicr.models.pipeline import StageResult
from slicr.models.request import InputSource, ProcessingRequest
from slicr.models.transcript import Transcript
from slicr.services.ledger import ResourceLedger


class PipelineState(BaseModel):
    """Mutable per-request state shared by the stages.

    Created when a request starts; every temp path it hands out is owned
    by its ledger and removed when the run ends.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    request_id: str = Field(..., description="Unique id for this run")
    request: ProcessingRequest
    source: InputSource
    work_dir: Path = Field(..., description="Directory for temp files")
    ledger: ResourceLedger

    working_file: Path | None = Field(None, description="Output of the latest stage")
    probed_duration: float | None = Field(None, description="Pass-1 duration in seconds")
    playback_rate: float = Field(1.0, description="Applied tempo rate")
    transcript: Transcript | None = None
    subtitle_file: Path | None = None
    music_track: MusicTrack | None = None

    audio_url: str | None = None
    srt_url: str | None = None

    stage_results: dict[str, StageResult] = Field(default_factory=dict)

    @classmethod
    def create(
        cls,
        request: ProcessingRequest,
        source: InputSource,
        work_dir: Path,
    ) -> "PipelineState":
        request_id = uuid.uuid4().hex[:12]
        return cls(
            request_id=request_id,
            request=request,
            source=source,
            work_dir=Path(work_dir),
            ledger=ResourceLedger(owner=request_id),
        )

    def temp_path(self, label: str, suffix: str) -> Path:
        """Reserve a unique temp path and register it with the ledger."""
        timestamp = int(time.time() * 1000)
        name = f"{self.request_id}_{timestamp}_{label}{suffix}"
        return self.ledger.track(self.work_dir / name)

    def require_working_file(self) -> Path:
        if self.working_file is None:
            raise RuntimeError("No working file; the acquire stage has not run")
        return self.working_file

    @property
    def transcript_text(self) -> str | None:
        if self.transcript is None:
            return None
        return self.transcript.text or None
