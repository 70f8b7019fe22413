"""Records of what each stage did during one processing run."""

import time
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class StageStatus(str, Enum):
    """How a stage ended.

    A run that returns a result never contains a fatal failure, so
    ``FAILED`` always means an optional feature was dropped.
    """

    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"


class StageResult(BaseModel):
    """Outcome of one stage; ``data`` holds values worth reporting (rate, track id)."""

    model_config = ConfigDict(frozen=True)

    status: StageStatus
    message: str | None = None
    data: dict[str, Any] | None = None
    elapsed: float | None = Field(None, description="Wall-clock seconds spent in execute")

    @classmethod
    def success(cls, message: str | None = None, data: dict[str, Any] | None = None) -> "StageResult":
        return cls(status=StageStatus.COMPLETED, message=message, data=data)

    @classmethod
    def failure(cls, message: str) -> "StageResult":
        return cls(status=StageStatus.FAILED, message=message)

    @classmethod
    def skipped(cls, message: str | None = None) -> "StageResult":
        return cls(status=StageStatus.SKIPPED, message=message)

    def timed(self, started: float) -> "StageResult":
        """Copy with ``elapsed`` measured from a ``time.monotonic()`` reading."""
        return self.model_copy(update={"elapsed": round(time.monotonic() - started, 3)})


class PipelineResult(BaseModel):
    """Outcome of a successful pipeline run."""

    request_id: str
    audio_url: str
    srt_url: str | None = None
    stages: dict[str, StageResult] = Field(default_factory=dict)

    @property
    def dropped_features(self) -> list[str]:
        """Names of the optional stages that failed and were left out."""
        return [name for name, r in self.stages.items() if r.status == StageStatus.FAILED]
