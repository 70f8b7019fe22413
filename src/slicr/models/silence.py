"""Silence detection data models."""

from pydantic import BaseModel, Field, model_validator


class SilenceInterval(BaseModel):
    """A detected silent range in seconds."""

    start: float = Field(..., ge=0.0, description="Start time in seconds")
    end: float = Field(..., ge=0.0, description="End time in seconds")

    @model_validator(mode="after")
    def validate_range(self) -> "SilenceInterval":
        """Ensure end is after start."""
        if self.end <= self.start:
            raise ValueError("end must be greater than start")
        return self

    @property
    def duration(self) -> float:
        """Return duration in seconds."""
        return self.end - self.start

    def overlaps(self, other: "SilenceInterval") -> bool:
        """Check if this interval overlaps with another."""
        return self.start < other.end and other.start < self.end
