"""Transcript data models."""

import math

from pydantic import BaseModel, Field


class TranscriptWord(BaseModel):
    """A single recognised word with its timing in seconds."""

    text: str
    start: float
    end: float

    @property
    def is_valid(self) -> bool:
        """Whether the word can become a subtitle cue."""
        if not self.text.strip():
            return False
        if not (math.isfinite(self.start) and math.isfinite(self.end)):
            return False
        return 0.0 <= self.start <= self.end


class Transcript(BaseModel):
    """Full transcript text plus word-level timings."""

    text: str = Field(default="")
    words: list[TranscriptWord] = Field(default_factory=list)
    language: str = Field(default="")
