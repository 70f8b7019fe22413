"""Request and response schemas for the Slicr API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from slicr.models.music import MusicTrack
from slicr.models.silence import SilenceInterval


class CamelModel(BaseModel):
    """Snake-case fields, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ------------------------------------------------------------------
# Processing
# ------------------------------------------------------------------


class ProcessResponse(CamelModel):
    success: bool = True
    audio_url: str
    srt_url: str | None = None


class ErrorResponse(BaseModel):
    success: bool = False
    error: str


# ------------------------------------------------------------------
# Music catalog
# ------------------------------------------------------------------


class MusicTrackItem(BaseModel):
    id: str
    name: str
    url: str
    mood: str = ""
    description: str = ""
    lufs: float | None = None
    duration: float | None = None

    @classmethod
    def from_track(cls, track: MusicTrack) -> MusicTrackItem:
        return cls(
            id=track.id,
            name=track.title,
            url=track.source_url,
            mood=track.mood,
            description=track.description,
            lufs=track.loudness_lufs,
            duration=track.duration_seconds,
        )


class MusicTracksResponse(BaseModel):
    success: bool = True
    tracks: list[MusicTrackItem] = Field(default_factory=list)


# ------------------------------------------------------------------
# Direct uploads
# ------------------------------------------------------------------


class UploadUrlRequest(CamelModel):
    file_name: str = Field(..., min_length=1, description="Client-side file name")
    content_type: str = Field(..., min_length=1, description="MIME type of the upload")


class UploadUrlResponse(CamelModel):
    success: bool = True
    upload_url: str
    s3_key: str
    download_url: str


# ------------------------------------------------------------------
# Silence preview
# ------------------------------------------------------------------


class SilencePreviewResponse(CamelModel):
    success: bool = True
    sample_rate: int
    duration: float
    intervals: list[SilenceInterval] = Field(default_factory=list)
