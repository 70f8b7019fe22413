"""Processing request models."""

from enum import Enum
from typing import BinaryIO

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


class ExportFormat(str, Enum):
    """Output audio container."""

    WAV = "wav"
    MP3 = "mp3"


class ProcessingRequest(BaseModel):
    """Parameters for one pipeline run.

    Field aliases follow the JSON keys clients send in the ``params``
    form field.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    threshold_db: float = Field(-40.0, le=0.0, alias="thresholdDb")
    min_duration: float = Field(0.2, gt=0.0, alias="minDuration")
    left_padding: float = Field(0.0332, ge=0.0, alias="leftPadding")
    right_padding: float = Field(0.0332, ge=0.0, alias="rightPadding")
    target_duration: float | None = Field(
        None,
        gt=0.0,
        validation_alias=AliasChoices(
            "targetDuration", "targetDurationSeconds", "target_duration"
        ),
    )
    transcribe: bool = Field(
        False,
        validation_alias=AliasChoices("transcribe", "transcribeRequested"),
    )
    export_format: ExportFormat = Field(ExportFormat.WAV, alias="exportFormat")
    add_music: bool = Field(False, alias="addMusic")
    auto_select_music: bool = Field(False, alias="autoSelectMusic")
    music_track_id: str | None = Field(
        None,
        validation_alias=AliasChoices("musicTrackId", "manualTrackId", "music_track_id"),
    )
    music_ducking_db: float | None = Field(
        None, ge=-40.0, le=0.0, alias="musicDuckingDb"
    )
    music_target_lufs: float | None = Field(
        None, ge=-70.0, le=0.0, alias="musicTargetLufs"
    )

    @field_validator("music_track_id", mode="before")
    @classmethod
    def coerce_track_id(cls, value: object) -> object:
        """Catalog ids may arrive as JSON numbers."""
        if isinstance(value, bool):
            return value
        if isinstance(value, int):
            return str(value)
        if isinstance(value, float):
            if not value.is_integer():
                raise ValueError(f"Track id must be a whole number, got {value}")
            return str(int(value))
        if isinstance(value, str):
            return value.strip() or None
        return value

    @model_validator(mode="after")
    def normalize_music_fields(self) -> "ProcessingRequest":
        """Drop music fields that the other flags make irrelevant."""
        if not self.add_music:
            self.auto_select_music = False
            self.music_track_id = None
            self.music_ducking_db = None
            self.music_target_lufs = None
        elif self.auto_select_music:
            self.music_track_id = None
        return self

    @property
    def needs_transcript(self) -> bool:
        """Whether any downstream stage consumes a transcript."""
        return self.transcribe or (self.add_music and self.auto_select_music)


class InputSource:
    """Where the input audio comes from: an upload stream xor a remote URL."""

    def __init__(
        self,
        upload: BinaryIO | None = None,
        filename: str | None = None,
        url: str | None = None,
    ) -> None:
        self.upload = upload
        self.filename = filename
        self.url = url.strip() if url else None

    @property
    def is_upload(self) -> bool:
        return self.upload is not None

    @property
    def is_valid(self) -> bool:
        """Exactly one of upload and URL is present."""
        return (self.upload is not None) != bool(self.url)

    def __repr__(self) -> str:
        if self.upload is not None:
            return f"InputSource(upload={self.filename!r})"
        return f"InputSource(url={self.url!r})"
