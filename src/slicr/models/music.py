"""Music catalog data models."""

from pydantic import BaseModel, ConfigDict, Field


class MusicTrack(BaseModel):
    """A background music track as listed in the catalog."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Catalog record id")
    title: str = Field(..., description="Track title, unique within the catalog")
    description: str = Field(default="")
    mood: str = Field(default="")
    loudness_lufs: float | None = Field(None, description="Integrated loudness")
    duration_seconds: float | None = Field(None, description="Track length")
    source_url: str = Field(..., description="Where the audio can be downloaded")

    def catalog_line(self) -> str:
        """Format the track for a numbered selection prompt."""
        return f"{self.title} — {self.description} [{self.mood}]"
