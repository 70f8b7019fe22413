"""Configuration management for Slicr."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Built once at process start and handed to the pipeline and its
    adapters; nothing below the API layer reads the environment directly.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    log_level: str = "INFO"

    # Directories
    temp_dir: Path = Path("./temp")
    output_dir: Path = Path("./outputs")

    # Auth
    api_key: str | None = None
    allowed_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:8080", "https://www.slicr.me"]
    )

    # FFmpeg
    ffmpeg_path: str = "ffmpeg"
    ffprobe_path: str = "ffprobe"
    ffmpeg_timeout: float = 300.0
    ffprobe_timeout: float = 30.0

    # Transcription (OpenAI-compatible Whisper endpoint)
    openai_api_key: str | None = None
    transcription_base_url: str = "https://api.openai.com/v1"
    transcription_model: str = "whisper-1"
    transcription_timeout: float = 300.0
    transcription_max_bytes: int = 25 * 1024 * 1024

    # Music classifier
    anthropic_api_key: str | None = None
    classifier_model: str = "claude-sonnet-4-20250514"
    classifier_timeout: float = 60.0

    # Music catalog (NocoDB)
    nocodb_api_url: str | None = None
    nocodb_auth_token: str | None = None
    nocodb_table_id: str = "mdfijlqr28f4ojj"
    catalog_timeout: float = 30.0

    # Object storage
    s3_bucket_name: str | None = None
    aws_region: str | None = None
    s3_prefix: str = "processed"
    upload_url_expires: int = 3600
    public_base_url: str = "http://localhost:8000"

    # Remote inputs
    download_timeout: float = 120.0

    # Audio defaults
    music_target_lufs: float = -23.0
    music_ducking_db: float = -6.0
    fade_out_seconds: float = 3.0
    tempo_tolerance: float = 0.01
    mp3_bitrate: str = "192k"

    @property
    def s3_enabled(self) -> bool:
        """Whether S3 publishing is configured."""
        return bool(self.s3_bucket_name and self.aws_region)

    def ensure_directories(self) -> None:
        """Create required directories if they don't exist."""
        self.temp_dir.mkdir(parents=True, exist_ok=True)
        self.output_dir.mkdir(parents=True, exist_ok=True)


# Global settings instance
settings = Settings()
