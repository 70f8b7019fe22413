"""Custom exceptions for Slicr.

Each exception carries the HTTP status the API layer reports for it.
"""


class SlicrError(Exception):
    """Base exception for Slicr."""

    status_code: int = 500


class ClientInputError(SlicrError):
    """Missing or invalid input or parameters."""

    status_code = 400


class AuthError(SlicrError):
    """Missing or incorrect credential."""

    status_code = 403


class AuthConfigurationError(AuthError):
    """Server has no credential configured to check against."""

    status_code = 500


class FFmpegError(SlicrError):
    """FFmpeg or ffprobe execution failed."""

    def __init__(self, message: str, stderr: str = "") -> None:
        super().__init__(message)
        self.stderr = stderr


class ServiceUnavailableError(SlicrError):
    """An optional external service is unreachable or unconfigured."""

    pass


class TranscriptionError(ServiceUnavailableError):
    """Transcription failed."""

    pass


class ClassifierError(ServiceUnavailableError):
    """Music classifier call failed."""

    pass


class CatalogError(ServiceUnavailableError):
    """Music catalog lookup failed."""

    pass


class DownloadError(SlicrError):
    """Fetching a remote file failed."""

    pass


class PublishError(SlicrError):
    """Uploading an artifact to storage failed."""

    pass


class PipelineError(SlicrError):
    """Pipeline execution failed."""

    pass


class NotFoundError(SlicrError):
    """Requested artifact does not exist."""

    status_code = 404
