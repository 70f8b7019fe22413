"""Data models for Slicr."""

from slicr.models.music import MusicTrack
from slicr.models.pipeline import PipelineResult, StageResult, StageStatus
from slicr.models.request import ExportFormat, InputSource, ProcessingRequest
from slicr.models.silence import SilenceInterval
from slicr.models.transcript import Transcript, TranscriptWord

__all__ = [
    # Request
    "ProcessingRequest",
    "ExportFormat",
    "InputSource",
    # Silence
    "SilenceInterval",
    # Music
    "MusicTrack",
    # Transcript
    "Transcript",
    "TranscriptWord",
    # Pipeline
    "StageResult",
    "StageStatus",
    "PipelineResult",
]
