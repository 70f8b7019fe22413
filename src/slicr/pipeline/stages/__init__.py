"""Pipeline stages, in execution order."""

from slicr.pipeline.stages.acquire import AcquireStage
from slicr.pipeline.stages.export import ExportFormatStage
from slicr.pipeline.stages.music import ApplyMusicStage, SelectMusicStage
from slicr.pipeline.stages.probe import ProbeDurationStage
from slicr.pipeline.stages.publish import PublishStage
from slicr.pipeline.stages.silence import RemoveSilenceStage
from slicr.pipeline.stages.tempo import AdjustTempoStage
from slicr.pipeline.stages.transcribe import TranscribeStage

__all__ = [
    "AcquireStage",
    "RemoveSilenceStage",
    "ProbeDurationStage",
    "AdjustTempoStage",
    "TranscribeStage",
    "SelectMusicStage",
    "ApplyMusicStage",
    "ExportFormatStage",
    "PublishStage",
]
