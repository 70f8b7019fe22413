"""Services module for Slicr."""

from slicr.services.catalog import NocoDBMusicCatalog
from slicr.services.classifier import ClaudeTrackClassifier
from slicr.services.interfaces import (
    IAudioStageRunner,
    IMusicCatalog,
    IObjectStore,
    ITrackClassifier,
    ITranscriptionService,
)
from slicr.services.ledger import ResourceLedger
from slicr.services.media import AudioStageRunner
from slicr.services.music_selector import MusicSelector
from slicr.services.silence import detect_silence
from slicr.services.storage import LocalObjectStore, S3ObjectStore
from slicr.services.transcription import WhisperTranscriptionService

__all__ = [
    "IAudioStageRunner",
    "IMusicCatalog",
    "IObjectStore",
    "ITrackClassifier",
    "ITranscriptionService",
    "AudioStageRunner",
    "ClaudeTrackClassifier",
    "LocalObjectStore",
    "MusicSelector",
    "NocoDBMusicCatalog",
    "ResourceLedger",
    "S3ObjectStore",
    "WhisperTranscriptionService",
    "detect_silence",
]
