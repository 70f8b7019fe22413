"""Base class for pipeline stages."""

from abc import ABC, abstractmethod

from slicr.models.pipeline import StageResult
from slicr.pipeline.context import PipelineState

# Output options for every intermediate WAV the pipeline writes
WAV_OUTPUT_OPTIONS = ("-ar", "44100", "-ac", "2", "-c:a", "pcm_s16le")


class PipelineStage(ABC):
    """Abstract base class for pipeline stages.

    Each stage is one step from raw upload to published artifact. A
    ``fatal`` stage aborts the request when it fails; a non-fatal stage
    leaves the state as it found it and the run continues without its
    feature.
    """

    fatal: bool = True

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier for this stage."""
        ...

    @property
    @abstractmethod
    def display_name(self) -> str:
        """Human-readable name for logs and error messages."""
        ...

    @abstractmethod
    async def execute(self, state: PipelineState) -> StageResult:
        """Execute this pipeline stage.

        Args:
            state: Shared per-request pipeline state

        Returns:
            StageResult with status and any output data
        """
        ...

    async def validate(self, state: PipelineState) -> bool:
        """Decide whether this stage runs for the current request.

        Override to make the stage conditional.

        Args:
            state: Shared per-request pipeline state

        Returns:
            True if the stage should run, False to skip it
        """
        return True
