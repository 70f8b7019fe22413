"""Audio processing pipeline."""

from slicr.pipeline.base import PipelineStage
from slicr.pipeline.context import PipelineState
from slicr.pipeline.orchestrator import PipelineOrchestrator

__all__ = ["PipelineOrchestrator", "PipelineStage", "PipelineState"]
