"""Aggregation pipeline components: orchestrator, session registry, progress."""

from src.pipeline.orchestrator import AggregationOrchestrator
from src.pipeline.progress_tracker import ProgressTracker
from src.pipeline.session_registry import SessionRegistry

__all__ = [
    "AggregationOrchestrator",
    "ProgressTracker",
    "SessionRegistry",
]
