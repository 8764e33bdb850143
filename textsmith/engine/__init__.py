"""Rule-based rewrite and analysis engine."""

from textsmith.engine.coordinator import ExecutionCoordinator, RequestState
from textsmith.engine.context import ExecutionContext
from textsmith.engine.models import (
    AnalysisResult,
    ResponseEnvelope,
    TransformResult,
    TransformSettings,
)
from textsmith.engine.pipeline import TransformPipeline

__all__ = [
    "AnalysisResult",
    "ExecutionContext",
    "ExecutionCoordinator",
    "RequestState",
    "ResponseEnvelope",
    "TransformPipeline",
    "TransformResult",
    "TransformSettings",
]
