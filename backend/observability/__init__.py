"""Observability helpers."""

from backend.observability.otel import (
    initialize,
    shutdown,
    start_span,
    record_analysis,
    record_ai_call,
)

__all__ = [
    "initialize",
    "shutdown",
    "start_span",
    "record_analysis",
    "record_ai_call",
]
