"""Shared helpers: errors, logging and run tracing."""

from .errors import PreconditionViolationError, UnreconcilableStateError
from .logging import TRACE_LEVEL, configure_logging
from .trace import RealignTracer, TraceEvent

__all__ = [
    "PreconditionViolationError",
    "RealignTracer",
    "TRACE_LEVEL",
    "TraceEvent",
    "UnreconcilableStateError",
    "configure_logging",
]
