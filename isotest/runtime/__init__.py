"""
isotest Runtime.

Process isolation, result models and the execution engine.
"""

from isotest.runtime.engine import ExecutionEngine, run_suite
from isotest.runtime.isolation import (
    DEFAULT_CAPACITY,
    ChannelError,
    DiagnosticChannel,
    IsolationError,
    IsolationOutcome,
    ProcessIsolator,
    classify_exit,
)
from isotest.runtime.models import (
    ExecutionResult,
    ExecutionStatus,
    LifecycleState,
    RunSummary,
    Timing,
)

__all__ = [
    # Engine
    "ExecutionEngine",
    "run_suite",
    # Isolation
    "DEFAULT_CAPACITY",
    "ChannelError",
    "DiagnosticChannel",
    "IsolationError",
    "IsolationOutcome",
    "ProcessIsolator",
    "classify_exit",
    # Models
    "ExecutionResult",
    "ExecutionStatus",
    "LifecycleState",
    "RunSummary",
    "Timing",
]
