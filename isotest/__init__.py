"""
isotest - Crash-proof unit testing.

Every test body runs in its own child process, so a segmentation fault, an
abort or a runaway assertion in one test cannot take the suite down with it.

Usage:
    isotest run <path>     # Run tests
    isotest list <path>    # List tests without running them
    isotest init           # Write a starter configuration
"""

__version__ = "0.1.0"

from isotest.assertions import (
    AssertionFailed,
    Comparison,
    SkipRequested,
    ValueDomain,
    assert_eq,
    assert_false,
    assert_ge,
    assert_gt,
    assert_le,
    assert_lt,
    assert_ne,
    assert_not_null,
    assert_null,
    assert_streq,
    assert_strne,
    assert_true,
    compare,
    skip,
    skip_if,
    tagged,
)
from isotest.config import ConfigError, ConfigLoader, RunnerConfig
from isotest.declare import fixture, parametrize, setup, teardown, test
from isotest.runtime import (
    ExecutionEngine,
    ExecutionResult,
    ExecutionStatus,
    IsolationError,
    RunSummary,
    run_suite,
)
from isotest.testing import Registry, case, default_registry

__all__ = [
    "__version__",
    # Declarations
    "case",
    "fixture",
    "parametrize",
    "setup",
    "teardown",
    "test",
    # Assertions
    "AssertionFailed",
    "Comparison",
    "SkipRequested",
    "ValueDomain",
    "assert_eq",
    "assert_false",
    "assert_ge",
    "assert_gt",
    "assert_le",
    "assert_lt",
    "assert_ne",
    "assert_not_null",
    "assert_null",
    "assert_streq",
    "assert_strne",
    "assert_true",
    "compare",
    "skip",
    "skip_if",
    "tagged",
    # Running
    "ConfigError",
    "ConfigLoader",
    "ExecutionEngine",
    "ExecutionResult",
    "ExecutionStatus",
    "IsolationError",
    "Registry",
    "RunSummary",
    "RunnerConfig",
    "default_registry",
    "run_suite",
]
