"""
isotest Assertion Protocol.

Type-directed comparison and formatting, fail-fast assertions and skip
directives usable inside test bodies.
"""

from isotest.assertions.formatting import (
    Formattable,
    ValueDomain,
    classify,
    format_value,
    tagged,
)
from isotest.assertions.outcomes import (
    AssertionFailed,
    OutcomeSignal,
    SkipRequested,
    skip,
    skip_if,
)
from isotest.assertions.protocol import (
    FAILURE_PREFIX,
    Comparison,
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
    render_failure,
)

__all__ = [
    # Formatting
    "Formattable",
    "ValueDomain",
    "classify",
    "format_value",
    "tagged",
    # Control flow
    "AssertionFailed",
    "OutcomeSignal",
    "SkipRequested",
    "skip",
    "skip_if",
    # Assertions
    "FAILURE_PREFIX",
    "Comparison",
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
    "render_failure",
]
