"""
Generic assertion protocol.

``compare(a, b, op)`` is the single primitive: both operands are captured
once (they are ordinary call arguments), classified into value domains,
compared as plain Python scalars and, on failure, rendered into

    Expression is false: <a> <op> <b>

before the running test is terminated with AssertionFailed. There is no
accumulation: the first failing assertion ends the test.

Every other assertion is a special case of compare with specialized
operands.
"""

import operator
import sys
from collections.abc import Callable
from enum import Enum
from types import FrameType
from typing import Any

from isotest.assertions.formatting import (
    Formattable,
    ValueDomain,
    classify,
    tagged,
    zero_of,
)
from isotest.assertions.outcomes import AssertionFailed
from isotest.assertions.source import call_argument_sources, location_of

FAILURE_PREFIX = "Expression is false: "


class Comparison(str, Enum):
    """Comparison operators, valued by their symbol."""

    EQ = "=="
    NE = "!="
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="

    @property
    def symbol(self) -> str:
        return self.value


_OPERATORS: dict[Comparison, Callable[[Any, Any], Any]] = {
    Comparison.EQ: operator.eq,
    Comparison.NE: operator.ne,
    Comparison.LT: operator.lt,
    Comparison.LE: operator.le,
    Comparison.GT: operator.gt,
    Comparison.GE: operator.ge,
}


def render_failure(a: Formattable, op: Comparison, b: Formattable) -> str:
    """Render the diagnostic line for a comparison that did not hold."""
    return f"{FAILURE_PREFIX}{a.render()} {op.symbol} {b.render()}"


def _scalars(a: Formattable, b: Formattable) -> tuple[Any, Any]:
    # None is the null address only when compared against another address;
    # against any other domain it stays None, so 0 == None does not hold
    if (a.domain is ValueDomain.ADDRESS) != (b.domain is ValueDomain.ADDRESS):
        left = None if a.domain is ValueDomain.ADDRESS and a.value is None else a.scalar()
        right = None if b.domain is ValueDomain.ADDRESS and b.value is None else b.scalar()
        return left, right
    return a.scalar(), b.scalar()


def _holds(a: Formattable, b: Formattable, op: Comparison) -> bool:
    left, right = _scalars(a, b)
    try:
        return bool(_OPERATORS[op](left, right))
    except TypeError:
        # Unordered operands, such as None against a number
        return False


def _check(
    a: Formattable,
    b: Formattable,
    op: Comparison,
    frame: FrameType | None,
) -> None:
    if not _holds(a, b, op):
        location = location_of(frame) if frame is not None else None
        raise AssertionFailed(render_failure(a, op, b), location=location)


def _operands(frame: FrameType | None, *values: Any) -> list[Formattable]:
    sources: list[str | None] = call_argument_sources(frame) if frame is not None else []
    sources += [None] * (len(values) - len(sources))
    return [classify(value, source) for value, source in zip(values, sources, strict=False)]


def _caller() -> FrameType | None:
    # Frame of whoever called the public assertion function
    try:
        return sys._getframe(2)
    except ValueError:
        return None


# =============================================================================
# Primitive
# =============================================================================


def compare(a: Any, b: Any, op: Comparison | str = Comparison.EQ) -> None:
    """Assert that ``a <op> b`` holds.

    Args:
        a: Left operand (any supported domain, or a ``tagged()`` value).
        b: Right operand.
        op: A Comparison or its symbol ("==", "!=", "<", "<=", ">", ">=").

    Raises:
        AssertionFailed: If the comparison does not hold.
    """
    frame = _caller()
    left, right = _operands(frame, a, b)
    _check(left, right, Comparison(op), frame)


def assert_eq(a: Any, b: Any) -> None:
    """Assert ``a == b``."""
    frame = _caller()
    left, right = _operands(frame, a, b)
    _check(left, right, Comparison.EQ, frame)


def assert_ne(a: Any, b: Any) -> None:
    """Assert ``a != b``."""
    frame = _caller()
    left, right = _operands(frame, a, b)
    _check(left, right, Comparison.NE, frame)


def assert_lt(a: Any, b: Any) -> None:
    """Assert ``a < b``."""
    frame = _caller()
    left, right = _operands(frame, a, b)
    _check(left, right, Comparison.LT, frame)


def assert_le(a: Any, b: Any) -> None:
    """Assert ``a <= b``."""
    frame = _caller()
    left, right = _operands(frame, a, b)
    _check(left, right, Comparison.LE, frame)


def assert_gt(a: Any, b: Any) -> None:
    """Assert ``a > b``."""
    frame = _caller()
    left, right = _operands(frame, a, b)
    _check(left, right, Comparison.GT, frame)


def assert_ge(a: Any, b: Any) -> None:
    """Assert ``a >= b``."""
    frame = _caller()
    left, right = _operands(frame, a, b)
    _check(left, right, Comparison.GE, frame)


# =============================================================================
# Derived shorthands
# =============================================================================


def _truth_operands(frame: FrameType | None, value: Any) -> tuple[Formattable, Formattable]:
    (operand,) = _operands(frame, value)
    zero = zero_of(operand)
    if zero is None:
        # No zero value for arbitrary objects: compare their truth value instead
        truth = bool(value)
        return (
            Formattable(truth, ValueDomain.BOOLEAN, source=operand.source),
            Formattable(False, ValueDomain.BOOLEAN),
        )
    return operand, zero


def assert_true(value: Any) -> None:
    """Assert that ``value`` differs from the zero value of its own type."""
    frame = _caller()
    operand, zero = _truth_operands(frame, value)
    _check(operand, zero, Comparison.NE, frame)


def assert_false(value: Any) -> None:
    """Assert that ``value`` equals the zero value of its own type."""
    frame = _caller()
    operand, zero = _truth_operands(frame, value)
    _check(operand, zero, Comparison.EQ, frame)


def assert_null(pointer: Any) -> None:
    """Assert that ``pointer`` is null (``None``, a null ctypes pointer or 0)."""
    frame = _caller()
    null = tagged(None, ValueDomain.ADDRESS)
    _check(tagged(pointer, ValueDomain.ADDRESS), null, Comparison.EQ, frame)


def assert_not_null(pointer: Any) -> None:
    """Assert that ``pointer`` is not null."""
    frame = _caller()
    null = tagged(None, ValueDomain.ADDRESS)
    _check(tagged(pointer, ValueDomain.ADDRESS), null, Comparison.NE, frame)


def _text(value: Any) -> Formattable:
    if value is None:
        return Formattable(None, ValueDomain.STRING)
    operand = classify(value)
    scalar = operand.scalar() if operand.domain is not ValueDomain.UNKNOWN else value
    if isinstance(scalar, (bytes, bytearray)):
        scalar = bytes(scalar).decode("utf-8", errors="replace")
    if scalar is not None and not isinstance(scalar, str):
        raise TypeError(f"String assertion needs string operands, got {type(value).__name__}")
    return Formattable(scalar, ValueDomain.STRING)


def assert_streq(a: Any, b: Any) -> None:
    """Assert that two strings (``str``, ``bytes`` or ``c_char_p``) have equal content."""
    frame = _caller()
    _check(_text(a), _text(b), Comparison.EQ, frame)


def assert_strne(a: Any, b: Any) -> None:
    """Assert that two strings differ in content."""
    frame = _caller()
    _check(_text(a), _text(b), Comparison.NE, frame)
