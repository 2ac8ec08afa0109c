"""
Recover the source text of assertion operands from the calling frame.

Used to render operands of unrecognized types as the expression the test
author wrote (``assert_eq(widget, other)`` renders ``widget``), the way a
preprocessor would stringify a macro argument.
"""

import ast
import inspect
import linecache
from functools import lru_cache
from types import FrameType


@lru_cache(maxsize=128)
def _parse(filename: str, size: int) -> tuple[str, ast.Module] | None:
    lines = linecache.getlines(filename)
    if not lines:
        return None
    source = "".join(lines)
    try:
        return source, ast.parse(source, filename=filename)
    except (SyntaxError, ValueError):
        return None


def call_argument_sources(frame: FrameType) -> list[str | None]:
    """Source text of each positional argument of the call being executed.

    Args:
        frame: Frame that is currently executing the assertion call.

    Returns:
        One entry per positional argument, or an empty list when the call
        cannot be located (no source file, interactive code, ...).
    """
    info = inspect.getframeinfo(frame, context=0)
    positions = info.positions
    if positions is None or positions.lineno is None or positions.col_offset is None:
        return []

    parsed = _parse(info.filename, len(linecache.getlines(info.filename)))
    if parsed is None:
        return []
    source, tree = parsed

    # Line/column offsets of the CALL instruction span the whole call expression
    for node in ast.walk(tree):
        if (
            isinstance(node, ast.Call)
            and node.lineno == positions.lineno
            and node.col_offset == positions.col_offset
            and node.end_lineno == positions.end_lineno
            and node.end_col_offset == positions.end_col_offset
        ):
            return [ast.get_source_segment(source, arg) for arg in node.args]
    return []


def location_of(frame: FrameType) -> str:
    """``file:line`` of the frame's current instruction."""
    return f"{frame.f_code.co_filename}:{frame.f_lineno}"
