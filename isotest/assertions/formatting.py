"""
Type-directed value formatting for assertion diagnostics.

Each operand of an assertion is classified into a ValueDomain, either from its
runtime type (Python builtins and ctypes scalars, strings and pointers) or
from an explicit tag supplied by the caller through ``tagged()``. The domain
selects both how the operand is compared and how it is rendered, so callers
never pass format strings.

Unrecognized types render as the literal source text of the operand
expression, falling back to ``repr`` when no source is available.
"""

import ctypes
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any


class ValueDomain(str, Enum):
    """Operand domains understood by the assertion protocol."""

    BOOLEAN = "boolean"
    SIGNED = "signed"
    UNSIGNED = "unsigned"
    CHARACTER = "character"
    FLOAT = "float"
    DOUBLE = "double"
    EXTENDED = "extended"
    SIZE = "size"
    STRING = "string"
    BYTES = "bytes"
    ADDRESS = "address"
    UNKNOWN = "unknown"


INTEGER_DOMAINS = frozenset({ValueDomain.SIGNED, ValueDomain.UNSIGNED, ValueDomain.SIZE})

# ctypes integer types -> signedness. Platform aliases (c_int64 is c_long, ...)
# collapse onto the same keys, which is harmless since signedness agrees.
_CTYPES_INTEGERS: dict[type, bool] = {
    ctypes.c_byte: True,
    ctypes.c_short: True,
    ctypes.c_int: True,
    ctypes.c_long: True,
    ctypes.c_longlong: True,
    ctypes.c_ubyte: False,
    ctypes.c_ushort: False,
    ctypes.c_uint: False,
    ctypes.c_ulong: False,
    ctypes.c_ulonglong: False,
}

# c_longdouble is an alias of c_double on some platforms; listing it first
# lets the DOUBLE entry win in that case.
_CTYPES_SIMPLE: dict[type, ValueDomain] = {
    ctypes.c_bool: ValueDomain.BOOLEAN,
    ctypes.c_char: ValueDomain.CHARACTER,
    ctypes.c_wchar: ValueDomain.CHARACTER,
    ctypes.c_longdouble: ValueDomain.EXTENDED,
    ctypes.c_float: ValueDomain.FLOAT,
    ctypes.c_double: ValueDomain.DOUBLE,
    ctypes.c_char_p: ValueDomain.STRING,
    ctypes.c_wchar_p: ValueDomain.STRING,
    ctypes.c_void_p: ValueDomain.ADDRESS,
}


@dataclass(frozen=True)
class Formattable:
    """An operand captured together with its domain.

    Attributes:
        value: The operand exactly as passed to the assertion.
        domain: Domain selecting comparison and rendering rules.
        width: Bit width for integer domains, when known.
        source: Literal source text of the operand expression, when known.
    """

    value: Any
    domain: ValueDomain
    width: int | None = None
    source: str | None = None

    def scalar(self) -> Any:
        """Plain Python value used for comparison."""
        return _SCALARS.get(self.domain, _identity)(self)

    def render(self) -> str:
        """Diagnostic rendering of the operand."""
        return _RENDERERS[self.domain](self)


def tagged(value: Any, domain: ValueDomain | str, width: int | None = None) -> Formattable:
    """Tag a value with an explicit domain.

    Used where the runtime type does not carry enough information, for
    instance a size, an unsigned quantity held in a Python ``int``, or an
    integer that should be treated as an address.

    Example:
        >>> tagged(255, "unsigned", width=8).render()
        '255 (0xff)'
    """
    return Formattable(value=value, domain=ValueDomain(domain), width=width)


def classify(value: Any, source: str | None = None) -> Formattable:
    """Select the domain of an operand from its runtime type."""
    if isinstance(value, Formattable):
        if source is not None and value.source is None:
            return Formattable(value.value, value.domain, value.width, source)
        return value

    # bool first: it is an int subclass
    if isinstance(value, bool):
        return Formattable(value, ValueDomain.BOOLEAN, source=source)
    if isinstance(value, int):
        return Formattable(value, ValueDomain.SIGNED, source=source)
    if isinstance(value, float):
        return Formattable(value, ValueDomain.DOUBLE, width=64, source=source)
    if isinstance(value, str):
        return Formattable(value, ValueDomain.STRING, source=source)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return Formattable(value, ValueDomain.BYTES, source=source)
    if value is None:
        return Formattable(value, ValueDomain.ADDRESS, source=source)

    for klass in type(value).__mro__:
        if klass in _CTYPES_INTEGERS:
            domain = ValueDomain.SIGNED if _CTYPES_INTEGERS[klass] else ValueDomain.UNSIGNED
            return Formattable(value, domain, width=ctypes.sizeof(klass) * 8, source=source)
        if klass in _CTYPES_SIMPLE:
            width = ctypes.sizeof(klass) * 8 if klass in _FLOAT_TYPES else None
            return Formattable(value, _CTYPES_SIMPLE[klass], width=width, source=source)
    if isinstance(value, ctypes._Pointer):
        return Formattable(value, ValueDomain.ADDRESS, source=source)

    return Formattable(value, ValueDomain.UNKNOWN, source=source)


def format_value(value: Any, source: str | None = None) -> str:
    """Classify and render a value in one step."""
    return classify(value, source).render()


def address_of(value: Any) -> int:
    """Numeric address of a pointer-like operand (0 for null).

    ``None`` and null ctypes pointers map to 0, integers are taken as
    addresses, and any other Python object is identified by ``id()``.
    """
    if value is None:
        return 0
    if isinstance(value, Formattable):
        return address_of(value.value)
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, (ctypes.c_void_p, ctypes.c_char_p, ctypes.c_wchar_p)):
        return ctypes.cast(value, ctypes.c_void_p).value or 0
    if isinstance(value, ctypes._Pointer):
        return ctypes.cast(value, ctypes.c_void_p).value or 0
    return id(value)


def zero_of(operand: Formattable) -> Formattable | None:
    """Zero value of the operand's own domain, or None for unknown types."""
    domain = operand.domain
    if domain is ValueDomain.UNKNOWN:
        return None
    if domain is ValueDomain.ADDRESS:
        return Formattable(None, ValueDomain.ADDRESS)
    value = operand.value
    if isinstance(value, ctypes._SimpleCData):
        return Formattable(type(value)(), domain, operand.width)
    zeros: dict[ValueDomain, Any] = {
        ValueDomain.BOOLEAN: False,
        ValueDomain.CHARACTER: "\0",
        ValueDomain.FLOAT: 0.0,
        ValueDomain.DOUBLE: 0.0,
        ValueDomain.EXTENDED: 0.0,
        ValueDomain.STRING: "",
        ValueDomain.BYTES: b"",
    }
    return Formattable(zeros.get(domain, 0), domain, operand.width)


# =============================================================================
# Domain rules
# =============================================================================

_FLOAT_TYPES = frozenset({ctypes.c_float, ctypes.c_double, ctypes.c_longdouble})


def _identity(operand: Formattable) -> Any:
    return operand.value


def _raw(operand: Formattable) -> Any:
    value = operand.value
    if isinstance(value, ctypes._SimpleCData):
        return value.value
    return value


def _wrap(value: int, width: int | None, signed: bool) -> int:
    if width is None:
        return value
    mask = (1 << width) - 1
    value &= mask
    if signed and value >> (width - 1):
        value -= 1 << width
    return value


def _integer_scalar(operand: Formattable) -> int:
    signed = operand.domain is ValueDomain.SIGNED
    return _wrap(int(_raw(operand)), operand.width, signed)


def _character_scalar(operand: Formattable) -> str:
    value = _raw(operand)
    if isinstance(value, int):
        return chr(value)
    if isinstance(value, bytes):
        return value.decode("latin-1")
    return str(value)


def _string_scalar(operand: Formattable) -> str | None:
    value = _raw(operand)
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def _bytes_scalar(operand: Formattable) -> bytes:
    return bytes(_raw(operand))


def _address_scalar(operand: Formattable) -> int:
    return address_of(operand.value)


def _float_scalar(operand: Formattable) -> float:
    return float(_raw(operand))


_SCALARS: dict[ValueDomain, Callable[[Formattable], Any]] = {
    ValueDomain.BOOLEAN: lambda operand: bool(_raw(operand)),
    ValueDomain.SIGNED: _integer_scalar,
    ValueDomain.UNSIGNED: _integer_scalar,
    ValueDomain.SIZE: _integer_scalar,
    ValueDomain.CHARACTER: _character_scalar,
    ValueDomain.FLOAT: _float_scalar,
    ValueDomain.DOUBLE: _float_scalar,
    ValueDomain.EXTENDED: _float_scalar,
    ValueDomain.STRING: _string_scalar,
    ValueDomain.BYTES: _bytes_scalar,
    ValueDomain.ADDRESS: _address_scalar,
    ValueDomain.UNKNOWN: _identity,
}


def _render_boolean(operand: Formattable) -> str:
    return "true" if operand.scalar() else "false"


def _render_signed(operand: Formattable) -> str:
    return str(operand.scalar())


def _render_unsigned(operand: Formattable) -> str:
    value = operand.scalar()
    return f"{value} ({value:#x})" if value >= 0 else str(value)


def _render_character(operand: Formattable) -> str:
    return repr(operand.scalar())


def _render_float(operand: Formattable) -> str:
    return f"{operand.scalar():.9g}"


def _render_double(operand: Formattable) -> str:
    return repr(operand.scalar())


def _render_extended(operand: Formattable) -> str:
    return f"{operand.scalar():.21g}"


def _render_string(operand: Formattable) -> str:
    value = operand.scalar()
    if value is None:
        return "NULL"
    return f'"{value}"'


def _render_bytes(operand: Formattable) -> str:
    return repr(operand.scalar())


def _render_address(operand: Formattable) -> str:
    address = operand.scalar()
    return "NULL" if address == 0 else f"{address:#x}"


def _render_unknown(operand: Formattable) -> str:
    if operand.source:
        return operand.source
    return repr(operand.value)


_RENDERERS: dict[ValueDomain, Callable[[Formattable], str]] = {
    ValueDomain.BOOLEAN: _render_boolean,
    ValueDomain.SIGNED: _render_signed,
    ValueDomain.UNSIGNED: _render_unsigned,
    ValueDomain.SIZE: _render_unsigned,
    ValueDomain.CHARACTER: _render_character,
    ValueDomain.FLOAT: _render_float,
    ValueDomain.DOUBLE: _render_double,
    ValueDomain.EXTENDED: _render_extended,
    ValueDomain.STRING: _render_string,
    ValueDomain.BYTES: _render_bytes,
    ValueDomain.ADDRESS: _render_address,
    ValueDomain.UNKNOWN: _render_unknown,
}
