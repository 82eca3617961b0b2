"""Decoded JSON values and their TSV column rendering.

Each field pulled out of a sensor record is classified once into a
``DecodedValue`` and rendered by dispatching on its ``kind``:

  NUMBER   integral -> ``5``; otherwise five decimals -> ``5.50000``
  STRING   as-is
  BOOLEAN  ``true`` / ``false``
  NULL     ``<nil>``
  ARRAY    ``[a b c]``
  OBJECT   ``map[k1:v1 k2:v2]`` with sorted keys

Composite and null renderings match what the existing Zeek TSV consumers
already receive, so they are kept byte-for-byte.
"""

import math
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any


class ValueKind(Enum):
    NUMBER = "number"
    STRING = "string"
    BOOLEAN = "boolean"
    NULL = "null"
    ARRAY = "array"
    OBJECT = "object"


@dataclass(frozen=True)
class DecodedValue:
    kind: ValueKind
    raw: Any

    @classmethod
    def from_json(cls, obj: Any) -> "DecodedValue":
        """Classify a value produced by ``json.loads``."""
        # bool before int: bool is an int subclass
        if isinstance(obj, bool):
            return cls(ValueKind.BOOLEAN, obj)
        if isinstance(obj, (int, float)):
            return cls(ValueKind.NUMBER, obj)
        if isinstance(obj, str):
            return cls(ValueKind.STRING, obj)
        if obj is None:
            return cls(ValueKind.NULL, None)
        if isinstance(obj, list):
            return cls(ValueKind.ARRAY, obj)
        if isinstance(obj, dict):
            return cls(ValueKind.OBJECT, obj)
        raise TypeError(f"not a JSON value: {type(obj).__name__}")


def _format_number(num: int | float) -> str:
    """Column rendering for a top-level number."""
    if isinstance(num, int):
        return str(num)
    if not math.isfinite(num):
        raise ValueError(f"non-finite number {num!r}")
    if num.is_integer():
        return str(int(num))
    return f"{num:.5f}"


def _format_shortest(num: int | float) -> str:
    """Shortest round-trip text, exponent form outside [1e-4, 1e6).

    Used for numbers nested inside arrays and objects. JSON numbers are
    treated as doubles here, so ``12345678`` prints as ``1.2345678e+07``.
    """
    f = float(num)
    if not math.isfinite(f):
        raise ValueError(f"non-finite number {num!r}")
    d = Decimal(repr(f)).normalize()
    sign, digits, exponent = d.as_tuple()
    point = len(digits) + exponent
    exp = point - 1
    prefix = "-" if sign else ""
    if exp < -4 or exp >= 6:
        mantissa = str(digits[0])
        if len(digits) > 1:
            mantissa += "." + "".join(str(x) for x in digits[1:])
        return f"{prefix}{mantissa}e{'-' if exp < 0 else '+'}{abs(exp):02d}"
    return format(d, "f")


def _format_generic(obj: Any) -> str:
    if isinstance(obj, bool):
        return "true" if obj else "false"
    if isinstance(obj, (int, float)):
        return _format_shortest(obj)
    if isinstance(obj, str):
        return obj
    if obj is None:
        return "<nil>"
    if isinstance(obj, list):
        return "[" + " ".join(_format_generic(v) for v in obj) + "]"
    if isinstance(obj, dict):
        items = (f"{k}:{_format_generic(obj[k])}" for k in sorted(obj))
        return "map[" + " ".join(items) + "]"
    raise TypeError(f"not a JSON value: {type(obj).__name__}")


def render_column(value: DecodedValue) -> str:
    """Render one TSV column for *value*."""
    kind = value.kind
    if kind is ValueKind.NUMBER:
        return _format_number(value.raw)
    if kind is ValueKind.STRING:
        return value.raw
    if kind is ValueKind.BOOLEAN:
        return "true" if value.raw else "false"
    if kind is ValueKind.NULL:
        return "<nil>"
    return _format_generic(value.raw)
