"""
Typed coercion helpers for the cache accessors.

Every helper returns ``(result, ok)``. Numeric values convert freely
between integer and float representations (floats truncate toward zero
when read as integers); a conversion fails only when the value is not
numeric, is not finite, or does not fit the requested fixed-width type.
Fixed-width results are numpy scalars (``np.int8``, ``np.uint32``,
``np.float32``...), unbounded ones are plain ``int``/``float``.
"""

import math
import re
from typing import Any, Optional, Tuple, Union

import numpy as np

Number = Union[int, float]

_INT_RE = re.compile(r"[+-]?\d+")
_FLOAT_RE = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")

_TRUE_WORDS = frozenset({"1", "t", "T", "true", "TRUE", "True"})
_FALSE_WORDS = frozenset({"0", "f", "F", "false", "FALSE", "False"})


def is_number(value: Any) -> bool:
    """True for ints and floats (python or numpy), never for bools."""
    if isinstance(value, (bool, np.bool_)):
        return False
    return isinstance(value, (int, float, np.integer, np.floating))


def as_python_number(value: Any) -> Optional[Number]:
    """Unwrap a numeric value to a python ``int``/``float``, else None."""
    if not is_number(value):
        return None
    if isinstance(value, np.generic):
        return value.item()
    return value


def _to_integer(value: Any) -> Optional[int]:
    number = as_python_number(value)
    if number is None:
        return None
    if isinstance(number, float):
        if not math.isfinite(number):
            return None
        return int(number)
    return number


def coerce_int(value: Any, fallback: Any, dtype: Optional[type] = None) -> Tuple[Any, bool]:
    """Signed integer view; ``dtype`` is a numpy integer type or None."""
    number = _to_integer(value)
    if number is None:
        return fallback, False
    if dtype is None:
        return number, True
    info = np.iinfo(dtype)
    if not info.min <= number <= info.max:
        return fallback, False
    return dtype(number), True


def coerce_uint(value: Any, fallback: Any, dtype: Optional[type] = None) -> Tuple[Any, bool]:
    """Unsigned integer view; negative values never fit."""
    number = _to_integer(value)
    if number is None or number < 0:
        return fallback, False
    if dtype is None:
        return number, True
    if number > np.iinfo(dtype).max:
        return fallback, False
    return dtype(number), True


def coerce_float(value: Any, fallback: Any, dtype: Optional[type] = None) -> Tuple[Any, bool]:
    number = as_python_number(value)
    if number is None:
        return fallback, False
    try:
        result = float(number)
    except OverflowError:
        return fallback, False
    if dtype is None:
        return result, True
    with np.errstate(over="ignore"):
        narrowed = dtype(result)
    if math.isfinite(result) and not np.isfinite(narrowed):
        return fallback, False
    return narrowed, True


def keep_dtype(template: Any, number: Number) -> Tuple[Any, bool]:
    """
    Re-wrap an arithmetic result in the numpy type of ``template``.

    Integer results keep an integer dtype and fail when out of range; a
    float result on an integer dtype stays a plain float. Float dtypes
    narrow the result and fail on overflow. Plain python templates pass
    the result through.
    """
    if not isinstance(template, np.generic):
        return number, True
    dtype = type(template)
    if isinstance(template, np.floating):
        return coerce_float(number, None, dtype)
    if isinstance(number, float):
        return number, True
    if isinstance(template, np.unsignedinteger):
        return coerce_uint(number, None, dtype)
    return coerce_int(number, None, dtype)


def coerce_bool(value: Any, fallback: bool) -> Tuple[bool, bool]:
    if isinstance(value, (bool, np.bool_)):
        return bool(value), True
    return fallback, False


def coerce_string(value: Any, fallback: str) -> Tuple[str, bool]:
    if isinstance(value, str):
        return value, True
    return fallback, False


def coerce_bytes(value: Any, fallback: bytes) -> Tuple[bytes, bool]:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value), True
    return fallback, False


# ============== Wire text (Redis replies) ==============

def parse_number(text: str) -> Optional[Number]:
    """Parse decimal text as int or finite float; None if not numeric."""
    text = text.strip()
    if _INT_RE.fullmatch(text):
        try:
            return int(text)
        except ValueError:
            # longer than sys.get_int_max_str_digits()
            return None
    if _FLOAT_RE.fullmatch(text):
        number = float(text)
        return number if math.isfinite(number) else None
    return None


def parse_bool(text: str) -> Optional[bool]:
    """Parse boolean text (1/0, t/f, true/false); None otherwise."""
    text = text.strip()
    if text in _TRUE_WORDS:
        return True
    if text in _FALSE_WORDS:
        return False
    return None
