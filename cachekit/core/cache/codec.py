"""
Tagged value codec for the disk backend.

Every value is written as ``{"t": <tag>, "v": <data>}`` so a re-read
reconstructs the original Python type, not just its JSON shape:

    >>> encode_value(np.int8(3))
    {'t': 'int8', 'v': 3}
    >>> decode_value({'t': 'bytes', 'v': 'AAE='})
    b'\\x00\\x01'

Supported: None, bool, int, float, str, bytes, list, tuple, dicts with
string keys, and numpy fixed-width scalars.
"""

import base64
import binascii
from typing import Any, Dict

import numpy as np

from cachekit.core.errors import SerializationError

NUMPY_TAGS = frozenset({
    "int8", "int16", "int32", "int64",
    "uint8", "uint16", "uint32", "uint64",
    "float16", "float32", "float64",
})


def encode_value(value: Any) -> Dict[str, Any]:
    """Encode a value into its tagged JSON-compatible form."""
    if value is None:
        return {"t": "none"}
    if isinstance(value, (bool, np.bool_)):
        return {"t": "bool", "v": bool(value)}
    if isinstance(value, np.generic):
        tag = value.dtype.name
        if tag not in NUMPY_TAGS:
            raise SerializationError(
                "Unsupported numpy scalar type",
                data={"dtype": tag},
            )
        return {"t": tag, "v": value.item()}
    if isinstance(value, int):
        return {"t": "int", "v": value}
    if isinstance(value, float):
        return {"t": "float", "v": value}
    if isinstance(value, str):
        return {"t": "str", "v": value}
    if isinstance(value, (bytes, bytearray, memoryview)):
        return {"t": "bytes", "v": base64.b64encode(bytes(value)).decode("ascii")}
    if isinstance(value, list):
        return {"t": "list", "v": [encode_value(item) for item in value]}
    if isinstance(value, tuple):
        return {"t": "tuple", "v": [encode_value(item) for item in value]}
    if isinstance(value, dict):
        if not all(isinstance(k, str) for k in value):
            raise SerializationError("Dict keys must be strings")
        return {"t": "dict", "v": {k: encode_value(v) for k, v in value.items()}}

    raise SerializationError(
        "Unsupported value type",
        data={"type": type(value).__name__},
    )


def decode_value(node: Any) -> Any:
    """Rebuild a value from its tagged form."""
    if not isinstance(node, dict) or "t" not in node:
        raise SerializationError("Malformed tagged value")

    tag = node["t"]
    if tag == "none":
        return None

    if "v" not in node:
        raise SerializationError("Tagged value without data", data={"tag": tag})
    data = node["v"]

    if tag == "bool":
        return bool(data)
    if tag == "int":
        return int(data)
    if tag == "float":
        return float(data)
    if tag == "str":
        return str(data)
    if tag == "bytes":
        try:
            return base64.b64decode(data, validate=True)
        except (binascii.Error, TypeError) as e:
            raise SerializationError("Invalid base64 payload", cause=e) from e
    if tag == "list":
        return [decode_value(item) for item in data]
    if tag == "tuple":
        return tuple(decode_value(item) for item in data)
    if tag == "dict":
        return {k: decode_value(v) for k, v in data.items()}
    if tag in NUMPY_TAGS:
        return np.dtype(tag).type(data)

    raise SerializationError("Unknown value tag", data={"tag": tag})
