# src/xid/canon.py
from __future__ import annotations

"""
Canonical CBOR for context descriptions.
Map keys sort by encoded length, then bytewise, so insertion order never
leaks into the bytes that get hashed.
"""

import math
from typing import Any, Callable

import cbor2

from .errors import EncodingFailure

# Anything mapping a description to canonical bytes can stand in for encode().
Encoder = Callable[[Any], bytes]

_INT_MIN = -(1 << 64)
_INT_MAX = (1 << 64) - 1


def _check(value: Any, path: str, open_ids: set[int]) -> None:
    # bool is an int subclass; test it first
    if value is None or isinstance(value, (bool, str, bytes, bytearray)):
        return
    if isinstance(value, int):
        if not _INT_MIN <= value <= _INT_MAX:
            raise EncodingFailure(f"{path}: integer {value} outside CBOR range")
        return
    if isinstance(value, float):
        if not math.isfinite(value):
            raise EncodingFailure(f"{path}: non-finite float {value!r}")
        return
    if isinstance(value, (list, tuple, dict)):
        # containers still being walked; meeting one again means a cycle
        if id(value) in open_ids:
            raise EncodingFailure(f"{path}: cyclic {type(value).__name__}")
        open_ids.add(id(value))
        if isinstance(value, dict):
            for k, v in value.items():
                if not isinstance(k, str):
                    raise EncodingFailure(f"{path}: map key {k!r} is not a string")
                _check(v, f"{path}.{k}", open_ids)
        else:
            for i, v in enumerate(value):
                _check(v, f"{path}[{i}]", open_ids)
        open_ids.discard(id(value))
        return
    raise EncodingFailure(f"{path}: unsupported type {type(value).__name__}")


def encode(description: Any) -> bytes:
    """Deterministic bytes for a context description; raises EncodingFailure."""
    try:
        _check(description, "$", set())
    except RecursionError as e:
        raise EncodingFailure("description is nested too deeply") from e
    try:
        return cbor2.dumps(description, canonical=True)
    except (cbor2.CBOREncodeError, TypeError, ValueError, RecursionError) as e:
        raise EncodingFailure(str(e)) from e


__all__ = ["Encoder", "encode"]
