# src/xid/__init__.py
from __future__ import annotations

__version__ = "0.1.0"

from .errors import (
    ConfigurationError,
    ContextCollision,
    DataTooLarge,
    EncodingFailure,
    MalformedIdentifier,
    XidError,
)
from .hashing import BLAKE3, SHAKE256, HashFunction, context_hash, get_hash_function
from .ids import Xid, XidLong, XidShort
from .text import from_text, to_text
from .wire import parse, serialize

__all__ = [
    "__version__",
    "Xid",
    "XidShort",
    "XidLong",
    "parse",
    "serialize",
    "to_text",
    "from_text",
    "context_hash",
    "HashFunction",
    "BLAKE3",
    "SHAKE256",
    "get_hash_function",
    "XidError",
    "EncodingFailure",
    "DataTooLarge",
    "MalformedIdentifier",
    "ConfigurationError",
    "ContextCollision",
]
