# src/xid/errors.py
from __future__ import annotations


class XidError(Exception):
    """Base class for recoverable identifier errors."""


class EncodingFailure(XidError):
    """A context description is outside the canonical encoder's type model."""


class DataTooLarge(XidError):
    def __init__(self, size: int, limit: int, kind: str = "xid") -> None:
        super().__init__(f"{kind} payload is {size} bytes; limit is {limit}")
        self.size = size
        self.limit = limit


class MalformedIdentifier(XidError):
    """Parse-time failure: short buffer, unknown tag, bad text form."""


class ConfigurationError(XidError):
    """Unsupported hash length, unknown hash function, duplicate tag."""


class ContextCollision(XidError):
    def __init__(self, short_hash: bytes, attempts: int = 0) -> None:
        msg = f"short context hash {short_hash.hex()} collides with a registered context"
        if attempts:
            msg += f" (after {attempts} salting attempts)"
        super().__init__(msg)
        self.short_hash = short_hash
        self.attempts = attempts


__all__ = [
    "XidError",
    "EncodingFailure",
    "DataTooLarge",
    "MalformedIdentifier",
    "ConfigurationError",
    "ContextCollision",
]
