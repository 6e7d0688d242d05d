# src/xid/wire.py
from __future__ import annotations

"""
Binary wire form: [1-byte tag][block-context hash][id-context hash][data].

Tags come from an external registry (0x0a Short, 0x0b Long). parse() only
needs a tag -> class table to dispatch; the default table is read-only and
callers with extra classes build their own with make_registry(). The payload
has no length prefix: it runs to the end of the buffer, so callers must
frame identifiers themselves.
"""

from types import MappingProxyType
from typing import Dict, Mapping, Optional, Type

from .errors import ConfigurationError, MalformedIdentifier
from .ids import Xid, XidLong, XidShort

Registry = Mapping[int, Type[Xid]]


def make_registry(*classes: Type[Xid], base: Optional[Registry] = None) -> Registry:
    """Tag table from XID classes, optionally extending `base`. Duplicate tags are an error."""
    out: Dict[int, Type[Xid]] = dict(base or {})
    for cls in classes:
        tag = cls.TAG
        if not 0 <= tag <= 0xFF:
            raise ConfigurationError(f"{cls.__name__}: tag {tag} does not fit in one byte")
        cur = out.get(tag)
        if cur is not None and cur is not cls:
            raise ConfigurationError(f"tag 0x{tag:02x} already maps to {cur.__name__}")
        out[tag] = cls
    return MappingProxyType(out)


DEFAULT_REGISTRY: Registry = make_registry(XidShort, XidLong)


def class_for_tag(tag: int, registry: Optional[Registry] = None) -> Type[Xid]:
    cls = (registry if registry is not None else DEFAULT_REGISTRY).get(tag)
    if cls is None:
        raise MalformedIdentifier(f"unknown xid tag 0x{tag:02x}")
    return cls


def serialize(xid: Xid) -> bytes:
    return xid.to_bytes()


def write_into(xid: Xid, buf: bytearray | memoryview) -> int:
    """Raises ValueError when buf is too small; that is caller misuse, not bad data."""
    return xid.write_into(buf)


def parse(buf: bytes | bytearray | memoryview, *, registry: Optional[Registry] = None) -> Xid:
    """Read the tag, then parse the matching fixed layout."""
    if len(buf) == 0:
        raise MalformedIdentifier("empty buffer")
    return class_for_tag(buf[0], registry).from_bytes(buf)


__all__ = [
    "Registry",
    "DEFAULT_REGISTRY",
    "make_registry",
    "class_for_tag",
    "serialize",
    "write_into",
    "parse",
]
