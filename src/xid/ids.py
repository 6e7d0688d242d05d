# src/xid/ids.py
from __future__ import annotations

"""
XID value types.

An XID names a piece of data together with the context needed to read it:
  [tag][block-context hash][id-context hash][inline data]

Both context hashes come from the same XOF over independently canonicalized
descriptions. Short (tag 0x0a) keeps 4 bytes of block-context hash and at
most 64 bytes of data; Long (tag 0x0b) keeps 32 bytes and at most 512.
A Short block-context hash is the first 4 bytes of the Long one, so a Short
XID can be cut from a Long XID without rehashing.
"""

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Optional

from . import canon
from .canon import Encoder
from .errors import ConfigurationError, DataTooLarge, MalformedIdentifier
from .hashing import BLAKE3, HashFunction, context_hash

SHORT_TAG = 0x0A
LONG_TAG = 0x0B
SHORT_CONTEXT_LEN = 4
LONG_CONTEXT_LEN = 32


@dataclass(frozen=True, repr=False)
class Xid:
    """Abstract base; concrete classes set TAG, BLOCK_CONTEXT_LEN and MAX_DATA_LEN."""

    TAG: ClassVar[int]
    BLOCK_CONTEXT_LEN: ClassVar[int]
    ID_CONTEXT_LEN: ClassVar[int] = SHORT_CONTEXT_LEN
    MAX_DATA_LEN: ClassVar[int]
    HASH_FUNCTION: ClassVar[HashFunction] = BLAKE3

    block_context: bytes
    id_context: bytes
    data: bytes = b""

    @classmethod
    def _require_layout(cls) -> None:
        if not hasattr(cls, "TAG"):
            raise TypeError(f"{cls.__name__} is abstract; use XidShort or XidLong")

    def __post_init__(self) -> None:
        self._require_layout()
        for name in ("block_context", "id_context", "data"):
            v = getattr(self, name)
            if not isinstance(v, bytes):
                # memoryview refuses ints, so 5 never becomes five zero bytes
                object.__setattr__(self, name, memoryview(v).tobytes())
        kind = type(self).__name__
        if len(self.block_context) != self.BLOCK_CONTEXT_LEN:
            raise ValueError(
                f"{kind} block_context must be {self.BLOCK_CONTEXT_LEN} bytes, got {len(self.block_context)}"
            )
        if len(self.id_context) != self.ID_CONTEXT_LEN:
            raise ValueError(
                f"{kind} id_context must be {self.ID_CONTEXT_LEN} bytes, got {len(self.id_context)}"
            )
        if len(self.data) > self.MAX_DATA_LEN:
            raise DataTooLarge(len(self.data), self.MAX_DATA_LEN, kind)

    # ── construction ─────────────────────────────────────────────────────────

    @classmethod
    def new(
        cls,
        id_context: Any,
        block_context: Any,
        data: bytes = b"",
        *,
        encoder: Encoder = canon.encode,
        hash_function: Optional[HashFunction] = None,
    ):
        """
        Build an XID from an id-context description, a block-context
        description and inline data.

        Each description is canonicalized and hashed on its own, with its own
        hasher. Raises EncodingFailure for unencodable descriptions and
        DataTooLarge when data exceeds MAX_DATA_LEN. A hash_function other
        than the class's own raises ConfigurationError: the tag names the
        hash discipline, so another XOF needs its own subclass and tag.
        """
        cls._require_layout()
        hf = cls.HASH_FUNCTION
        if hash_function is not None and hash_function != hf:
            raise ConfigurationError(
                f"{cls.__name__} (tag 0x{cls.TAG:02x}) hashes with {hf.name}, not {hash_function.name}"
            )
        id_bytes = encoder(id_context)
        block_bytes = encoder(block_context)
        return cls(
            block_context=context_hash(block_bytes, cls.BLOCK_CONTEXT_LEN, hash_function=hf),
            id_context=context_hash(id_bytes, cls.ID_CONTEXT_LEN, hash_function=hf),
            data=data,
        )

    @classmethod
    def fixed_size(cls) -> int:
        """Tag plus both hashes; the minimum serialized length."""
        return 1 + cls.BLOCK_CONTEXT_LEN + cls.ID_CONTEXT_LEN

    @classmethod
    def max_size(cls) -> int:
        return cls.fixed_size() + cls.MAX_DATA_LEN

    # ── binary form ──────────────────────────────────────────────────────────

    def to_bytes(self) -> bytes:
        return bytes([self.TAG]) + self.block_context + self.id_context + self.data

    def __bytes__(self) -> bytes:
        return self.to_bytes()

    def __len__(self) -> int:
        return self.fixed_size() + len(self.data)

    def write_into(self, buf: bytearray | memoryview) -> int:
        """Write the binary form at the start of buf; returns bytes written."""
        n = len(self)
        if len(buf) < n:
            raise ValueError(f"buffer holds {len(buf)} bytes; {type(self).__name__} needs {n}")
        buf[:n] = self.to_bytes()
        return n

    @classmethod
    def from_bytes(cls, buf: bytes | bytearray | memoryview):
        """Parse this class's fixed-offset layout; everything after the hashes is data."""
        cls._require_layout()
        raw = memoryview(buf).tobytes()
        kind = cls.__name__
        if len(raw) < cls.fixed_size():
            raise MalformedIdentifier(
                f"{kind} needs at least {cls.fixed_size()} bytes, got {len(raw)}"
            )
        if raw[0] != cls.TAG:
            raise MalformedIdentifier(f"{kind} expects tag 0x{cls.TAG:02x}, got 0x{raw[0]:02x}")
        b_end = 1 + cls.BLOCK_CONTEXT_LEN
        i_end = b_end + cls.ID_CONTEXT_LEN
        data = raw[i_end:]
        if len(data) > cls.MAX_DATA_LEN:
            raise MalformedIdentifier(
                f"{kind} payload is {len(data)} bytes; limit is {cls.MAX_DATA_LEN}"
            )
        return cls(block_context=raw[1:b_end], id_context=raw[b_end:i_end], data=data)

    # ── display ──────────────────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, str]:
        return {
            "kind": type(self).__name__,
            "tag": f"0x{self.TAG:02x}",
            "block_context": self.block_context.hex(),
            "id_context": self.id_context.hex(),
            "data": self.data.hex(),
        }

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(block_context={self.block_context.hex()!r}, "
            f"id_context={self.id_context.hex()!r}, data={self.data.hex()!r})"
        )

    def __str__(self) -> str:
        from .text import to_text
        return to_text(self)


@dataclass(frozen=True, repr=False)
class XidShort(Xid):
    # Data is capped at 64 bytes: enough for any common digest, and small
    # enough to live in a fixed buffer.
    TAG: ClassVar[int] = SHORT_TAG
    BLOCK_CONTEXT_LEN: ClassVar[int] = SHORT_CONTEXT_LEN
    MAX_DATA_LEN: ClassVar[int] = 64

    def matches_long(self, other: "XidLong") -> bool:
        """True when `other` truncates to this identifier."""
        return (
            other.block_context[: self.BLOCK_CONTEXT_LEN] == self.block_context
            and other.id_context == self.id_context
            and other.data == self.data
        )


@dataclass(frozen=True, repr=False)
class XidLong(Xid):
    TAG: ClassVar[int] = LONG_TAG
    BLOCK_CONTEXT_LEN: ClassVar[int] = LONG_CONTEXT_LEN
    MAX_DATA_LEN: ClassVar[int] = 512

    def to_short(self) -> XidShort:
        """Truncate the block-context hash to the short form; raises DataTooLarge if data > 64."""
        return XidShort(
            block_context=self.block_context[:SHORT_CONTEXT_LEN],
            id_context=self.id_context,
            data=self.data,
        )


__all__ = [
    "Xid",
    "XidShort",
    "XidLong",
    "SHORT_TAG",
    "LONG_TAG",
    "SHORT_CONTEXT_LEN",
    "LONG_CONTEXT_LEN",
]
