# src/xid/context.py
from __future__ import annotations

"""
Resolving context hashes back to descriptions.

The core only produces and consumes hash bytes. Deciding which contexts are
trusted, and how to salt a newcomer whose 4-byte hash collides with an
already registered one, belongs to the trust domain; ContextTable is a
plain in-memory table with those decisions injected.
"""

import threading
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Protocol

from . import canon, io
from .canon import Encoder
from .errors import ContextCollision
from .hashing import BLAKE3, HashFunction, context_hash
from .ids import LONG_CONTEXT_LEN, SHORT_CONTEXT_LEN


class ContextResolver(Protocol):
    def resolve(self, context_hash: bytes) -> Optional[Any]: ...


class SaltPolicy(Protocol):
    def __call__(self, description: Any, attempt: int) -> Any: ...


@dataclass(frozen=True)
class ContextEntry:
    description: Any
    canonical: bytes
    long_hash: bytes

    @property
    def short_hash(self) -> bytes:
        return self.long_hash[:SHORT_CONTEXT_LEN]


def digest_id_context(name: str, length: int) -> Dict[str, Any]:
    """Id context for data that is a digest, e.g. digest_id_context("sha", 32)."""
    return {"name": name, "length": length}


def codec_block_context(codec: str) -> Dict[str, Any]:
    return {"codec": codec}


class ContextTable:
    """In-memory ContextResolver keyed by long hash, with a short-hash index."""

    def __init__(
        self,
        descriptions: Iterable[Any] = (),
        *,
        salt_policy: Optional[SaltPolicy] = None,
        max_salt_attempts: int = 8,
        encoder: Encoder = canon.encode,
        hash_function: HashFunction = BLAKE3,
    ) -> None:
        self._salt_policy = salt_policy
        self._max_salt_attempts = max(0, int(max_salt_attempts))
        self._encoder = encoder
        self._hash_function = hash_function
        self._by_long: Dict[bytes, ContextEntry] = {}
        self._by_short: Dict[bytes, ContextEntry] = {}
        self._lock = threading.RLock()
        for d in descriptions:
            self.register(d)

    def _entry(self, description: Any) -> ContextEntry:
        canonical = self._encoder(description)
        # One long hash; the short hash is its prefix.
        long_hash = context_hash(canonical, LONG_CONTEXT_LEN, hash_function=self._hash_function)
        return ContextEntry(description, canonical, long_hash)

    def register(self, description: Any) -> ContextEntry:
        """
        Add a description. If its short hash is taken by a different context,
        the salt policy rewrites the newcomer and it is retried; without a
        policy, or after max_salt_attempts, ContextCollision is raised.
        """
        candidate = description
        attempt = 0
        while True:
            entry = self._entry(candidate)
            with self._lock:
                held = self._by_short.get(entry.short_hash)
                if held is None or held.long_hash == entry.long_hash:
                    self._by_long[entry.long_hash] = entry
                    self._by_short[entry.short_hash] = entry
                    return entry
            if self._salt_policy is None:
                raise ContextCollision(entry.short_hash)
            if attempt >= self._max_salt_attempts:
                raise ContextCollision(entry.short_hash, attempts=attempt)
            attempt += 1
            io.emit_trace(f"[context] short hash {entry.short_hash.hex()} taken; salting (attempt {attempt})")
            candidate = self._salt_policy(description, attempt)

    def lookup(self, context_hash: bytes) -> Optional[ContextEntry]:
        h = bytes(context_hash)
        with self._lock:
            if len(h) == SHORT_CONTEXT_LEN:
                return self._by_short.get(h)
            if len(h) == LONG_CONTEXT_LEN:
                return self._by_long.get(h)
        return None

    def resolve(self, context_hash: bytes) -> Optional[Any]:
        entry = self.lookup(context_hash)
        return entry.description if entry else None

    def accepts(self, context_hash: bytes) -> bool:
        return self.lookup(context_hash) is not None

    def __contains__(self, context_hash: object) -> bool:
        return isinstance(context_hash, (bytes, bytearray)) and self.accepts(context_hash)

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_long)


__all__ = [
    "ContextResolver",
    "SaltPolicy",
    "ContextEntry",
    "ContextTable",
    "digest_id_context",
    "codec_block_context",
]
