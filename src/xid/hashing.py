# src/xid/hashing.py
from __future__ import annotations

"""
Extendable-output hashing for context descriptions.

A longer output only appends bytes, so the 4-byte short context hash is
always the prefix of the 32-byte long one for the same canonical input.
Every context hash gets its own hasher; instances are never shared.
"""

import hashlib
from dataclasses import dataclass
from typing import Callable, Dict, Protocol

from blake3 import blake3

from .errors import ConfigurationError


class Hasher(Protocol):
    output_length: int

    def reset(self) -> None: ...

    def update(self, data: bytes) -> "Hasher": ...

    def finalize_to(self, buf: bytearray | memoryview) -> None: ...


class _XofHasher:
    """Shared plumbing for XOF-backed hashers bound to one output length."""

    def __init__(self, output_length: int) -> None:
        self.output_length = output_length
        self._state = self._fresh()

    def _fresh(self):
        raise NotImplementedError

    def _squeeze(self, n: int) -> bytes:
        raise NotImplementedError

    def reset(self) -> None:
        self._state = self._fresh()

    def update(self, data: bytes) -> "_XofHasher":
        self._state.update(data)
        return self

    def finalize_to(self, buf: bytearray | memoryview) -> None:
        n = self.output_length
        if len(buf) < n:
            raise ValueError(f"output buffer holds {len(buf)} bytes; need {n}")
        buf[:n] = self._squeeze(n)


class Blake3Hasher(_XofHasher):
    def _fresh(self):
        return blake3()

    def _squeeze(self, n: int) -> bytes:
        return self._state.digest(length=n)


class Shake256Hasher(_XofHasher):
    def _fresh(self):
        return hashlib.shake_256()

    def _squeeze(self, n: int) -> bytes:
        return self._state.digest(n)


@dataclass(frozen=True)
class HashFunction:
    name: str
    factory: Callable[[int], Hasher]
    max_output_length: int

    def hasher(self, output_length: int) -> Hasher:
        """Fresh hasher for output_length bytes; the length is checked here, once."""
        if output_length <= 0 or output_length > self.max_output_length:
            raise ConfigurationError(
                f"{self.name} cannot produce {output_length} bytes "
                f"(supported: 1..{self.max_output_length})"
            )
        return self.factory(output_length)


BLAKE3 = HashFunction("blake3", Blake3Hasher, max_output_length=64)
SHAKE256 = HashFunction("shake256", Shake256Hasher, max_output_length=64)

_FUNCTIONS: Dict[str, HashFunction] = {f.name: f for f in (BLAKE3, SHAKE256)}


def get_hash_function(name: str) -> HashFunction:
    try:
        return _FUNCTIONS[name.strip().lower()]
    except KeyError:
        known = ", ".join(sorted(_FUNCTIONS))
        raise ConfigurationError(f"unknown hash function {name!r} (known: {known})") from None


def hash_function_names() -> list[str]:
    return sorted(_FUNCTIONS)


def context_hash(canonical: bytes, length: int, *, hash_function: HashFunction = BLAKE3) -> bytes:
    """Hash canonical context bytes to `length` bytes with a fresh hasher."""
    h = hash_function.hasher(length)
    h.update(canonical)
    out = bytearray(length)
    h.finalize_to(out)
    return bytes(out)


__all__ = [
    "Hasher",
    "HashFunction",
    "Blake3Hasher",
    "Shake256Hasher",
    "BLAKE3",
    "SHAKE256",
    "get_hash_function",
    "hash_function_names",
    "context_hash",
]
