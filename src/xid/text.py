# src/xid/text.py
from __future__ import annotations

"""
Multibase text form of an XID (display only; never used for equality).
The first character names the base: f/F = base16, b = base32, k = base36.
"""

import base64
import binascii
from typing import Callable, Dict, Optional, Tuple

from .errors import MalformedIdentifier
from .ids import Xid
from .wire import Registry, parse

_A36 = "0123456789abcdefghijklmnopqrstuvwxyz"
_A32 = "abcdefghijklmnopqrstuvwxyz234567"


def _digits(text: str, alphabet: str) -> None:
    # one spelling per base: no case folding, no whitespace, no padding
    bad = next((c for c in text if c not in alphabet), None)
    if bad is not None:
        raise ValueError(f"unexpected character {bad!r}")


def _unb16(alphabet: str) -> Callable[[str], bytes]:
    def dec(text: str) -> bytes:
        _digits(text, alphabet)
        return bytes.fromhex(text)
    return dec


def _b36(data: bytes) -> str:
    """Unsigned base-36 (lowercase); each leading zero byte becomes a '0'."""
    zeros = len(data) - len(data.lstrip(b"\x00"))
    n = int.from_bytes(data, "big")
    out = []
    while n:
        n, r = divmod(n, 36)
        out.append(_A36[r])
    return "0" * zeros + "".join(reversed(out))


def _unb36(text: str) -> bytes:
    _digits(text, _A36)
    body = text.lstrip("0")
    zeros = len(text) - len(body)
    if not body:
        return b"\x00" * zeros
    n = int(body, 36)
    return b"\x00" * zeros + n.to_bytes((n.bit_length() + 7) // 8, "big")


def _b32(data: bytes) -> str:
    return base64.b32encode(data).decode("ascii").lower().rstrip("=")


def _unb32(text: str) -> bytes:
    _digits(text, _A32)
    pad = "=" * (-len(text) % 8)
    return base64.b32decode(text.upper() + pad)


# name -> (prefix, encode, decode)
_BASES: Dict[str, Tuple[str, Callable[[bytes], str], Callable[[str], bytes]]] = {
    "base16": ("f", lambda b: b.hex(), _unb16("0123456789abcdef")),
    "base16upper": ("F", lambda b: b.hex().upper(), _unb16("0123456789ABCDEF")),
    "base32": ("b", _b32, _unb32),
    "base36": ("k", _b36, _unb36),
}
_BY_PREFIX = {prefix: (name, dec) for name, (prefix, _, dec) in _BASES.items()}


def base_names() -> list[str]:
    return list(_BASES)


def multibase_encode(data: bytes, base: str = "base16") -> str:
    try:
        prefix, enc, _ = _BASES[base]
    except KeyError:
        raise ValueError(f"unsupported base {base!r} (known: {', '.join(_BASES)})") from None
    return prefix + enc(bytes(data))


def multibase_decode(text: str) -> bytes:
    if not text:
        raise MalformedIdentifier("empty text identifier")
    entry = _BY_PREFIX.get(text[0])
    if entry is None:
        raise MalformedIdentifier(f"unknown multibase prefix {text[0]!r}")
    name, dec = entry
    try:
        return dec(text[1:])
    except (ValueError, binascii.Error) as e:
        raise MalformedIdentifier(f"invalid {name} text: {e}") from e


def to_text(value: Xid | bytes, base: str = "base16") -> str:
    raw = value.to_bytes() if isinstance(value, Xid) else bytes(value)
    return multibase_encode(raw, base)


def from_text(text: str, *, registry: Optional[Registry] = None) -> Xid:
    return parse(multibase_decode(text), registry=registry)


__all__ = ["base_names", "multibase_encode", "multibase_decode", "to_text", "from_text"]
