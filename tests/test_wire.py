from dataclasses import dataclass
from typing import ClassVar

import pytest

from xid.errors import ConfigurationError, MalformedIdentifier
from xid.hashing import SHAKE256, HashFunction
from xid.ids import XidLong, XidShort
from xid.wire import DEFAULT_REGISTRY, class_for_tag, make_registry, parse, serialize, write_into


@dataclass(frozen=True, repr=False)
class XidShake(XidShort):
    TAG: ClassVar[int] = 0x70
    HASH_FUNCTION: ClassVar[HashFunction] = SHAKE256


@pytest.mark.parametrize("cls, tag", [(XidShort, 0x0A), (XidLong, 0x0B)])
def test_round_trip_dispatches_on_tag(cls, tag, sha_id_ctx, cbor_block_ctx, babe_digest):
    x = cls.new(sha_id_ctx, cbor_block_ctx, babe_digest)
    raw = serialize(x)
    assert raw[0] == tag
    back = parse(raw)
    assert type(back) is cls
    assert back == x


def test_parse_accepts_buffer_types(sha_id_ctx, cbor_block_ctx):
    x = XidShort.new(sha_id_ctx, cbor_block_ctx, b"\x01")
    raw = serialize(x)
    assert parse(bytearray(raw)) == x
    assert parse(memoryview(raw)) == x


def test_empty_payload_round_trips(sha_id_ctx, cbor_block_ctx):
    x = XidLong.new(sha_id_ctx, cbor_block_ctx)
    assert len(serialize(x)) == 37
    assert parse(serialize(x)) == x


@pytest.mark.parametrize(
    "raw",
    [
        b"",
        bytes([0x0C]) + bytes(40),
        bytes([0x0A]) + bytes(7),
        bytes([0x0B]) + bytes(35),
        bytes([0x0A]) + bytes(8 + 65),
        bytes([0x0B]) + bytes(36 + 513),
    ],
    ids=["empty", "unknown-tag", "short-too-short", "long-too-short", "short-overfull", "long-overfull"],
)
def test_malformed_buffers(raw):
    with pytest.raises(MalformedIdentifier):
        parse(raw)


def test_write_into_reports_size_and_rejects_small_buffers(sha_id_ctx, cbor_block_ctx):
    x = XidLong.new(sha_id_ctx, cbor_block_ctx, b"abc")
    buf = bytearray(64)
    assert write_into(x, buf) == 40
    assert bytes(buf[:40]) == serialize(x)
    with pytest.raises(ValueError):
        write_into(x, bytearray(39))


def test_default_registry():
    assert dict(DEFAULT_REGISTRY) == {0x0A: XidShort, 0x0B: XidLong}
    assert class_for_tag(0x0B) is XidLong
    with pytest.raises(TypeError):
        DEFAULT_REGISTRY[0x70] = XidShake  # type: ignore[index]


def test_extended_registry_parses_new_class(sha_id_ctx, cbor_block_ctx):
    reg = make_registry(XidShake, base=DEFAULT_REGISTRY)
    x = XidShake.new(sha_id_ctx, cbor_block_ctx, b"\x01")
    raw = serialize(x)

    assert raw[0] == 0x70
    assert parse(raw, registry=reg) == x
    assert parse(serialize(XidShort.new(sha_id_ctx, cbor_block_ctx)), registry=reg).TAG == 0x0A
    with pytest.raises(MalformedIdentifier):
        parse(raw)


def test_duplicate_tags_are_rejected():
    @dataclass(frozen=True, repr=False)
    class Impostor(XidShort):
        TAG: ClassVar[int] = 0x0B

    with pytest.raises(ConfigurationError):
        make_registry(Impostor, base=DEFAULT_REGISTRY)
    # re-adding the same class is harmless
    assert make_registry(XidShort, base=DEFAULT_REGISTRY)[0x0A] is XidShort


def test_tag_must_fit_in_a_byte():
    @dataclass(frozen=True, repr=False)
    class Wide(XidShort):
        TAG: ClassVar[int] = 0x100

    with pytest.raises(ConfigurationError):
        make_registry(Wide)
