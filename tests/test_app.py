import json

import pytest
from typer.testing import CliRunner

from xid import __version__
from xid.app import app
from xid.hashing import SHAKE256
from xid.ids import XidLong, XidShort
from xid.text import to_text

runner = CliRunner()

ID_CTX = '{"name": "sha", "length": 32}'
BLOCK_CTX = '{"codec": "dag-cbor"}'


@pytest.fixture
def reference(sha_id_ctx, cbor_block_ctx, babe_digest):
    return XidShort.new(sha_id_ctx, cbor_block_ctx, babe_digest)


def _new(*extra, data="", global_opts=()):
    args = [*global_opts, "new", "--id-ctx", ID_CTX, "--block-ctx", BLOCK_CTX, "--data", data, *extra]
    return runner.invoke(app, args)


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert result.stdout.strip() == f"xid {__version__}"


def test_new_prints_text_form(reference, babe_digest):
    result = _new(data=babe_digest.hex())
    assert result.exit_code == 0, result.output
    assert result.stdout.strip() == str(reference)


def test_new_long_with_base32(sha_id_ctx, cbor_block_ctx):
    result = _new("--long", "--base", "base32", data="0x0102")
    assert result.exit_code == 0, result.output
    expected = XidLong.new(sha_id_ctx, cbor_block_ctx, b"\x01\x02")
    assert result.stdout.strip() == to_text(expected, "base32")


def test_new_json_output(reference, babe_digest):
    result = _new(data=babe_digest.hex(), global_opts=["--json"])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["kind"] == "XidShort"
    assert payload["tag"] == "0x0a"
    assert payload["size"] == 41
    assert payload["block_context"] == reference.block_context.hex()
    assert payload["text"] == str(reference)


def test_new_rejects_oversized_data():
    result = _new(data="00" * 65)
    assert result.exit_code == 1
    assert "limit is 64" in result.output


def test_new_rejects_bad_json():
    result = runner.invoke(app, ["new", "--id-ctx", "{nope", "--block-ctx", BLOCK_CTX])
    assert result.exit_code == 2
    assert "not valid JSON" in result.output


def test_new_rejects_bad_hex():
    result = _new(data="xyz")
    assert result.exit_code == 2


def test_new_rejects_unknown_base():
    result = _new("--base", "base58btc", data="01")
    assert result.exit_code == 2


def test_new_refuses_hash_other_than_the_tags(sha_id_ctx, cbor_block_ctx):
    """Tag 0x0a means BLAKE3; XID_HASH=shake256 cannot be written under it."""
    result = runner.invoke(
        app,
        ["new", "--id-ctx", ID_CTX, "--block-ctx", BLOCK_CTX],
        env={"XID_HASH": "shake256"},
    )
    assert result.exit_code == 1
    assert "shake256" in result.output
    assert "f0a" not in result.output

    ok = runner.invoke(app, ["new", "--id-ctx", ID_CTX, "--block-ctx", BLOCK_CTX, "--hash", "blake3"])
    assert ok.exit_code == 0, ok.output
    assert ok.stdout.strip() == str(XidShort.new(sha_id_ctx, cbor_block_ctx, b""))


def test_show_text_and_raw(reference):
    for args in (["show", str(reference)], ["show", "--raw", reference.to_bytes().hex()]):
        result = runner.invoke(app, args)
        assert result.exit_code == 0, result.output
        assert reference.block_context.hex() in result.stdout
        assert reference.data.hex() in result.stdout
        assert "XidShort" in result.stdout


def test_show_json(reference):
    result = runner.invoke(app, ["--json", "show", str(reference)])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["id_context"] == reference.id_context.hex()


def test_show_malformed():
    result = runner.invoke(app, ["show", "f0a0102"])
    assert result.exit_code == 1
    assert "error" in result.output


def test_hash_short_is_prefix_of_long():
    short = runner.invoke(app, ["hash", "--ctx", BLOCK_CTX, "--length", "4"])
    long = runner.invoke(app, ["hash", "--ctx", BLOCK_CTX, "--length", "32"])
    assert short.exit_code == 0 and long.exit_code == 0
    assert len(long.stdout.strip()) == 64
    assert long.stdout.strip().startswith(short.stdout.strip())


def test_hash_accepts_other_xofs(cbor_block_ctx):
    from xid.canon import encode
    from xid.hashing import context_hash

    b3 = runner.invoke(app, ["hash", "--ctx", BLOCK_CTX])
    shake = runner.invoke(app, ["hash", "--ctx", BLOCK_CTX, "--hash", "shake256"])
    assert b3.stdout.strip() == "7bedbfaf"
    assert shake.stdout.strip() == context_hash(encode(cbor_block_ctx), 4, hash_function=SHAKE256).hex()


def test_hash_rejects_unsupported_length():
    result = runner.invoke(app, ["hash", "--ctx", BLOCK_CTX, "--length", "0"])
    assert result.exit_code == 1


def test_truncate_long_to_short(sha_id_ctx, cbor_block_ctx, babe_digest, reference):
    long = XidLong.new(sha_id_ctx, cbor_block_ctx, babe_digest)
    result = runner.invoke(app, ["truncate", str(long)])
    assert result.exit_code == 0, result.output
    assert result.stdout.strip() == str(reference)


def test_truncate_refuses_short(reference):
    result = runner.invoke(app, ["truncate", str(reference)])
    assert result.exit_code == 1


def test_doctor_without_cli_check():
    result = runner.invoke(app, ["doctor", "--no-cli"])
    assert result.exit_code == 0, result.output
    assert result.stdout.strip().endswith("OK")
