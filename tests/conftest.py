import hashlib

import pytest

from xid import io


@pytest.fixture(autouse=True)
def plain_output():
    """Every test starts from uncolored, non-JSON, normal-verbosity output."""
    io.configure(verbosity="normal", color="never", json_mode=False, timestamps=False)
    yield
    io.configure(verbosity="normal", color="never", json_mode=False, timestamps=False)


@pytest.fixture
def sha_id_ctx():
    return {"name": "sha", "length": 32}


@pytest.fixture
def cbor_block_ctx():
    return {"codec": "dag-cbor"}


@pytest.fixture
def babe_digest():
    return hashlib.sha256(bytes([0xB0, 0xBA])).digest()
