# src/xid/doctor.py
from __future__ import annotations

import hashlib
import subprocess
import sys
from dataclasses import dataclass
from typing import Callable, List, Tuple

@dataclass(frozen=True)
class CheckResult:
    name: str
    ok: bool
    detail: str = ""

def _ok(name: str, detail: str = "") -> CheckResult:
    return CheckResult(name, True, detail)

def _fail(name: str, detail: str) -> CheckResult:
    return CheckResult(name, False, detail)

def _run_cmd(cmd: list[str], timeout: int = 60) -> Tuple[int, str, str]:
    p = subprocess.run(
        cmd,
        text=True,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        timeout=timeout,
        check=False,
    )
    return p.returncode, p.stdout, p.stderr

def check_python() -> CheckResult:
    v = sys.version.split()[0]
    parts = tuple(int(x) for x in v.split(".")[:2])
    if parts >= (3, 10):
        return _ok("python", v)
    return _fail("python", f"{v} (<3.10)")

def check_cli() -> CheckResult:
    # Run the module to stay inside the current venv
    try:
        rc, out, err = _run_cmd([sys.executable, "-m", "xid", "--version"])
    except (OSError, subprocess.TimeoutExpired) as e:
        return _fail("xid_cli", repr(e))
    if rc == 0 and out.strip():
        return _ok("xid_cli", out.strip())
    return _fail("xid_cli", err.strip() or "version check failed")

def _check_import(module: str) -> CheckResult:
    try:
        mod = __import__(module)
    except ImportError as e:
        return _fail(module, repr(e))
    return _ok(module, str(getattr(mod, "__version__", "ok")))

def check_typer() -> CheckResult:
    return _check_import("typer")

def check_cbor2() -> CheckResult:
    return _check_import("cbor2")

def check_blake3() -> CheckResult:
    return _check_import("blake3")

def check_truncation() -> CheckResult:
    """4-byte context hash must be the prefix of the 32-byte one."""
    from .canon import encode
    from .hashing import BLAKE3, SHAKE256, context_hash
    canonical = encode({"codec": "dag-cbor"})
    for hf in (BLAKE3, SHAKE256):
        h4 = context_hash(canonical, 4, hash_function=hf)
        h32 = context_hash(canonical, 32, hash_function=hf)
        if h4 != h32[:4]:
            return _fail("truncation", f"{hf.name}: {h4.hex()} != {h32[:4].hex()}")
    return _ok("truncation", "blake3, shake256")

def check_determinism() -> CheckResult:
    from .canon import encode
    a = encode({"name": "sha", "length": 32, "codec": "dag-cbor"})
    b = encode({"codec": "dag-cbor", "length": 32, "name": "sha"})
    if a == b:
        return _ok("canonical_encoding", a.hex())
    return _fail("canonical_encoding", f"{a.hex()} != {b.hex()}")

def check_reference_xid() -> CheckResult:
    """Short XID over a SHA-256 digest: 1 + 4 + 4 + 32 bytes, and it parses back."""
    from .context import codec_block_context, digest_id_context
    from .ids import XidShort
    from .wire import parse
    digest = hashlib.sha256(bytes([0xB0, 0xBA])).digest()
    x = XidShort.new(digest_id_context("sha", 32), codec_block_context("dag-cbor"), digest)
    raw = x.to_bytes()
    if len(raw) != 41:
        return _fail("reference_xid", f"length {len(raw)} != 41")
    if parse(raw) != x:
        return _fail("reference_xid", "parse(serialize(x)) != x")
    return _ok("reference_xid", str(x))

def run(verbose: bool = False, *, include_cli: bool = True) -> int:
    checks: List[Callable[[], CheckResult]] = [
        check_python,
        check_typer,
        check_cbor2,
        check_blake3,
        check_truncation,
        check_determinism,
        check_reference_xid,
    ]
    if include_cli:
        checks.insert(1, check_cli)
    results: List[CheckResult] = []
    for fn in checks:
        try:
            results.append(fn())
        except Exception as e:  # a broken dependency shows up as a failed check
            results.append(_fail(fn.__name__.removeprefix("check_"), repr(e)))

    ok_all = all(r.ok for r in results)
    for r in results:
        prefix = "✔" if r.ok else "✖"
        line = f"{prefix} {r.name}"
        if verbose or not r.ok:
            line += f" — {r.detail}"
        print(line)
    print("OK" if ok_all else "FAIL")
    return 0 if ok_all else 1
