# src/xid/app.py
from __future__ import annotations
import json
from typing import Any, NoReturn, Optional
import typer

from . import __version__, io
from .errors import XidError

app = typer.Typer(add_completion=False, no_args_is_help=True, help="XID: context-hashed identifiers")


# ------------- helpers ----------------

def _load_ctx(text: str, what: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        io.emit_err(f"error: {what} is not valid JSON: {e}")
        raise typer.Exit(2)

def _load_hex(text: str, what: str) -> bytes:
    s = text.strip()
    if s.lower().startswith("0x"):
        s = s[2:]
    try:
        return bytes.fromhex(s)
    except ValueError as e:
        io.emit_err(f"error: {what} is not valid hex: {e}")
        raise typer.Exit(2)

def _fail(e: XidError) -> NoReturn:
    io.emit_err(f"error: {e}")
    raise typer.Exit(1)

def _echo_xid(x, base: str) -> None:
    from .text import to_text
    try:
        text = to_text(x, base)
    except ValueError as e:
        io.emit_err(f"error: {e}")
        raise typer.Exit(2)
    if io.json_mode():
        io.emit_json({**x.to_dict(), "text": text, "size": len(x)})
    else:
        typer.echo(text)

def _decode(value: str, raw: bool):
    from .text import from_text
    from .wire import parse
    if raw:
        return parse(_load_hex(value, "identifier"))
    return from_text(value)

# ------------- global options -------------

def _version_cb(value: bool):
    if value:
        typer.echo(f"xid {__version__}")
        raise typer.Exit()

@app.callback(invoke_without_command=True)
def _entrypoint(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
        callback=_version_cb,
        is_eager=True,
    ),
    json_out: bool = typer.Option(False, "--json", envvar="XID_JSON", help="Emit JSON on stdout"),
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="-v verbose, -vv trace"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only errors on stderr"),
):
    level = "quiet" if quiet else ("trace" if verbose > 1 else "verbose" if verbose else "normal")
    io.configure(verbosity=level, json_mode=json_out)

# ------------- commands -------------

@app.command(help="Build an identifier from an id context, a block context and data")
def new(
    id_ctx: str = typer.Option(..., "--id-ctx", help='Id context as JSON, e.g. \'{"name":"sha","length":32}\''),
    block_ctx: str = typer.Option(..., "--block-ctx", help='Block context as JSON, e.g. \'{"codec":"dag-cbor"}\''),
    data: str = typer.Option("", "--data", help="Inline data as hex"),
    long: bool = typer.Option(False, "--long", help="Long XID (32-byte block context, up to 512 bytes data)"),
    hash_name: str = typer.Option("blake3", "--hash", envvar="XID_HASH", help="Context hash function"),
    base: str = typer.Option("base16", "--base", help="Multibase for text output"),
):
    from .hashing import get_hash_function
    from .ids import XidLong, XidShort
    cls = XidLong if long else XidShort
    id_desc = _load_ctx(id_ctx, "--id-ctx")
    block_desc = _load_ctx(block_ctx, "--block-ctx")
    payload = _load_hex(data, "--data")
    try:
        # the tag fixes the hash; a mismatch raises ConfigurationError
        x = cls.new(id_desc, block_desc, payload, hash_function=get_hash_function(hash_name))
    except XidError as e:
        _fail(e)
    io.emit_verbose(f"{type(x).__name__}: {len(x)} bytes")
    _echo_xid(x, base)

@app.command(help="Decode an identifier and print its fields")
def show(
    value: str = typer.Argument(..., help="Multibase text, or hex with --raw"),
    raw: bool = typer.Option(False, "--raw", help="Input is the binary form as plain hex"),
):
    try:
        x = _decode(value, raw)
    except XidError as e:
        _fail(e)
    if io.json_mode():
        io.emit_json({**x.to_dict(), "size": len(x)})
        return
    d = x.to_dict()
    rows = [(k, d[k]) for k in ("kind", "tag", "block_context", "id_context", "data")]
    rows.append(("size", str(len(x))))
    typer.echo(io.render_table(["field", "value"], rows))

@app.command("hash", help="Print the context hash of a JSON description")
def hash_cmd(
    ctx: str = typer.Option(..., "--ctx", help="Context description as JSON"),
    length: int = typer.Option(4, "--length", help="Output bytes (4 short, 32 long)"),
    hash_name: str = typer.Option("blake3", "--hash", envvar="XID_HASH"),
):
    from .canon import encode
    from .hashing import context_hash, get_hash_function
    desc = _load_ctx(ctx, "--ctx")
    try:
        canonical = encode(desc)
        h = context_hash(canonical, length, hash_function=get_hash_function(hash_name))
    except XidError as e:
        _fail(e)
    io.emit_trace(f"canonical: {canonical.hex()}")
    if io.json_mode():
        io.emit_json({"canonical": canonical, "hash": h, "length": length})
    else:
        typer.echo(h.hex())

@app.command(help="Cut a long identifier down to its short form")
def truncate(
    value: str = typer.Argument(..., help="Long XID as multibase text, or hex with --raw"),
    raw: bool = typer.Option(False, "--raw"),
    base: str = typer.Option("base16", "--base"),
):
    from .ids import XidLong
    try:
        x = _decode(value, raw)
        if not isinstance(x, XidLong):
            io.emit_err(f"error: expected a long XID, got {type(x).__name__}")
            raise typer.Exit(1)
        short = x.to_short()
    except XidError as e:
        _fail(e)
    _echo_xid(short, base)

@app.command(help="Check xid health: env, dependencies, hash self-tests")
def doctor(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show details for all checks"),
    no_cli: bool = typer.Option(False, "--no-cli", help="Skip the subprocess CLI check"),
):
    from .doctor import run as _run_doctor
    code = _run_doctor(verbose=verbose, include_cli=not no_cli)
    raise typer.Exit(code)


def main(argv: Optional[list[str]] = None) -> None:
    app(args=argv, prog_name="xid")
