# src/xid/io.py
from __future__ import annotations

"""
Console output for the CLI. Human messages go to stderr, JSON to stdout.
The core modules never print; only app.py and ContextTable's trace line do.
"""

import datetime as _dt
import json
import os
import re
import sys
import threading
from typing import Any, Literal, Optional, Sequence, TextIO

Verbosity = Literal["quiet", "normal", "verbose", "trace"]
ColorMode = Literal["auto", "always", "never"]

_RANK = {"quiet": 0, "normal": 1, "verbose": 2, "trace": 3}


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "0").strip().lower() not in ("", "0", "false", "no")


class _State:
    __slots__ = ("verbosity", "color_mode", "json_mode", "timestamps", "_lock")

    def __init__(self) -> None:
        self.verbosity: Verbosity = "normal"
        self.color_mode: ColorMode = os.environ.get("XID_COLOR", "auto")
        self.json_mode: bool = _env_flag("XID_JSON")
        self.timestamps: bool = _env_flag("XID_TIMESTAMPS")
        self._lock = threading.RLock()

_STATE = _State()


def configure(
    *,
    verbosity: Optional[Verbosity] = None,
    color: Optional[ColorMode] = None,
    json_mode: Optional[bool] = None,
    timestamps: Optional[bool] = None,
) -> None:
    """Set output options; arguments left as None keep their current value."""
    with _STATE._lock:
        if verbosity is not None:
            _STATE.verbosity = verbosity
        if color is not None:
            _STATE.color_mode = color
        if json_mode is not None:
            _STATE.json_mode = bool(json_mode)
        if timestamps is not None:
            _STATE.timestamps = bool(timestamps)


def json_mode() -> bool:
    return _STATE.json_mode

# ------------- styling -------------

_FG = {"red": 31, "cyan": 36, "magenta": 35, "blue": 34}
_ANSI_RX = re.compile(r"\x1b\[[0-9;]*m")


def _use_color() -> bool:
    mode = _STATE.color_mode
    if mode == "never" or "NO_COLOR" in os.environ:
        return False
    if mode == "always":
        return True
    isatty = getattr(sys.stderr, "isatty", None)
    return bool(isatty and isatty())


def style(text: str, *, fg: Optional[str] = None, bold: bool = False, dim: bool = False) -> str:
    if not _use_color():
        return text
    codes = [str(c) for c, on in ((1, bold), (2, dim), (_FG.get(fg or ""), bool(fg))) if on and c]
    if not codes:
        return text
    return f"\x1b[{';'.join(codes)}m{text}\x1b[0m"


def deansi(s: str) -> str:
    return _ANSI_RX.sub("", s)

# ------------- JSON -------------

def _json_default(o: Any) -> Any:
    if isinstance(o, (bytes, bytearray, memoryview)):
        return bytes(o).hex()
    to_dict = getattr(o, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    return str(o)


def dumps_json(obj: Any, *, indent: Optional[int] = None) -> str:
    """Sorted-key JSON; bytes become hex and identifiers their to_dict()."""
    return json.dumps(obj, default=_json_default, sort_keys=True, indent=indent)

# ------------- emitters -------------

def _write(stream: TextIO, line: str) -> None:
    try:
        stream.write(line if line.endswith("\n") else line + "\n")
        stream.flush()
    except BrokenPipeError:
        # reader closed early, e.g. `xid show ... | head`
        pass


def _human(msg: str, level: Verbosity, fg: str, *, dim: bool = False) -> None:
    if _STATE.json_mode or _RANK[_STATE.verbosity] < _RANK[level]:
        return
    stamp = ""
    if _STATE.timestamps:
        stamp = style(_dt.datetime.now().strftime("[%H:%M:%S] "), fg="blue", dim=True)
    _write(sys.stderr, stamp + style(msg, fg=fg, dim=dim))


def emit_json(obj: Any) -> None:
    _write(sys.stdout, dumps_json(obj))


def emit_err(msg: str) -> None:
    # diagnostics survive --json and --quiet
    _write(sys.stderr, style(msg, fg="red"))


def emit_verbose(msg: str) -> None:
    _human(msg, "verbose", "cyan")


def emit_trace(msg: str) -> None:
    _human(msg, "trace", "magenta", dim=True)

# ------------- tables -------------

def render_table(headers: Sequence[str], rows: Sequence[Sequence[Any]]) -> str:
    """Left-aligned columns; hex cells are never trimmed."""
    cells = [[str(c) for c in r] for r in rows]
    widths = [len(deansi(h)) for h in headers]
    for r in cells:
        for i, c in enumerate(r[: len(widths)]):
            widths[i] = max(widths[i], len(deansi(c)))

    def line(row: Sequence[str]) -> str:
        return "   ".join(c + " " * (w - len(deansi(c))) for c, w in zip(row, widths)).rstrip()

    out = [style(line(headers), bold=True), style("─" * (sum(widths) + 3 * (len(widths) - 1)), dim=True)]
    out.extend(line(r) for r in cells)
    return "\n".join(out)


__all__ = [
    "configure",
    "json_mode",
    "style",
    "deansi",
    "dumps_json",
    "emit_json",
    "emit_err",
    "emit_verbose",
    "emit_trace",
    "render_table",
]
