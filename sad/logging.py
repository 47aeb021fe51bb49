"""
sad.logging
-----------

Structured logging for the self-addressing data layer:
- JSON lines or a one-line text format (colored on a TTY)
- Context-local fields via `contextvars` (trace_id, component, said, ...)
- Safe value coercion (bytes → hex, Paths → str, dataclasses → dict)
- stdlib only, importable before anything else in the package

Usage
-----
    from sad import logging as slog

    slog.configure(json=False, level="DEBUG")  # once, at process start
    log = slog.get_logger(__name__)

    with slog.trace_scope():
        slog.bind(component="verify")
        log.info("record accepted", extra={"said": said})

Environment
-----------
SAD_LOG_FORMAT : "json" | "text"   (overrides TTY detection)
SAD_LOG_LEVEL  : minimum level name (read by sad.config)

The library itself never configures handlers; only the CLI (or the embedding
application) does.
"""

from __future__ import annotations

import datetime as _dt
import io
import json
import logging
import os
import sys
import threading
import traceback
import types
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Any, Dict, Optional

ENV_FORMAT = "SAD_LOG_FORMAT"
ROOT_LOGGER = "sad"

# ----------------------------
# Context
# ----------------------------

_LOG_CONTEXT: ContextVar[Dict[str, Any]] = ContextVar("_LOG_CONTEXT", default={})

DEFAULT_CONTEXT_KEYS = (
    "trace_id",
    "component",
    "ident",
    "kind",
    "said",
    "index",
)


def context() -> Dict[str, Any]:
    """Return a *copy* of the active logging context."""
    return dict(_LOG_CONTEXT.get())


def bind(**fields: Any) -> None:
    """Merge fields into the active context."""
    cur = dict(_LOG_CONTEXT.get())
    cur.update({k: _coerce_value(v) for k, v in fields.items()})
    _LOG_CONTEXT.set(cur)


def unbind(*keys: str) -> None:
    cur = dict(_LOG_CONTEXT.get())
    for k in keys:
        cur.pop(k, None)
    _LOG_CONTEXT.set(cur)


def clear_context() -> None:
    _LOG_CONTEXT.set({})


@contextmanager
def trace_scope(trace_id: Optional[str] = None, **fields: Any):
    """
    Ensure a trace_id (plus any `fields`) for the duration of the scope.
    Prior context is restored on exit.
    """
    prev = dict(_LOG_CONTEXT.get())
    try:
        bind(trace_id=trace_id or short_uuid(), **fields)
        yield
    finally:
        _LOG_CONTEXT.set(prev)


def short_uuid() -> str:
    return uuid.uuid4().hex[:12]


# ----------------------------
# Formatters
# ----------------------------

# LogRecord attributes that are never treated as structured extras.
_RESERVED = frozenset(
    (
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
    )
)

_LEVEL_TO_INT = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
    "NOTSET": logging.NOTSET,
}

ANSI = types.SimpleNamespace(
    RESET="\x1b[0m",
    BOLD="\x1b[1m",
    FG=types.SimpleNamespace(
        RED="\x1b[31m",
        GREEN="\x1b[32m",
        YELLOW="\x1b[33m",
        MAGENTA="\x1b[35m",
        CYAN="\x1b[36m",
        GREY="\x1b[90m",
        WHITE="\x1b[37m",
    ),
)

_LEVEL_COLOR = {
    logging.DEBUG: ANSI.FG.GREY,
    logging.INFO: ANSI.FG.GREEN,
    logging.WARNING: ANSI.FG.YELLOW,
    logging.ERROR: ANSI.FG.RED,
    logging.CRITICAL: ANSI.BOLD + ANSI.FG.MAGENTA,
}


def _utcnow_iso() -> str:
    return _dt.datetime.now(_dt.timezone.utc).isoformat(timespec="milliseconds")


def _supports_color(stream: Any) -> bool:
    try:
        return bool(stream.isatty()) and os.environ.get("NO_COLOR") is None
    except (AttributeError, ValueError):
        return False


def _coerce_value(v: Any) -> Any:
    if v is None or isinstance(v, (bool, int, float, str, list, dict)):
        return v
    if isinstance(v, (bytes, bytearray, memoryview)):
        return bytes(v).hex()
    if isinstance(v, Path):
        return str(v)
    if isinstance(v, (set, frozenset, tuple)):
        return [_coerce_value(x) for x in v]
    if isinstance(v, _dt.datetime):
        if v.tzinfo is None:
            v = v.replace(tzinfo=_dt.timezone.utc)
        return v.isoformat()
    if is_dataclass(v) and not isinstance(v, type):
        return asdict(v)
    return str(v)


def _extras(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        k: _coerce_value(v)
        for k, v in record.__dict__.items()
        if not k.startswith("_") and k not in _RESERVED
    }


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": _utcnow_iso(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "pid": os.getpid(),
            "tid": threading.get_ident(),
        }
        payload.update(context())
        for k, v in _extras(record).items():
            payload.setdefault(k, v)

        if record.exc_info:
            payload["exc"] = "".join(traceback.format_exception(*record.exc_info)).rstrip()

        return json.dumps(payload, default=str, separators=(",", ":"), ensure_ascii=False)


class TextFormatter(logging.Formatter):
    """
    One line per record:
      2026-01-05T12:34:56.789+00:00 | DEBUG | sad.saider | trace_id=ab12 | said=E... | saidified record
    """

    def __init__(self, stream: Any = None):
        super().__init__()
        self._color = _supports_color(stream) if stream is not None else False

    def format(self, record: logging.LogRecord) -> str:
        ctx = context()
        ctx_str = " ".join(f"{k}={ctx[k]}" for k in DEFAULT_CONTEXT_KEYS if ctx.get(k) is not None)
        extras = " ".join(f"{k}={v}" for k, v in _extras(record).items() if k not in ctx)

        lvl = f"{record.levelname:<5}"
        name = record.name
        if self._color:
            lvl = f"{_LEVEL_COLOR.get(record.levelno, ANSI.FG.WHITE)}{lvl}{ANSI.RESET}"
            name = f"{ANSI.FG.CYAN}{name}{ANSI.RESET}"

        parts = [_utcnow_iso(), lvl, name]
        if ctx_str:
            parts.append(ctx_str)
        if extras:
            parts.append(extras)
        parts.append(record.getMessage())
        line = " | ".join(parts)

        if record.exc_info:
            line += "\n" + "".join(traceback.format_exception(*record.exc_info)).rstrip()
        return line


# ----------------------------
# Public setup API
# ----------------------------


def configure(
    *,
    json: Optional[bool] = None,
    level: str | int = "WARNING",
    stream: io.TextIOBase = sys.stderr,
    file_path: Optional[Path | str] = None,
) -> None:
    """
    Configure the package logger (``sad``), replacing any handlers it holds.

    json      : None → SAD_LOG_FORMAT, then TTY detection (text on a TTY)
    level     : minimum level
    file_path : optionally tee JSON lines to a file
    """
    lvl = _coerce_level(level)
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(lvl)
    root.propagate = False
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()

    console = logging.StreamHandler(stream)
    console.setLevel(lvl)
    console.setFormatter(JSONFormatter() if _decide_json(json, stream) else TextFormatter(stream))
    root.addHandler(console)

    if file_path:
        p = Path(file_path).expanduser()
        p.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(p, encoding="utf-8")
        fh.setLevel(lvl)
        fh.setFormatter(JSONFormatter())
        root.addHandler(fh)


def configure_from_config(
    cfg: Any,
    *,
    stream: io.TextIOBase = sys.stderr,
    file_path: Optional[Path | str] = None,
) -> None:
    """Configure from a `sad.config.Config` (log_level, log_format)."""
    fmt = (getattr(cfg, "log_format", None) or "").lower()
    configure(
        json={"json": True, "text": False}.get(fmt),
        level=getattr(cfg, "log_level", "WARNING"),
        stream=stream,
        file_path=file_path,
    )



def get_logger(name: Optional[str] = None) -> logging.Logger:
    return logging.getLogger(name or ROOT_LOGGER)


# ----------------------------
# Internals
# ----------------------------


def _coerce_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    return _LEVEL_TO_INT.get(str(level).strip().upper(), logging.WARNING)


def _decide_json(json_flag: Optional[bool], stream: Any) -> bool:
    if json_flag is not None:
        return json_flag
    env = _env_json_override()
    if env is not None:
        return env
    return not _supports_color(stream)


def _env_json_override() -> Optional[bool]:
    env = os.environ.get(ENV_FORMAT, "").strip().lower()
    if env == "json":
        return True
    if env == "text":
        return False
    return None


__all__ = [
    "ENV_FORMAT",
    "context",
    "bind",
    "unbind",
    "clear_context",
    "trace_scope",
    "short_uuid",
    "JSONFormatter",
    "TextFormatter",
    "configure",
    "configure_from_config",
    "get_logger",
]
