from __future__ import annotations

import datetime as _dt
import json
import logging
import os
import sys
import traceback
from typing import Any

# Custom TRACE level (more verbose than DEBUG), used for raw rx/tx chunks.
TRACE_LEVEL = 5
logging.addLevelName(TRACE_LEVEL, "TRACE")


def _logger_trace(self: logging.Logger, msg: str, *args: Any, **kwargs: Any) -> None:
    if self.isEnabledFor(TRACE_LEVEL):
        self._log(TRACE_LEVEL, msg, args, **kwargs)


if not hasattr(logging.Logger, "trace"):
    logging.Logger.trace = _logger_trace  # type: ignore[attr-defined]


_RESERVED_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime", "taskName"}


def _record_extras(record: logging.LogRecord) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for k, v in record.__dict__.items():
        if k in _RESERVED_ATTRS:
            continue
        if k.startswith("_"):
            continue
        out[k] = v
    return out


def _timestamp(record: logging.LogRecord) -> str:
    return _dt.datetime.fromtimestamp(record.created, tz=_dt.timezone.utc).astimezone().isoformat(timespec="milliseconds")


class PrettyFormatter(logging.Formatter):
    def __init__(self, *, use_color: bool) -> None:
        super().__init__()
        self._use_color = bool(use_color)

    def format(self, record: logging.LogRecord) -> str:
        parts = [_timestamp(record), record.levelname, record.name, record.getMessage()]

        extras = _record_extras(record)
        # Device path first, it is the most useful context when several terminals run.
        device = extras.pop("device", None)
        if device:
            parts.append(f"device={device}")
        for k in sorted(extras.keys()):
            parts.append(f"{k}={extras[k]!r}" if isinstance(extras[k], str) else f"{k}={extras[k]}")

        line = " ".join(parts)
        if record.exc_info:
            line += "\n" + "".join(traceback.format_exception(*record.exc_info)).rstrip()
        if self._use_color:
            line = _colorize(record.levelno, line)
        return line


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": _timestamp(record),
            "level": record.levelname.lower(),
            "logger": record.name,
            "msg": record.getMessage(),
        }
        payload.update(_record_extras(record))
        if record.exc_info:
            payload["exc"] = "".join(traceback.format_exception(*record.exc_info)).rstrip()
        return json.dumps(payload, separators=(",", ":"), sort_keys=True, default=str)


def _colorize(levelno: int, text: str) -> str:
    if levelno >= logging.ERROR:
        color = "31"  # red
    elif levelno >= logging.WARNING:
        color = "33"  # yellow
    elif levelno >= logging.INFO:
        color = "32"  # green
    elif levelno >= logging.DEBUG:
        color = "36"  # cyan
    else:
        color = "90"  # gray
    return f"\x1b[{color}m{text}\x1b[0m"


def parse_log_level(value: str | None) -> int:
    raw = (value or "").strip().lower()
    if not raw or raw == "warning" or raw == "warn":
        return logging.WARNING
    if raw == "error":
        return logging.ERROR
    if raw == "info":
        return logging.INFO
    if raw == "debug":
        return logging.DEBUG
    if raw == "trace":
        return TRACE_LEVEL
    raise ValueError("invalid log level")


def setup_logging(
    *,
    level: int = logging.WARNING,
    log_format: str = "pretty",
    log_file: str | None = None,
    no_color: bool = False,
) -> None:
    """Configure root logging.

    - Logs go to stderr; stdout belongs to the terminal display.
    - Optionally also log to a file.
    - The default level is WARNING so that diagnostics do not clutter the
      interactive prompt; shorthand and write errors are still shown.
    """

    fmt = (log_format or "pretty").strip().lower()
    if fmt not in {"pretty", "json"}:
        raise ValueError("invalid log format")

    use_color = (not no_color) and bool(getattr(sys.stderr, "isatty", lambda: False)())

    if fmt == "json":
        formatter: logging.Formatter = JsonFormatter()
        file_formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = PrettyFormatter(use_color=use_color)
        file_formatter = PrettyFormatter(use_color=False)

    handlers: list[logging.Handler] = []

    stderr_handler = logging.StreamHandler(stream=sys.stderr)
    stderr_handler.setFormatter(formatter)
    handlers.append(stderr_handler)

    if log_file:
        path = os.path.expanduser(str(log_file))
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        fh = logging.FileHandler(path, encoding="utf-8")
        fh.setFormatter(file_formatter)
        handlers.append(fh)

    logging.basicConfig(level=int(level), handlers=handlers, force=True)

    # pyserial and python-can are quiet unless we are debugging ourselves.
    third_party_level = logging.WARNING
    if int(level) <= logging.DEBUG:
        third_party_level = logging.DEBUG
    for name in ("serial", "can"):
        logging.getLogger(name).setLevel(int(third_party_level))
