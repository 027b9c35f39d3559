"""Logging configuration for user-registry.

Two output modes, picked by ``LOG_JSON``:

  _ContainerFormatter: one human-readable line per record, for a
    terminal during local development.

  _JsonFormatter: one JSON object per line (JSON Lines), for a log
    aggregator.  Request context attached by RequestContextMiddleware
    (request_id, method, path, status_code, duration_ms) becomes
    top-level keys so it can be filtered on directly.

Everything goes to stdout; the container runtime collects it.
"""

from __future__ import annotations

import json
import logging
import sys
from contextvars import ContextVar

_DATE_FMT = "%Y-%m-%dT%H:%M:%S%z"

# Loggers that are chatty at DEBUG and add nothing to our own request log.
_NOISY_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error", "httpcore", "httpx")

# Set per request by RequestContextMiddleware; readable anywhere in the call chain.
request_id_var: ContextVar[str] = ContextVar("request_id", default="-")


class RequestContextFilter(logging.Filter):
    """Stamp the current request id onto every record reaching the handler.

    Installed on the handler rather than the root logger: logger filters
    do not run for records propagated up from child loggers.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            record.request_id = request_id_var.get()  # type: ignore[attr-defined]
        return True


class _ContainerFormatter(logging.Formatter):
    """Single-line formatter for container stdout.

    WARNING and above get a ``[filename:lineno]`` suffix; tracebacks are
    appended when the record carries exc_info.
    """

    _BASE_FMT = "%(asctime)s %(levelname)-8s %(name)s  %(message)s"
    _LOC_SUFFIX = "  [%(filename)s:%(lineno)d]"

    def __init__(self) -> None:
        super().__init__(datefmt=_DATE_FMT)

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        base = super().formatTime(record, datefmt)
        # Millisecond precision goes before the +HHMM offset.
        return f"{base[:-5]}.{int(record.msecs):03d}{base[-5:]}"

    def format(self, record: logging.LogRecord) -> str:
        with_location = record.levelno >= logging.WARNING
        self._style._fmt = self._BASE_FMT + (self._LOC_SUFFIX if with_location else "")
        return super().format(record)


class _JsonFormatter(logging.Formatter):
    """JSON Lines formatter with request context fields lifted to the top level."""

    _CONTEXT_FIELDS = (
        "request_id",
        "method",
        "path",
        "status_code",
        "duration_ms",
    )

    def __init__(self) -> None:
        super().__init__(datefmt=_DATE_FMT)

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key in self._CONTEXT_FIELDS:
            value = getattr(record, key, None)
            # "-" is the placeholder outside a request
            if value is not None and value != "-":
                entry[key] = value

        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def setup_logging(level_name: str, *, json_format: bool = False) -> None:
    """Point the root logger at stdout with the chosen formatter.

    Unknown level names fall back to INFO.  Third-party loggers in
    ``_NOISY_LOGGERS`` never go below WARNING.
    """
    level = getattr(logging, level_name.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_JsonFormatter() if json_format else _ContainerFormatter())
    handler.addFilter(RequestContextFilter())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
