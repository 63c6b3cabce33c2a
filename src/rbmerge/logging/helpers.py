from __future__ import annotations

"""Logging helpers for rbmerge: logger names, handler setup and merge tracing.

    - JsonLogFormatter: one JSON object per record; merge context values
      (signatures, strategies, statement kinds) are rendered as plain data.
    - setup_base_logger: installs the single handler on the 'rbmerge' logger
      and switches its formatter when called again with other flags.
    - get_logger: namespaced loggers ('rbmerge.*').
    - trace_merge: debug records for merge decisions, gated by RBMERGE_TRACE.

Library modules only ask for loggers; handlers are installed by the CLI
through `setup_base_logger` (or `DefaultLoggerFactory`).
"""

import dataclasses
import enum
import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional, TextIO

_BASE = 'rbmerge'
_HANDLER_NAME = 'rbmerge-stream'
_TEXT_FORMAT = '%(levelname)s %(name)s: %(message)s'


def _plain(value: Any) -> Any:
    """Turn merge context values into JSON-ready data."""
    if isinstance(value, enum.Enum):
        return value.value
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: _plain(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, dict):
        return {str(k): _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_plain(v) for v in value]
    return value


class JsonLogFormatter(logging.Formatter):
    """Compact JSON records.

    Fields: ts (UTC, milliseconds), level, module (logger name), msg,
    version, and when present ctx (the `context` extra set by trace_merge)
    and exc (formatted traceback).
    """

    def __init__(self) -> None:
        super().__init__()
        self._version = self._resolve_version()

    @staticmethod
    def _resolve_version() -> str:
        try:
            from rbmerge import __version__
        except ImportError:
            return os.getenv('RBMERGE_VERSION', 'unknown')
        return str(__version__)

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: Dict[str, Any] = {
            'ts': ts.isoformat(timespec='milliseconds').replace('+00:00', 'Z'),
            'level': record.levelname,
            'module': record.name,
            'msg': record.getMessage(),
            'version': self._version,
        }
        ctx = getattr(record, 'context', None)
        if isinstance(ctx, dict) and ctx:
            payload['ctx'] = _plain(ctx)
        if record.exc_info:
            payload['exc'] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def _formatter(json_logs: bool) -> logging.Formatter:
    return JsonLogFormatter() if json_logs else logging.Formatter(_TEXT_FORMAT)


def setup_base_logger(
    *, json_logs: bool = False, level: int = logging.INFO, stream: Optional[TextIO] = None
) -> logging.Logger:
    """Configure the 'rbmerge' logger and return it.

    Repeated calls (one per CLI invocation in the same process) reuse the
    installed handler, updating its level, formatter and stream.
    """
    base = logging.getLogger(_BASE)
    base.setLevel(level)
    base.propagate = False

    handler = next((h for h in base.handlers if h.get_name() == _HANDLER_NAME), None)
    if handler is None:
        handler = logging.StreamHandler(stream or sys.stderr)
        handler.set_name(_HANDLER_NAME)
        base.addHandler(handler)
    elif stream is not None and isinstance(handler, logging.StreamHandler):
        handler.setStream(stream)

    if handler.formatter is None or isinstance(handler.formatter, JsonLogFormatter) != bool(json_logs):
        handler.setFormatter(_formatter(json_logs))
    return base


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a namespaced logger under 'rbmerge'."""
    if not name or name == _BASE:
        return logging.getLogger(_BASE)
    if name.startswith(_BASE + '.'):
        return logging.getLogger(name)
    return logging.getLogger(f'{_BASE}.{name}')


def is_trace_enabled() -> bool:
    return os.getenv('RBMERGE_TRACE') == '1'


def trace_merge(logger: logging.Logger, message: str, **ctx) -> None:
    """Emit a merge decision at DEBUG when RBMERGE_TRACE=1.

    The context travels on the record as `context` for the JSON formatter
    and is appended to the text message for plain logs.
    """
    if not is_trace_enabled():
        return
    if ctx:
        logger.debug('%s | %s', message, ' '.join(f'{k}={v}' for k, v in ctx.items()), extra={'context': ctx})
    else:
        logger.debug('%s', message)
