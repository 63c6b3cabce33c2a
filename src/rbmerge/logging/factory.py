from __future__ import annotations

"""Logger factory used by the CLI and by callers embedding rbmerge.

Handlers are installed on first use; library modules only ask for loggers.
"""

import logging
from typing import Dict, Optional, TextIO

from rbmerge.logging.helpers import get_logger, is_trace_enabled, setup_base_logger


class DefaultLoggerFactory:
    """Configure the `rbmerge` root logger once and hand out child loggers."""

    def __init__(
            self,
            *,
            json_logs: bool = False,
            level: int = logging.INFO,
            stream: Optional[TextIO] = None,
    ) -> None:
        self.json_logs = bool(json_logs)
        # merge tracing is emitted at DEBUG, so it lowers the threshold
        self.level = logging.DEBUG if is_trace_enabled() else int(level)
        self._stream = stream
        self._loggers: Dict[str, logging.Logger] = {}

    @classmethod
    def from_flags(cls, *, json_logs: bool, verbose: bool, stream: Optional[TextIO] = None) -> DefaultLoggerFactory:
        return cls(json_logs=json_logs, level=logging.DEBUG if verbose else logging.INFO, stream=stream)

    def get_logger(self, name: str) -> logging.Logger:
        if not self._loggers:
            setup_base_logger(json_logs=self.json_logs, level=self.level, stream=self._stream)
        if name not in self._loggers:
            self._loggers[name] = get_logger(name)
        return self._loggers[name]
