from __future__ import annotations
from typing import Protocol, runtime_checkable


@runtime_checkable
class LoggerLikeProtocol(Protocol):
    """Logger surface the parser, engine and facade write to."""

    def isEnabledFor(self, level: int) -> bool: ...

    def debug(self, msg: str, *args, **kwargs) -> None: ...

    def info(self, msg: str, *args, **kwargs) -> None: ...

    def warning(self, msg: str, *args, **kwargs) -> None: ...

    def error(self, msg: str, *args, **kwargs) -> None: ...


@runtime_checkable
class LoggerFactoryProtocol(Protocol):
    """Hands out loggers under the `rbmerge` namespace, configuring handlers on first use."""

    json_logs: bool
    level: int

    def get_logger(self, name: str) -> LoggerLikeProtocol: ...
