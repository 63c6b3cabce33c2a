from __future__ import annotations

"""Public surface for rbmerge.core.

Statement value objects and the Protocol seams between parser, merge
engine and renderer live here so callers have a stable import location:

    from rbmerge.core import Statement, StatementKind, ParserProtocol, ...
"""

from rbmerge.core.models import (
    Argument,
    ArgumentKind,
    Signature,
    Statement,
    StatementKind,
)
from rbmerge.core.interfaces import (
    LoggerFactoryProtocol,
    LoggerLikeProtocol,
    MergeEngineProtocol,
    ParserProtocol,
    RendererProtocol,
)

__all__ = [
    "Argument",
    "ArgumentKind",
    "Signature",
    "Statement",
    "StatementKind",
    "LoggerFactoryProtocol",
    "LoggerLikeProtocol",
    "MergeEngineProtocol",
    "ParserProtocol",
    "RendererProtocol",
]
