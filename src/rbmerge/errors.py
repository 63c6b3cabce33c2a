from __future__ import annotations

"""Exception hierarchy for rbmerge.

Parsing and merging are lenient and never raise for input text; these
errors only surface at the facade and CLI boundaries.
"""


class RbMergeError(Exception):
    """Base class for all rbmerge errors."""


class UnknownStrategyError(RbMergeError, ValueError):
    """Raised when a templating strategy name is not recognized."""

    def __init__(self, strategy: object, path: str | None = None) -> None:
        where = f' for {path}' if path else ''
        super().__init__(f"Unknown templating strategy '{strategy}'{where}.")
        self.strategy = strategy
        self.path = path


class TemplateMergeError(RbMergeError):
    """Raised when an unexpected internal failure aborts a merge."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f'Template merge failed for {path}: {message}')
        self.path = path
