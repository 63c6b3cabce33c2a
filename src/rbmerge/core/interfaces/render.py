from __future__ import annotations

from typing import Sequence, Protocol, runtime_checkable

from rbmerge.core.models import Statement


@runtime_checkable
class RendererProtocol(Protocol):
    """Serializes statements back to normalized text."""

    def render(self, statements: Sequence[Statement]) -> str:
        """Return the text for `statements` with blank lines normalized."""
        ...
