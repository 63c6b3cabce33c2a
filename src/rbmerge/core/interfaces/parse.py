from __future__ import annotations
"""Parser protocol definitions."""

from typing import List, Protocol, runtime_checkable

from rbmerge.core.models import Statement


@runtime_checkable
class ParserProtocol(Protocol):
    """Turns raw Gemfile-like text into an ordered statement sequence.

    Implementations must be lenient: unrecognized constructs become opaque
    statements instead of raising.
    """

    def parse(self, text: str) -> List[Statement]:
        ...
