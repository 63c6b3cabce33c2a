from __future__ import annotations
"""Merge engine protocol definitions."""

from typing import List, Protocol, Sequence, runtime_checkable

from rbmerge.core.models import Statement
from rbmerge.merging.strategies import Strategy


@runtime_checkable
class MergeEngineProtocol(Protocol):
    """Combines template and destination statements under a strategy."""

    def merge(
        self,
        template: Sequence[Statement],
        dest: Sequence[Statement],
        strategy: Strategy,
    ) -> List[Statement]:
        ...
