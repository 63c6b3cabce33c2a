from __future__ import annotations

"""Templating strategies understood by the merge engine."""

from enum import Enum
from typing import Optional, Union

from rbmerge.errors import UnknownStrategyError


class Strategy(str, Enum):
    SKIP = 'skip'
    MERGE = 'merge'
    REPLACE = 'replace'
    APPEND = 'append'

    @classmethod
    def coerce(cls, value: Union['Strategy', str, None], *, path: Optional[str] = None) -> 'Strategy':
        """Normalize user input to a Strategy.

        None means `skip`; strings are stripped and lowercased before lookup
        (a leading ':' is tolerated, so `:merge` works).
        """
        if value is None:
            return cls.SKIP
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower().lstrip(':')
        try:
            return cls(key)
        except ValueError:
            raise UnknownStrategyError(value, path) from None
