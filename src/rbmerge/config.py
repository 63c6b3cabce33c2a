from __future__ import annotations

"""Runtime configuration for rbmerge.

`MergeConfig.from_env()` reads the `RBMERGE_*` environment variables;
explicit keyword arguments (or CLI flags, via `dataclasses.replace`) win
over the environment.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from rbmerge.constants import DEFAULT_PARSE_CACHE_SIZE, FREEZE_TOKEN
from rbmerge.logging.helpers import get_logger

_FALSY = frozenset({'0', 'false', 'no', 'off'})

_log = get_logger('config')


def _env_flag(raw: Optional[str], default: bool) -> bool:
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() not in _FALSY


def _env_int(raw: Optional[str], default: int, *, name: str) -> int:
    if raw is None or not raw.strip():
        return default
    try:
        return max(0, int(raw.strip()))
    except ValueError:
        _log.warning('⚠  ignoring invalid %s=%r; using %d', name, raw, default)
        return default


@dataclass(frozen=True)
class MergeConfig:
    """Immutable merge settings.

    Attributes:
        freeze_token: Token in `<token>:freeze` / `<token>:unfreeze` markers.
        freeze_reminder: Inject the canonical freeze reminder in `apply`.
        parse_cache_size: Bound of the parse memo (0 disables it).
    """
    freeze_token: str = FREEZE_TOKEN
    freeze_reminder: bool = True
    parse_cache_size: int = DEFAULT_PARSE_CACHE_SIZE

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> 'MergeConfig':
        env = os.environ if environ is None else environ
        token = (env.get('RBMERGE_FREEZE_TOKEN') or '').strip() or FREEZE_TOKEN
        values = {
            'freeze_token': token,
            'freeze_reminder': _env_flag(env.get('RBMERGE_FREEZE_REMINDER'), True),
            'parse_cache_size': _env_int(
                env.get('RBMERGE_PARSE_CACHE'), DEFAULT_PARSE_CACHE_SIZE, name='RBMERGE_PARSE_CACHE'
            ),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
