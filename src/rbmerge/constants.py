from __future__ import annotations

"""Project-wide constants used across modules.

This module isolates public constants to reduce cross-module coupling.
"""

# Token used in `<token>:freeze` / `<token>:unfreeze` comment markers.
FREEZE_TOKEN: str = 'kettle-dev'

BUG_URL: str = 'https://github.com/kettle-rb/kettle-dev/issues'

# Indentation unit used when rendering block bodies.
INDENT_UNIT: str = '  '

DEFAULT_PARSE_CACHE_SIZE: int = 128


def freeze_reminder_lines(token: str = FREEZE_TOKEN) -> tuple[str, ...]:
    """Return the canonical freeze reminder block for *token*."""
    return (
        f'# To retain during {token} templating:',
        f'#     {token}:freeze',
        '#     # ... your code',
        f'#     {token}:unfreeze',
    )
