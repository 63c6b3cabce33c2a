"""
comment_rules – Centralized comment regex rules for rbmerge.

This module is the single source of truth for:
  • Comment and shebang line detection
  • Magic comment directives (frozen_string_literal, coding, ...)
  • Freeze block markers (`<token>:freeze` / `<token>:unfreeze`)

Magic comments are keyed by directive so duplicates collapse to the first
occurrence regardless of their value.
"""

import re
from functools import lru_cache
from typing import Dict, Optional, Pattern, Tuple

COMMENT_LINE_RE: Pattern[str] = re.compile(r"^\s*#")
SHEBANG_RE: Pattern[str] = re.compile(r"^#!")
BLANK_LINE_RE: Pattern[str] = re.compile(r"^\s*$")

MAGIC_COMMENT_RULES: Dict[str, Pattern[str]] = {
    "frozen_string_literal": re.compile(r"^#\s*frozen[_-]string[_-]literal\s*:\s*\S+", re.IGNORECASE),
    "coding": re.compile(r"^#\s*(?:-\*-.*?)?\b(?:en)?coding\s*[:=]\s*[\w.-]+", re.IGNORECASE),
    "warn_indent": re.compile(r"^#\s*warn[_-]indent\s*:\s*\S+", re.IGNORECASE),
    "shareable_constant_value": re.compile(r"^#\s*shareable[_-]constant[_-]value\s*:\s*\S+", re.IGNORECASE),
}


def is_comment_line(line: str) -> bool:
    return bool(COMMENT_LINE_RE.match(line))


def is_blank_line(line: str) -> bool:
    return bool(BLANK_LINE_RE.match(line))


def magic_comment_key(line: str) -> Optional[str]:
    """Return the directive name when *line* is a magic comment, else None."""
    stripped = line.strip()
    for key, rx in MAGIC_COMMENT_RULES.items():
        if rx.match(stripped):
            return key
    return None


@lru_cache(maxsize=16)
def freeze_marker_patterns(token: str) -> Tuple[Pattern[str], Pattern[str]]:
    """Return compiled (freeze, unfreeze) marker patterns for *token*."""
    tok = re.escape(token)
    freeze = re.compile(rf"^\s*#.*(?<![\w-]){tok}:freeze\b", re.IGNORECASE)
    unfreeze = re.compile(rf"^\s*#.*(?<![\w-]){tok}:unfreeze\b", re.IGNORECASE)
    return freeze, unfreeze
