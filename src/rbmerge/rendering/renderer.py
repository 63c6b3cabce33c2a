from __future__ import annotations

"""
Renderer – serialize statements back to normalized Ruby source.

Output rules:
    * The shebang (if any) comes first.
    * Magic comments follow as one contiguous block in source order,
      deduplicated by directive, then exactly one blank line.
    * Top-level freeze blocks are surrounded by blank lines.
    * Each statement is preceded by its detached comment groups (each
      followed by a blank line) and then its leading comments.
    * Block bodies are re-indented by one unit per nesting level.

A final pass (`normalize_blank_lines`) collapses blank runs to a single
blank line and guarantees exactly one trailing newline.
"""

import logging
import re
from typing import List, Optional, Sequence, Set

from rbmerge.constants import INDENT_UNIT
from rbmerge.core.models import Statement, StatementKind
from rbmerge.logging.helpers import get_logger, trace_merge
from rbmerge.parsing.tokenizer import RubyLineTokenizer as _Tok

_MULTI_BLANK_RE = re.compile(r'\n{3,}')


def normalize_blank_lines(text: str) -> str:
    """Collapse 2+ blank lines to one and end with exactly one newline.

    Whitespace-only lines count as blank. Empty content renders as ''.
    """
    lines = ['' if not ln.strip() else ln for ln in text.split('\n')]
    out = _MULTI_BLANK_RE.sub('\n\n', '\n'.join(lines)).strip('\n')
    return f'{out}\n' if out else ''


class Renderer:
    def __init__(self, *, indent: str = INDENT_UNIT, logger: Optional[logging.Logger] = None) -> None:
        self._indent = indent
        self._log = logger or get_logger('rendering.renderer')

    def render(self, statements: Sequence[Statement]) -> str:
        out: List[str] = []
        rest: List[Statement] = []
        magic_keys: Set[str] = set()
        magic: List[str] = []
        shebang: Optional[str] = None

        for stmt in statements:
            if stmt.kind is StatementKind.SHEBANG and shebang is None:
                shebang = stmt.text
            elif stmt.kind is StatementKind.MAGIC_COMMENT:
                key = stmt.magic_key or stmt.text
                if key not in magic_keys:
                    magic_keys.add(key)
                    magic.append(stmt.text)
            else:
                rest.append(stmt)

        if shebang is not None:
            out.append(shebang)
        if magic:
            out.extend(magic)
            out.append('')
        self._emit(rest, 0, out)
        trace_merge(self._log, 'rendered statements', count=len(statements), lines=len(out))
        return normalize_blank_lines('\n'.join(out))

    def _emit(self, statements: Sequence[Statement], depth: int, out: List[str]) -> None:
        items = list(statements)
        if depth:
            while items and items[0].kind is StatementKind.BLANK:
                items.pop(0)
            while items and items[-1].kind is StatementKind.BLANK:
                items.pop()

        pad = self._indent * depth
        for stmt in items:
            kind = stmt.kind
            if kind is StatementKind.BLANK:
                out.append('')
                continue
            if kind is StatementKind.FREEZE_MARKER and not depth:
                out.append('')
                out.extend(stmt.lines)
                out.append('')
                continue

            for group in stmt.detached_comments:
                out.extend(self._pad(group, pad))
                out.append('')
            out.extend(self._pad(stmt.leading_comments, pad))

            if kind is StatementKind.BLOCK and len(stmt.lines) == 2:
                opener, closer = stmt.lines
                out.append(pad + opener)
                self._emit(stmt.body, depth + 1, out)
                out.append(pad + closer)
            elif any(_Tok.has_plain_heredoc(_Tok.strip_inline_comment(ln)) for ln in stmt.lines):
                out.extend(stmt.lines)
            else:
                out.extend(self._pad(stmt.lines, pad))

    @staticmethod
    def _pad(lines: Sequence[str], pad: str) -> List[str]:
        return [pad + ln if ln.strip() else '' for ln in lines]
