from __future__ import annotations

"""
StatementParser – lenient parser for Gemfile / Appraisals style Ruby DSLs.

Parsing runs in two passes over a list of lines:

1. Scan: lines become raw items (blank runs, comment runs, magic comments,
   freeze blocks and complete code statements). Statement ends are found
   by tracking `do`/keyword/brace scopes, open brackets, heredocs and
   trailing continuation tokens.
2. Group: comment runs are attached to the statement that follows them
   (`leading_comments` when adjacent, `detached_comments` when separated
   by blank lines after the first statement of the scope). Runs that are
   not followed by a statement, and blank-separated runs in the top-level
   preamble, become standalone file-level comment groups.

Blocks (`name args do ... end` / `name(args) { ... }`) recurse into their
dedented body. Anything that is not a recognizable call is kept verbatim
as an opaque statement; the parser never raises on input text.
"""

import logging
import textwrap
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List, Optional, Sequence, Tuple

from rbmerge.constants import DEFAULT_PARSE_CACHE_SIZE, FREEZE_TOKEN
from rbmerge.core.models import BLANK, Statement, StatementKind
from rbmerge.logging.helpers import get_logger, trace_merge
from rbmerge.parsing.comment_rules import (
    SHEBANG_RE,
    freeze_marker_patterns,
    is_blank_line,
    is_comment_line,
    magic_comment_key,
)
from rbmerge.parsing.tokenizer import RubyLineTokenizer as _Tok

_ITEM_BLANK = 'blank'
_ITEM_COMMENTS = 'comments'
_ITEM_MAGIC = 'magic'
_ITEM_FREEZE = 'freeze'
_ITEM_CODE = 'code'


@dataclass
class _Item:
    kind: str
    lines: List[str] = field(default_factory=list)


def _split_lines(text: str) -> List[str]:
    return text.replace('\r\n', '\n').replace('\r', '\n').split('\n')


def _dedent(lines: Sequence[str]) -> Tuple[str, ...]:
    return tuple(ln.rstrip() for ln in textwrap.dedent('\n'.join(lines)).split('\n'))


class StatementParser:
    """Parse raw text into an ordered sequence of `Statement` objects."""

    def __init__(self, *, freeze_token: str = FREEZE_TOKEN, logger: Optional[logging.Logger] = None) -> None:
        self._token = freeze_token
        self._freeze_re, self._unfreeze_re = freeze_marker_patterns(freeze_token)
        self._log = logger or get_logger('parsing.parser')

    @property
    def freeze_token(self) -> str:
        return self._token

    def parse(self, text: str) -> List[Statement]:
        lines = _split_lines(text or '')
        return self._parse_scope(lines, top_level=True)

    # ------------------------------------------------------------------ #
    #  Pass 1: scan                                                        #
    # ------------------------------------------------------------------ #
    def _scan(self, lines: List[str], *, top_level: bool) -> List[_Item]:
        items: List[_Item] = []
        i, n = 0, len(lines)
        while i < n:
            line = lines[i]
            if is_blank_line(line):
                if not items or items[-1].kind != _ITEM_BLANK:
                    items.append(_Item(_ITEM_BLANK))
                i += 1
                continue

            if is_comment_line(line):
                if top_level and magic_comment_key(line):
                    items.append(_Item(_ITEM_MAGIC, [line.strip()]))
                    i += 1
                    continue
                if self._freeze_re.match(line):
                    end = self._find_unfreeze(lines, i + 1)
                    if end is not None:
                        header: List[str] = []
                        if items and items[-1].kind == _ITEM_COMMENTS:
                            header = [items[-1].lines.pop()]
                            if not items[-1].lines:
                                items.pop()
                        items.append(_Item(_ITEM_FREEZE, header + lines[i:end + 1]))
                        i = end + 1
                        continue
                if items and items[-1].kind == _ITEM_COMMENTS:
                    items[-1].lines.append(line)
                else:
                    items.append(_Item(_ITEM_COMMENTS, [line]))
                i += 1
                continue

            j = self._statement_end(lines, i)
            items.append(_Item(_ITEM_CODE, lines[i:j]))
            i = j
        return items

    def _find_unfreeze(self, lines: List[str], start: int) -> Optional[int]:
        for k in range(start, len(lines)):
            if self._unfreeze_re.match(lines[k]):
                return k
            if self._freeze_re.match(lines[k]):
                return None
        return None

    @staticmethod
    def _statement_end(lines: List[str], start: int) -> int:
        """Return the index one past the last line of the statement at *start*."""
        depth = 0
        brackets = 0
        heredocs: List[str] = []
        cont = False
        j, n = start, len(lines)
        while j < n:
            line = lines[j]
            j += 1
            if heredocs:
                if line.strip() == heredocs[0]:
                    heredocs.pop(0)
            else:
                code = _Tok.strip_inline_comment(line)
                depth += _Tok.scope_delta(code)
                brackets += _Tok.bracket_delta(code)
                heredocs.extend(_Tok.heredoc_terminators(code))
                cont = _Tok.continues(code)
                if depth < 0 or brackets < 0:
                    break
            if heredocs or depth > 0 or brackets > 0:
                continue
            if j < n and not is_blank_line(lines[j]):
                nxt = lines[j].lstrip()
                if cont or (nxt.startswith(('.', '&.')) and not nxt.startswith('..')):
                    continue
            break
        return j

    # ------------------------------------------------------------------ #
    #  Pass 2: group                                                       #
    # ------------------------------------------------------------------ #
    def _parse_scope(self, lines: List[str], *, top_level: bool) -> List[Statement]:
        out: List[Statement] = []
        k = 0
        if top_level and lines and SHEBANG_RE.match(lines[0]):
            out.append(Statement(StatementKind.SHEBANG, lines=(lines[0].rstrip(),)))
            k = 1
        items = self._scan(lines[k:], top_level=top_level)

        seen_code = False
        idx, n = 0, len(items)
        while idx < n:
            item = items[idx]
            if item.kind == _ITEM_BLANK:
                if out and out[-1].kind is not StatementKind.BLANK:
                    out.append(BLANK)
                idx += 1
                continue
            if item.kind == _ITEM_MAGIC:
                line = item.lines[0]
                out.append(Statement(StatementKind.MAGIC_COMMENT, lines=(line,), call_name=magic_comment_key(line)))
                idx += 1
                continue
            if item.kind == _ITEM_FREEZE:
                out.append(Statement(StatementKind.FREEZE_MARKER, lines=_dedent(item.lines)))
                idx += 1
                continue
            if item.kind == _ITEM_CODE:
                out.append(self._build_statement(item.lines))
                seen_code = True
                idx += 1
                continue

            # Comment run: attach to the following statement when it owns it.
            if idx + 1 < n and items[idx + 1].kind == _ITEM_CODE:
                stmt = self._build_statement(items[idx + 1].lines)
                out.append(stmt.with_comments(_dedent(item.lines)))
                seen_code = True
                idx += 2
                continue
            if seen_code or not top_level:
                owned = self._collect_detached(items, idx)
                if owned is not None:
                    groups, leading, code_idx = owned
                    stmt = self._build_statement(items[code_idx].lines)
                    out.append(stmt.with_comments(leading, groups))
                    trace_merge(self._log, 'detached comments attached', groups=len(groups))
                    idx = code_idx + 1
                    continue
            out.append(Statement(StatementKind.COMMENT_GROUP, lines=_dedent(item.lines)))
            idx += 1

        while out and out[-1].kind is StatementKind.BLANK:
            out.pop()
        return out

    @staticmethod
    def _collect_detached(
        items: List[_Item], start: int
    ) -> Optional[Tuple[Tuple[Tuple[str, ...], ...], Tuple[str, ...], int]]:
        """Collect `comments (blank comments)* [blank] code` chains starting at *start*.

        Returns (detached_groups, leading, code_index) or None when the chain
        does not end in a statement.
        """
        groups: List[Tuple[str, ...]] = []
        m, n = start, len(items)
        adjacent = False
        while m < n and items[m].kind == _ITEM_COMMENTS:
            groups.append(_dedent(items[m].lines))
            m += 1
            adjacent = True
            if m < n and items[m].kind == _ITEM_BLANK:
                m += 1
                adjacent = False
            else:
                break
        if m >= n or items[m].kind != _ITEM_CODE or not groups:
            return None
        leading: Tuple[str, ...] = groups.pop() if adjacent else ()
        return tuple(groups), leading, m

    # ------------------------------------------------------------------ #
    #  Statements                                                          #
    # ------------------------------------------------------------------ #
    def _build_statement(self, raw: List[str]) -> Statement:
        lines = _dedent(raw)
        first_code = _Tok.strip_inline_comment(lines[0])
        head = _Tok.parse_call(first_code)

        if (
            head is not None
            and not head.assignment
            and len(lines) >= 2
            and _Tok.opens_block(first_code)
            and _Tok.closes_block(_Tok.strip_inline_comment(lines[-1]))
        ):
            body = self._parse_scope(list(lines[1:-1]), top_level=False)
            return Statement(
                StatementKind.BLOCK,
                lines=(lines[0].strip(), lines[-1].strip()),
                call_name=head.name,
                arguments=_Tok.parse_arguments(head.args_text),
                body=tuple(body),
            )

        if len(lines) > 1:
            joined = ' '.join(_Tok.strip_inline_comment(ln).strip() for ln in lines)
            head = _Tok.parse_call(joined)
        if head is None:
            return Statement(StatementKind.OPAQUE, lines=lines)
        return Statement(
            StatementKind.CALL,
            lines=lines,
            call_name=head.name,
            arguments=_Tok.parse_arguments(head.args_text),
            assignment=head.assignment,
        )


def _parse_uncached(text: str, freeze_token: str) -> Tuple[Statement, ...]:
    return tuple(StatementParser(freeze_token=freeze_token).parse(text))


_parse_cached = lru_cache(maxsize=DEFAULT_PARSE_CACHE_SIZE)(_parse_uncached)


def configure_parse_cache(size: int) -> None:
    """Resize the parse memo; 0 disables memoization entirely."""
    global _parse_cached
    size = max(0, int(size))
    if _parse_cached.cache_parameters()['maxsize'] == size:
        return
    _parse_cached = lru_cache(maxsize=size)(_parse_uncached)


def parse(text: str, *, freeze_token: str = FREEZE_TOKEN) -> List[Statement]:
    """Parse *text* through the content-keyed memo.

    Statements are immutable, so cached trees are shared between callers.
    """
    return list(_parse_cached(text or '', freeze_token))
