from __future__ import annotations

"""File layout used by the merge engine.

A parsed top-level statement list is partitioned into:

    shebang  -> optional `#!` line
    magic    -> magic comments, hoisted to the top in source order
    header   -> file-level comment groups / freeze blocks seen before the
                first code statement
    body     -> (blank_before, statement) pairs; BLANK statements are folded
                into the flag of the statement that follows them

`Layout.statements()` rebuilds a flat statement list for the renderer.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

from rbmerge.constants import FREEZE_TOKEN, freeze_reminder_lines
from rbmerge.core.models import BLANK, Statement, StatementKind

Pair = Tuple[bool, Statement]

_HEADER_KINDS = (StatementKind.COMMENT_GROUP, StatementKind.FREEZE_MARKER)


@dataclass
class Layout:
    shebang: Optional[Statement] = None
    magic: List[Statement] = field(default_factory=list)
    header: List[Statement] = field(default_factory=list)
    body: List[Pair] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.shebang or self.magic or self.header or self.body)

    def statements(self) -> List[Statement]:
        out: List[Statement] = []
        if self.shebang is not None:
            out.append(self.shebang)
        if self.magic:
            out.extend(self.magic)
            out.append(BLANK)
        for unit in self.header:
            out.append(unit)
            out.append(BLANK)
        for blank_before, stmt in self.body:
            if blank_before and out and out[-1] is not BLANK:
                out.append(BLANK)
            out.append(stmt)
        while out and out[-1] is BLANK:
            out.pop()
        return out


def to_pairs(statements: Iterable[Statement]) -> List[Pair]:
    """Fold BLANK statements into a `blank_before` flag on the next statement."""
    pairs: List[Pair] = []
    pending = False
    for stmt in statements:
        if stmt.kind is StatementKind.BLANK:
            pending = True
            continue
        pairs.append((pending, stmt))
        pending = False
    return pairs


def from_pairs(pairs: Sequence[Pair]) -> List[Statement]:
    out: List[Statement] = []
    for i, (blank_before, stmt) in enumerate(pairs):
        if blank_before and i:
            out.append(BLANK)
        out.append(stmt)
    return out


def split_layout(statements: Sequence[Statement]) -> Layout:
    layout = Layout()
    seen_code = False
    pending = False
    for stmt in statements:
        kind = stmt.kind
        if kind is StatementKind.SHEBANG and layout.shebang is None:
            layout.shebang = stmt
        elif kind is StatementKind.MAGIC_COMMENT:
            layout.magic.append(stmt)
        elif kind is StatementKind.BLANK:
            pending = True
            continue
        elif kind in _HEADER_KINDS and not seen_code:
            layout.header.append(stmt)
        else:
            seen_code = seen_code or stmt.is_code
            layout.body.append((pending, stmt))
        pending = False
    return layout


def freeze_reminder(token: str = FREEZE_TOKEN) -> Statement:
    return Statement(StatementKind.FREEZE_MARKER, lines=freeze_reminder_lines(token))


def ensure_freeze_reminder(layout: Layout, token: str = FREEZE_TOKEN) -> Layout:
    """Place exactly one canonical reminder first in the header.

    Any other file-level copy (header or floating in the body) is dropped.
    """
    reminder = freeze_reminder(token)
    sig = reminder.signature
    header = [u for u in layout.header if u.signature != sig]
    body = [
        (blank, st) for blank, st in layout.body
        if not (st.kind in _HEADER_KINDS and st.signature == sig)
    ]
    return Layout(layout.shebang, list(layout.magic), [reminder] + header, body)


def normalize_preamble(layout: Layout) -> Layout:
    """Move file-level material sitting before the first code statement into the header.

    Detached comment groups of the first code statement and floating comment
    blocks ahead of it become header units, which is how the parser reads
    the rendered text back.
    """
    header = list(layout.header)
    body: List[Pair] = []
    seen_code = False
    for blank, stmt in layout.body:
        if not seen_code:
            if stmt.kind in _HEADER_KINDS:
                header.append(stmt)
                continue
            if stmt.is_code:
                seen_code = True
                if stmt.detached_comments:
                    header.extend(
                        Statement(StatementKind.COMMENT_GROUP, lines=tuple(group))
                        for group in stmt.detached_comments
                    )
                    stmt = stmt.with_comments(stmt.leading_comments)
        body.append((blank, stmt))
    return Layout(layout.shebang, list(layout.magic), header, body)
