from __future__ import annotations

"""Statement model shared by the parser, merge engine and renderer.

Statements are immutable value objects. The parser builds a fresh tree per
input and the merge engine assembles new statements with
`dataclasses.replace` instead of editing either input tree.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple


class StatementKind(str, Enum):
    CALL = 'call'
    BLOCK = 'block'
    COMMENT_GROUP = 'comment_group'
    MAGIC_COMMENT = 'magic_comment'
    BLANK = 'blank'
    FREEZE_MARKER = 'freeze_marker'
    SHEBANG = 'shebang'
    OPAQUE = 'opaque'


FILE_LEVEL_KINDS = frozenset({
    StatementKind.COMMENT_GROUP,
    StatementKind.FREEZE_MARKER,
    StatementKind.MAGIC_COMMENT,
    StatementKind.SHEBANG,
})


class ArgumentKind(str, Enum):
    STRING = 'string'
    SYMBOL = 'symbol'
    FRAGMENT = 'fragment'


def normalize_comment_text(lines: Tuple[str, ...]) -> str:
    """Join comment lines for comparison, ignoring trailing whitespace only."""
    return '\n'.join(ln.rstrip() for ln in lines)


@dataclass(frozen=True)
class Argument:
    """A call argument: a string/symbol literal or an opaque source fragment."""
    kind: ArgumentKind
    value: str

    @property
    def normalized(self) -> str:
        if self.kind is ArgumentKind.FRAGMENT:
            return ' '.join(self.value.split())
        return self.value.strip()


@dataclass(frozen=True)
class Signature:
    """Identity used to match statements across template and destination.

    Attributes:
        family: 'call', 'assign', 'comment', 'freeze', 'magic', 'opaque', ...
        name:   Call name, assignment target or magic directive ('' otherwise).
        key:    Normalized primary argument or text (None when absent).
    """
    family: str
    name: str
    key: Optional[str] = None


@dataclass(frozen=True)
class Statement:
    """One parsed declaration plus the comments it owns.

    Attributes:
        kind: Statement tag.
        lines: Source lines of the statement itself, dedented. For blocks this
            is the (opener, closer) pair; the body lives in `body`.
        call_name: Method name for calls/blocks, assignment target for assignments.
        arguments: Ordered literal arguments.
        leading_comments: Comment lines directly above the statement.
        detached_comments: Comment groups above the statement separated from it
            (and from each other) by blank lines.
        body: Child statements of a block.
        assignment: True for `target = value` style statements.
    """
    kind: StatementKind
    lines: Tuple[str, ...] = ()
    call_name: Optional[str] = None
    arguments: Tuple[Argument, ...] = ()
    leading_comments: Tuple[str, ...] = ()
    detached_comments: Tuple[Tuple[str, ...], ...] = ()
    body: Tuple['Statement', ...] = ()
    assignment: bool = False

    @property
    def text(self) -> str:
        return '\n'.join(self.lines)

    @property
    def primary_argument(self) -> Optional[str]:
        if not self.arguments:
            return None
        return self.arguments[0].normalized

    @property
    def is_file_level(self) -> bool:
        return self.kind in FILE_LEVEL_KINDS

    @property
    def is_code(self) -> bool:
        return self.kind in (StatementKind.CALL, StatementKind.BLOCK, StatementKind.OPAQUE)

    @property
    def magic_key(self) -> Optional[str]:
        return self.call_name if self.kind is StatementKind.MAGIC_COMMENT else None

    @property
    def signature(self) -> Signature:
        kind = self.kind
        if kind in (StatementKind.CALL, StatementKind.BLOCK) and self.call_name:
            if self.assignment:
                return Signature('assign', self.call_name)
            return Signature('call', self.call_name, self.primary_argument)
        if kind is StatementKind.MAGIC_COMMENT:
            return Signature('magic', self.call_name or '')
        if kind is StatementKind.COMMENT_GROUP:
            return Signature('comment', '', normalize_comment_text(self.lines))
        if kind is StatementKind.FREEZE_MARKER:
            return Signature('freeze', '', normalize_comment_text(self.lines))
        if kind in (StatementKind.BLANK, StatementKind.SHEBANG):
            return Signature(kind.value, '')
        return Signature('opaque', '', '\n'.join(' '.join(ln.split()) for ln in self.lines))

    def with_comments(
        self,
        leading: Tuple[str, ...],
        detached: Tuple[Tuple[str, ...], ...] = (),
    ) -> 'Statement':
        return replace(self, leading_comments=tuple(leading), detached_comments=tuple(detached))

    def without_comments(self) -> 'Statement':
        return replace(self, leading_comments=(), detached_comments=())


BLANK = Statement(StatementKind.BLANK)
