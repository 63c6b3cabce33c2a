from __future__ import annotations

"""
MergeEngine – combine template and destination statement trees.

Statements are matched by `Statement.signature`; the first destination
occurrence of a signature is the merge target. Strategy semantics:

    skip     keep the destination (template when destination is empty);
             only file-level comments are deduplicated.
    merge    matched statements take the template text and the union of
             both sides' comments; bodies of mergeable blocks are merged
             recursively; duplicates on both sides collapse to the first.
    replace  matched statements are replaced wholesale by the template's.
    append   destination kept as-is; template-only statements appended.

In every strategy, destination-only statements keep their position and
template-only statements are appended after them in template order,
ahead of any trailing comment groups or freeze blocks. Template statements
already declared inside a destination freeze block are not added.
Nothing here raises on unusual input; unmatched statements pass through.
"""

import logging
from dataclasses import replace
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Set, Tuple

from rbmerge.core.models import Signature, Statement, StatementKind, normalize_comment_text
from rbmerge.logging.helpers import get_logger, trace_merge
from rbmerge.merging.dedup import dedupe_file_level, dedupe_pairs
from rbmerge.merging.dialects import Dialect, get_dialect_registry
from rbmerge.merging.layout import Layout, Pair, from_pairs, split_layout, to_pairs
from rbmerge.merging.strategies import Strategy
from rbmerge.parsing.comment_rules import is_comment_line
from rbmerge.parsing.parser import parse

Combine = Callable[[Statement, Statement], Statement]

_FLOATING = (StatementKind.COMMENT_GROUP, StatementKind.FREEZE_MARKER)
_CODE = (StatementKind.CALL, StatementKind.BLOCK)


def _union_lines(first: Sequence[str], second: Sequence[str]) -> Tuple[str, ...]:
    known = {ln.rstrip() for ln in first}
    return tuple(first) + tuple(ln for ln in second if ln.rstrip() not in known)


def _union_groups(
    first: Sequence[Tuple[str, ...]], second: Sequence[Tuple[str, ...]]
) -> Tuple[Tuple[str, ...], ...]:
    known = {normalize_comment_text(g) for g in first}
    return tuple(first) + tuple(g for g in second if normalize_comment_text(g) not in known)


def _union_units(first: Sequence[Statement], second: Sequence[Statement]) -> List[Statement]:
    known = {u.signature for u in first}
    return list(first) + [u for u in second if u.signature not in known]


def _push(out: List[Pair], blank: bool, stmt: Statement) -> None:
    """Add a template-only *stmt* ahead of any trailing floating comment units."""
    at = len(out)
    while at and out[at - 1][1].kind in _FLOATING:
        at -= 1
    out.insert(at, (blank, stmt))


def frozen_signatures(units: Iterable[Statement]) -> Set[Signature]:
    """Signatures of the code kept between freeze markers in *units*."""
    sigs: Set[Signature] = set()
    for unit in units:
        if unit.kind is not StatementKind.FREEZE_MARKER:
            continue
        code = '\n'.join(ln for ln in unit.lines if not is_comment_line(ln))
        sigs.update(st.signature for st in parse(code) if st.kind in _CODE)
    return sigs


class MergeEngine:
    """Merge statement sequences under a `Strategy` for one dialect."""

    def __init__(self, dialect: Optional[Dialect] = None, *, logger: Optional[logging.Logger] = None) -> None:
        self._dialect = dialect or get_dialect_registry().get('ruby')
        self._log = logger or get_logger('merging.engine')

    @property
    def dialect(self) -> Dialect:
        return self._dialect

    def merge(
        self,
        template: Sequence[Statement],
        dest: Sequence[Statement],
        strategy: Strategy,
    ) -> List[Statement]:
        return self.merge_layouts(split_layout(template), split_layout(dest), strategy).statements()

    def merge_layouts(self, tpl: Layout, dst: Layout, strategy: Strategy) -> Layout:
        strategy = Strategy.coerce(strategy)
        handlers: Dict[Strategy, Callable[[Layout, Layout], Layout]] = {
            Strategy.SKIP: self._skip,
            Strategy.MERGE: self._merge,
            Strategy.REPLACE: self._replace,
            Strategy.APPEND: self._append,
        }
        trace_merge(self._log, 'merging layouts', strategy=strategy.value, dialect=self._dialect.file_type)
        return handlers[strategy](tpl, dst)

    # ------------------------------------------------------------------ #
    #  Strategies                                                          #
    # ------------------------------------------------------------------ #
    def _skip(self, tpl: Layout, dst: Layout) -> Layout:
        base = tpl if dst.is_empty else dst
        return dedupe_file_level(base, self._log)

    def _merge(self, tpl: Layout, dst: Layout) -> Layout:
        tpl = dedupe_file_level(tpl, self._log)
        dst = dedupe_file_level(dst, self._log)
        body = self._match_pairs(
            dedupe_pairs(tpl.body, self._dialect, self._log),
            dedupe_pairs(dst.body, self._dialect, self._log),
            self._combine,
            frozen=dst.header,
        )
        merged = Layout(
            dst.shebang or tpl.shebang,
            list(tpl.magic or dst.magic),
            _union_units(tpl.header, dst.header),
            body,
        )
        return dedupe_file_level(merged, self._log)

    def _replace(self, tpl: Layout, dst: Layout) -> Layout:
        tpl = dedupe_file_level(tpl, self._log)
        body = self._match_pairs(
            dedupe_pairs(tpl.body, self._dialect, self._log),
            list(dst.body),
            lambda t, d: t,
            frozen=dst.header,
        )
        if tpl.header:
            frozen = [u for u in dst.header if u.kind is StatementKind.FREEZE_MARKER]
            header = _union_units(tpl.header, frozen)
        else:
            header = list(dst.header)
        merged = Layout(tpl.shebang or dst.shebang, list(tpl.magic or dst.magic), header, body)
        return dedupe_file_level(merged, self._log)

    def _append(self, tpl: Layout, dst: Layout) -> Layout:
        present: Set[Signature] = {st.signature for _, st in dst.body}
        present |= frozen_signatures(list(dst.header) + [st for _, st in dst.body])
        body: List[Pair] = list(dst.body)
        for blank, stmt in dedupe_pairs(tpl.body, self._dialect, self._log):
            if stmt.signature in present:
                continue
            present.add(stmt.signature)
            trace_merge(self._log, 'appending template statement', signature=stmt.signature)
            _push(body, blank, stmt)
        merged = Layout(
            dst.shebang or tpl.shebang,
            list(dst.magic or tpl.magic),
            _union_units(dst.header, tpl.header),
            body,
        )
        return dedupe_file_level(merged, self._log)

    # ------------------------------------------------------------------ #
    #  Matching                                                            #
    # ------------------------------------------------------------------ #
    def _match_pairs(
        self,
        tpl: List[Pair],
        dst: List[Pair],
        combine: Combine,
        *,
        frozen: Iterable[Statement] = (),
    ) -> List[Pair]:
        """Walk destination order, combining first matches; append template-only.

        Template statements whose signature already sits inside a destination
        freeze block are left out.
        """
        held = frozen_signatures([st for _, st in dst] + list(frozen))
        index: Dict[Signature, Statement] = {}
        for _, stmt in tpl:
            index.setdefault(stmt.signature, stmt)

        used: Set[Signature] = set()
        out: List[Pair] = []
        for blank, stmt in dst:
            sig = stmt.signature
            if sig in index and sig not in used:
                used.add(sig)
                out.append((blank, combine(index[sig], stmt)))
            else:
                out.append((blank, stmt))

        for blank, stmt in tpl:
            sig = stmt.signature
            if sig in used:
                continue
            if sig in held:
                trace_merge(self._log, 'template statement held by freeze block', signature=sig)
                continue
            trace_merge(self._log, 'template-only statement appended', signature=sig)
            _push(out, blank, stmt)
        return out

    def _combine(self, tpl: Statement, dst: Statement) -> Statement:
        """Template text wins; comments are unioned, template lines first."""
        leading = _union_lines(tpl.leading_comments, dst.leading_comments)
        detached = _union_groups(tpl.detached_comments, dst.detached_comments)
        merged = tpl.with_comments(leading, detached)
        if (
            tpl.kind is StatementKind.BLOCK
            and dst.kind is StatementKind.BLOCK
            and self._dialect.merges_block(tpl.call_name)
        ):
            body = self._match_pairs(
                dedupe_pairs(to_pairs(tpl.body), self._dialect, self._log),
                dedupe_pairs(to_pairs(dst.body), self._dialect, self._log),
                self._combine,
            )
            trace_merge(self._log, 'merged block body', name=tpl.call_name, children=len(body))
            merged = replace(merged, body=tuple(from_pairs(body)))
        return merged
