from __future__ import annotations

"""Gemfile call merging.

`merge_gem_calls(src, dest)` carries the template's `source`, its
`git_source` definitions and any top-level `gem` missing from the
destination into the destination, keeping every destination comment.
"""

from typing import List, Optional

from rbmerge.core.models import Statement, StatementKind
from rbmerge.logging.helpers import get_logger, trace_merge
from rbmerge.merging.layout import Pair, split_layout
from rbmerge.parsing.parser import parse
from rbmerge.rendering.renderer import Renderer

_log = get_logger('gemfile')

_CALL_KINDS = (StatementKind.CALL, StatementKind.BLOCK)


def _calls(pairs: List[Pair], name: str) -> List[int]:
    return [
        i for i, (_, st) in enumerate(pairs)
        if st.kind in _CALL_KINDS and st.call_name == name and not st.assignment
    ]


def _replace_at(pairs: List[Pair], idx: int, stmt: Statement) -> None:
    blank, old = pairs[idx]
    pairs[idx] = (blank, stmt.with_comments(old.leading_comments, old.detached_comments))


def _find_git_source(pairs: List[Pair], name: Optional[str]) -> Optional[int]:
    for i in _calls(pairs, 'git_source'):
        if pairs[i][1].primary_argument == name:
            return i
    return None


def merge_gem_calls(src: str, dest: str) -> str:
    tpl = split_layout(parse(src or ''))
    dst = split_layout(parse(dest or ''))
    body: List[Pair] = list(dst.body)

    src_sources = _calls(tpl.body, 'source')
    if src_sources:
        source = tpl.body[src_sources[0]][1]
        existing = _calls(body, 'source')
        if existing:
            _replace_at(body, existing[0], source)
        else:
            body.insert(0, (False, source.without_comments()))

    inserted = 0
    for i in _calls(tpl.body, 'git_source'):
        stmt = tpl.body[i][1]
        idx = _find_git_source(body, stmt.primary_argument)
        if idx is None:
            idx = _find_git_source(body, 'github')
        if idx is not None:
            _replace_at(body, idx, stmt)
            continue
        sources = _calls(body, 'source')
        at = (sources[0] + 1 if sources else 0) + inserted
        inserted += 1
        trace_merge(_log, 'inserted git_source', name=stmt.primary_argument)
        body.insert(at, (False, stmt.without_comments()))

    present = {body[i][1].primary_argument for i in _calls(body, 'gem')}
    for i in _calls(tpl.body, 'gem'):
        stmt = tpl.body[i][1]
        if stmt.primary_argument in present:
            continue
        present.add(stmt.primary_argument)
        trace_merge(_log, 'appended gem', gem=stmt.primary_argument)
        body.append((False, stmt.without_comments()))

    dst.body = body
    return Renderer(logger=_log).render(dst.statements())
