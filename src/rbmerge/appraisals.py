from __future__ import annotations

"""Appraisals helpers.

`merge(template, dest)` is the `merge` strategy specialized for Appraisals
files: `appraise "name" do ... end` blocks union their bodies, destination
order first and template-only entries appended. No freeze reminder is
injected here.
"""

from dataclasses import replace
from typing import List, Optional, Sequence

from rbmerge.config import MergeConfig
from rbmerge.core.models import Statement, StatementKind
from rbmerge.logging.helpers import get_logger, trace_merge
from rbmerge.merging.dedup import dedupe_file_level
from rbmerge.merging.layout import split_layout
from rbmerge.merging.strategies import Strategy
from rbmerge.parsing.parser import parse
from rbmerge.rendering.renderer import Renderer
from rbmerge.source_merger import apply

APPRAISALS_PATH = 'Appraisals'

_log = get_logger('appraisals')


def _normalized(text: str, config: MergeConfig) -> str:
    layout = dedupe_file_level(split_layout(parse(text, freeze_token=config.freeze_token)), _log)
    return Renderer(logger=_log).render(layout.statements())


def merge(template: str, dest: str, *, config: Optional[MergeConfig] = None) -> str:
    """Merge an Appraisals *template* into *dest*.

    A blank destination yields the normalized template and vice versa.
    """
    cfg = replace(config or MergeConfig.from_env(), freeze_reminder=False)
    if not (dest or '').strip():
        return _normalized(template or '', cfg)
    if not (template or '').strip():
        return _normalized(dest, cfg)
    return apply(Strategy.MERGE, template, dest, APPRAISALS_PATH, file_type='appraisals', config=cfg)


def _without_gem(body: Sequence[Statement], gem_name: str) -> List[Statement]:
    kept: List[Statement] = []
    for stmt in body:
        if stmt.kind is StatementKind.CALL and stmt.call_name == 'gem' and stmt.primary_argument == gem_name:
            trace_merge(_log, 'removed gem from appraisal', gem=gem_name)
            continue
        if stmt.kind is StatementKind.BLOCK:
            stmt = replace(stmt, body=tuple(_without_gem(stmt.body, gem_name)))
        kept.append(stmt)
    return kept


def remove_gem_dependency(content: str, gem_name: str) -> str:
    """Drop `gem "<gem_name>"` lines from every `appraise` block in *content*."""
    name = (gem_name or '').strip()
    if not name:
        return content
    out: List[Statement] = []
    for stmt in parse(content or ''):
        if stmt.kind is StatementKind.BLOCK and stmt.call_name == 'appraise':
            stmt = replace(stmt, body=tuple(_without_gem(stmt.body, name)))
        out.append(stmt)
    return Renderer(logger=_log).render(out)
