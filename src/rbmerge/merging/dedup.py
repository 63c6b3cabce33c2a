from __future__ import annotations

"""Deduplication pass.

Two independent policies live here:

* `dedupe_file_level` drops repeated file-level comment blocks (magic
  comments by directive, header groups and freeze blocks by text compared
  with trailing whitespace ignored). First occurrence wins.
* `dedupe_pairs` collapses repeated call/block statements by signature,
  dropping later duplicates together with the comments they own.

Comments attached to a statement (leading or detached) are never compared
against each other; they live and die with their statement.
"""

import logging
from dataclasses import replace
from typing import List, Optional, Set

from rbmerge.core.models import Signature, Statement, StatementKind
from rbmerge.logging.helpers import get_logger, trace_merge
from rbmerge.merging.dialects import Dialect
from rbmerge.merging.layout import Layout, Pair, from_pairs, normalize_preamble, to_pairs

_log = get_logger('merging.dedup')

_DEDUP_KINDS = (StatementKind.CALL, StatementKind.BLOCK)


def dedupe_file_level(layout: Layout, logger: Optional[logging.Logger] = None) -> Layout:
    log = logger or _log
    layout = normalize_preamble(layout)
    magic: List[Statement] = []
    keys: Set[str] = set()
    for stmt in layout.magic:
        key = stmt.magic_key or stmt.text
        if key in keys:
            trace_merge(log, 'dropped duplicate magic comment', key=key)
            continue
        keys.add(key)
        magic.append(stmt)

    seen: Set[Signature] = set()
    header: List[Statement] = []
    for unit in layout.header:
        if unit.signature in seen:
            trace_merge(log, 'dropped duplicate header block', first_line=unit.lines[0] if unit.lines else '')
            continue
        seen.add(unit.signature)
        header.append(unit)

    body: List[Pair] = []
    for blank, stmt in layout.body:
        if stmt.kind in (StatementKind.COMMENT_GROUP, StatementKind.FREEZE_MARKER):
            if stmt.signature in seen:
                trace_merge(log, 'dropped duplicate floating comment block')
                continue
            seen.add(stmt.signature)
        body.append((blank, stmt))
    return Layout(layout.shebang, magic, header, body)


def dedupe_pairs(
    pairs: List[Pair],
    dialect: Optional[Dialect] = None,
    logger: Optional[logging.Logger] = None,
) -> List[Pair]:
    """Keep the first call/block per signature.

    Bodies of blocks the dialect merges are deduplicated recursively.
    """
    log = logger or _log
    seen: Set[Signature] = set()
    out: List[Pair] = []
    for blank, stmt in pairs:
        if stmt.kind in _DEDUP_KINDS:
            sig = stmt.signature
            if sig in seen:
                trace_merge(log, 'dropped duplicate statement', name=sig.name, key=sig.key)
                continue
            seen.add(sig)
            if stmt.kind is StatementKind.BLOCK and dialect is not None and dialect.merges_block(stmt.call_name):
                body = from_pairs(dedupe_pairs(to_pairs(stmt.body), dialect, log))
                stmt = replace(stmt, body=tuple(body))
        out.append((blank, stmt))
    return out
