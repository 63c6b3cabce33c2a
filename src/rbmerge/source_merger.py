from __future__ import annotations

"""
source_merger – the `apply` facade used by templating callers.

    apply(strategy, src, dest, path) -> text

Pipeline: parse both texts, partition them into layouts, merge under the
strategy with the dialect selected from *path*, normalize the freeze
reminder and render. The call is a pure function of its inputs; the only
shared state is the parse memo, which holds immutable statement trees.
"""

import logging
from typing import Optional, Union

from rbmerge.config import MergeConfig
from rbmerge.constants import BUG_URL
from rbmerge.errors import RbMergeError, TemplateMergeError
from rbmerge.logging.helpers import get_logger, trace_merge
from rbmerge.merging.dialects import Dialect, dialect_for
from rbmerge.merging.engine import MergeEngine
from rbmerge.merging.layout import ensure_freeze_reminder, split_layout
from rbmerge.merging.strategies import Strategy
from rbmerge.parsing.parser import configure_parse_cache, parse
from rbmerge.rendering.renderer import Renderer

_log = get_logger('source_merger')


def merge_text(
    strategy: Strategy,
    src: str,
    dest: str,
    dialect: Dialect,
    config: MergeConfig,
    *,
    logger: Optional[logging.Logger] = None,
) -> str:
    """Run the parse/merge/render pipeline without error translation."""
    log = logger or _log
    configure_parse_cache(config.parse_cache_size)
    tpl = split_layout(parse(src, freeze_token=config.freeze_token))
    dst = split_layout(parse(dest, freeze_token=config.freeze_token))
    merged = MergeEngine(dialect, logger=log).merge_layouts(tpl, dst, strategy)
    if config.freeze_reminder:
        merged = ensure_freeze_reminder(merged, config.freeze_token)
    return Renderer(logger=log).render(merged.statements())


def apply(
    strategy: Union[Strategy, str, None],
    src: str,
    dest: str,
    path: str,
    *,
    file_type: Optional[str] = None,
    config: Optional[MergeConfig] = None,
) -> str:
    """Merge template *src* into destination *dest* and return normalized text.

    Args:
        strategy: skip / merge / replace / append (None means skip).
        src: Template text.
        dest: Destination text; '' when the destination does not exist yet.
        path: Relative destination path, used only to pick the dialect.
        file_type: Explicit dialect name overriding detection from *path*.
        config: Merge settings (defaults to `MergeConfig.from_env()`).

    Raises:
        UnknownStrategyError: *strategy* is not recognized.
        TemplateMergeError: An unexpected internal failure occurred.
    """
    strat = Strategy.coerce(strategy, path=path)
    cfg = config or MergeConfig.from_env()
    dialect = dialect_for(path, file_type)
    trace_merge(_log, 'apply', strategy=strat.value, path=path, dialect=dialect.file_type)
    try:
        return merge_text(strat, src or '', dest or '', dialect, cfg)
    except RbMergeError:
        raise
    except Exception as exc:
        _log.error('✖ failed to apply %s strategy to %s: %s (please report at %s)', strat.value, path, exc, BUG_URL)
        raise TemplateMergeError(path, str(exc)) from exc
