from __future__ import annotations

"""
rbmerge command-line interface.

    rbmerge apply -s merge TEMPLATE DEST [--path P] [-o OUT | --in-place]
    rbmerge appraisals TEMPLATE DEST [-o OUT | --in-place]

The CLI owns all file I/O; the library functions only see text. Results
go to stdout unless -o/--in-place is given.
"""

import argparse
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional, Sequence

from rbmerge import appraisals
from rbmerge.config import MergeConfig
from rbmerge.errors import RbMergeError
from rbmerge.logging.factory import DefaultLoggerFactory
from rbmerge.logging.helpers import get_logger
from rbmerge.merging.dialects import get_dialect_registry
from rbmerge.merging.strategies import Strategy
from rbmerge.source_merger import apply

logger = get_logger('cli')


def _configure_logging(enable_json: bool, verbose: bool = False) -> None:
    """Configure process-wide logging once, either JSON or plain text."""
    factory = DefaultLoggerFactory.from_flags(json_logs=enable_json, verbose=verbose)
    global logger
    logger = factory.get_logger('cli')


def _add_output_args(p: argparse.ArgumentParser) -> None:
    g_out = p.add_argument_group('Output')
    dest = g_out.add_mutually_exclusive_group()
    dest.add_argument('-o', '--output', metavar='FILE', dest='output',
                      help='Write the merged text to FILE instead of stdout.')
    dest.add_argument('--in-place', action='store_true', dest='in_place',
                      help='Overwrite DEST with the merged text.')

    g_misc = p.add_argument_group('Miscellaneous')
    g_misc.add_argument('--json-logs', action='store_true', dest='json_logs',
                        help='Emit logs as JSON lines on stderr.')
    g_misc.add_argument('-v', '--verbose', action='store_true', dest='verbose',
                        help='Enable debug logging (set RBMERGE_TRACE=1 for merge decisions).')


def _build_parser() -> argparse.ArgumentParser:
    """Build the `rbmerge` argument parser with its two sub-commands."""
    p = argparse.ArgumentParser(
        prog='rbmerge',
        formatter_class=argparse.RawTextHelpFormatter,
        description=(
            'rbmerge – merge templated Gemfiles, Appraisals and gemspecs into\n'
            'existing project files (skip / merge / replace / append).'
        ),
    )
    sub = p.add_subparsers(dest='command', metavar='COMMAND')
    sub.required = True

    ap = sub.add_parser('apply', formatter_class=argparse.RawTextHelpFormatter,
                        help='Merge TEMPLATE into DEST under a strategy.')
    g_in = ap.add_argument_group('Inputs')
    g_in.add_argument('template', metavar='TEMPLATE', help='Template file.')
    g_in.add_argument('dest', metavar='DEST', help='Destination file (missing means empty).')
    g_in.add_argument('--path', metavar='PATH', dest='path',
                      help='Relative path used to pick the dialect (defaults to DEST).')
    g_in.add_argument('--file-type', dest='file_type', choices=list(get_dialect_registry().types()),
                      help='Force a dialect instead of detecting it from the path.')

    g_mrg = ap.add_argument_group('Merging')
    g_mrg.add_argument('-s', '--strategy', dest='strategy', default=Strategy.SKIP.value,
                       choices=[s.value for s in Strategy],
                       help='Templating strategy (default: skip).')
    g_mrg.add_argument('--freeze-token', metavar='TOKEN', dest='freeze_token',
                       help='Token used in <token>:freeze markers (env RBMERGE_FREEZE_TOKEN).')
    g_mrg.add_argument('--no-freeze-reminder', action='store_true', dest='no_freeze_reminder',
                       help='Do not inject the freeze reminder block.')
    _add_output_args(ap)
    ap.set_defaults(func=_cmd_apply)

    aps = sub.add_parser('appraisals', formatter_class=argparse.RawTextHelpFormatter,
                         help='Merge an Appraisals TEMPLATE into DEST.')
    g_ain = aps.add_argument_group('Inputs')
    g_ain.add_argument('template', metavar='TEMPLATE', help='Template Appraisals file.')
    g_ain.add_argument('dest', metavar='DEST', help='Destination Appraisals file (missing means empty).')
    _add_output_args(aps)
    aps.set_defaults(func=_cmd_appraisals)
    return p


def _read(path: str, *, missing_ok: bool = False) -> str:
    fp = Path(path)
    if missing_ok and not fp.exists():
        logger.info('⚠  %s does not exist; treating it as empty', fp)
        return ''
    return fp.read_text(encoding='utf-8')


def _emit(ns: argparse.Namespace, text: str) -> None:
    target = ns.dest if ns.in_place else ns.output
    if not target:
        sys.stdout.write(text)
        return
    Path(target).write_text(text, encoding='utf-8')
    logger.info('✔ wrote %s', target)


def _cmd_apply(ns: argparse.Namespace) -> int:
    cfg = MergeConfig.from_env(freeze_token=ns.freeze_token)
    if ns.no_freeze_reminder:
        cfg = replace(cfg, freeze_reminder=False)
    text = apply(
        ns.strategy,
        _read(ns.template),
        _read(ns.dest, missing_ok=True),
        ns.path or ns.dest,
        file_type=ns.file_type,
        config=cfg,
    )
    _emit(ns, text)
    return 0


def _cmd_appraisals(ns: argparse.Namespace) -> int:
    text = appraisals.merge(_read(ns.template), _read(ns.dest, missing_ok=True))
    _emit(ns, text)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for the `rbmerge` console script."""
    args: List[str] = list(sys.argv[1:] if argv is None else argv)
    ns = _build_parser().parse_args(args)
    _configure_logging(ns.json_logs, ns.verbose)
    try:
        return ns.func(ns)
    except KeyboardInterrupt:
        logger.error('Interrupted by user.')
        return 130
    except (RbMergeError, OSError, UnicodeDecodeError) as exc:
        logger.error('✖ %s', exc)
        return 1


if __name__ == '__main__':
    raise SystemExit(main())
