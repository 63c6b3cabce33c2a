from __future__ import annotations
"""
Dialect registry – per-file-type merge rules.

A dialect names the block calls whose bodies are union-merged under the
`merge` strategy. Every other block still matches by signature but is
treated as one atomic unit. Paths are mapped to file types with
`detect_file_type`; an explicit file type always wins over detection.
"""
import posixpath
import re
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, Optional

_MODULAR_GEMFILE_RE = re.compile(r'(?:^|/)gemfiles/modular/[^/]+\.gemfile$')

_GEMFILE_SCOPES = frozenset({
    'group', 'platforms', 'platform', 'source', 'git', 'path', 'github', 'install_if',
})


@dataclass(frozen=True)
class Dialect:
    file_type: str
    mergeable_blocks: FrozenSet[str] = frozenset()

    def merges_block(self, call_name: Optional[str]) -> bool:
        return bool(call_name) and call_name in self.mergeable_blocks


class DialectRegistry:
    def __init__(self) -> None:
        self._by_type: Dict[str, Dialect] = {}

    @classmethod
    def default(cls) -> 'DialectRegistry':
        reg = cls()
        reg.register(Dialect('gemfile', _GEMFILE_SCOPES))
        reg.register(Dialect('appraisals', _GEMFILE_SCOPES | {'appraise'}))
        reg.register(Dialect('gemspec', frozenset({'Gem::Specification.new'})))
        reg.register(Dialect('rakefile', frozenset({'namespace'})))
        reg.register(Dialect('ruby'))
        return reg

    def register(self, dialect: Dialect) -> None:
        self._by_type[dialect.file_type.lower()] = dialect

    def types(self) -> Iterable[str]:
        return tuple(sorted(self._by_type))

    def get(self, file_type: Optional[str]) -> Dialect:
        key = (file_type or 'ruby').strip().lower()
        return self._by_type.get(key) or self._by_type['ruby']


_REGISTRY = DialectRegistry.default()


def get_dialect_registry() -> DialectRegistry:
    return _REGISTRY


def detect_file_type(path: Optional[str]) -> str:
    """Map a (relative) path to one of gemfile/appraisals/gemspec/rakefile/ruby."""
    base = posixpath.basename((path or '').replace('\\', '/'))
    if base.startswith('Gemfile') or base.endswith('.gemfile'):
        return 'gemfile'
    if base.startswith('Appraisals'):
        return 'appraisals'
    if base.endswith('.gemspec'):
        return 'gemspec'
    if base.startswith('Rakefile') or base.endswith('.rake'):
        return 'rakefile'
    return 'ruby'


def dialect_for(path: Optional[str], file_type: Optional[str] = None) -> Dialect:
    """Resolve the dialect for *path*; *file_type* overrides detection."""
    if file_type:
        return _REGISTRY.get(file_type)
    norm = (path or '').replace('\\', '/')
    if _MODULAR_GEMFILE_RE.search(norm):
        return _REGISTRY.get('appraisals')
    return _REGISTRY.get(detect_file_type(norm))
