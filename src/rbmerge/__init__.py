from __future__ import annotations

"""rbmerge – structural merging of templated Ruby DSL files.

    from rbmerge import apply
    apply('merge', template_text, dest_text, 'Gemfile')
"""

__version__ = '1.0.0'

from rbmerge.appraisals import merge as merge_appraisals, remove_gem_dependency
from rbmerge.config import MergeConfig
from rbmerge.errors import RbMergeError, TemplateMergeError, UnknownStrategyError
from rbmerge.gemfile import merge_gem_calls
from rbmerge.merging.dialects import detect_file_type
from rbmerge.merging.strategies import Strategy
from rbmerge.source_merger import apply

__all__ = [
    "__version__",
    "apply",
    "detect_file_type",
    "merge_appraisals",
    "merge_gem_calls",
    "remove_gem_dependency",
    "MergeConfig",
    "RbMergeError",
    "Strategy",
    "TemplateMergeError",
    "UnknownStrategyError",
]
