"""Merge engine, strategies, dialects and the deduplication pass.

Kept free of imports so `rbmerge.core.interfaces.merge` can depend on
`rbmerge.merging.strategies` without import cycles.
"""
