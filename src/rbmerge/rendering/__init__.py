"""Public API surface for rbmerge.rendering."""
__all__ = [
    "renderer",
]
