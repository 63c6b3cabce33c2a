"""Public API surface for rbmerge.parsing."""
__all__ = [
    "comment_rules",
    "parser",
    "tokenizer",
]
