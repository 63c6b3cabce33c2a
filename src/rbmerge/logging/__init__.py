"""Logging helpers for rbmerge."""
