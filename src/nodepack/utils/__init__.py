"""Utility modules (output, path, process)."""

from .path import SearchPath, child_env, remove_tree

__all__ = [
    "SearchPath",
    "child_env",
    "remove_tree",
]
