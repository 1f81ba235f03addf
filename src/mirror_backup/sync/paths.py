"""Relative paths shared by the source, current and backup trees.

A relative path is a tuple of name segments; the tree root is the empty
tuple. The same tuple names the same logical node in all three trees.
"""

import os
from typing import Tuple

RelPath = Tuple[str, ...]

ROOT: RelPath = ()


def join_rel(rel: RelPath, name: str) -> RelPath:
    """Append one segment to ``rel``."""
    if not name:
        raise ValueError("Path segments must be non-empty")
    return rel + (name,)


def parent_rel(rel: RelPath) -> RelPath:
    return rel[:-1]


def to_native(root: str, rel: RelPath) -> str:
    """Resolve ``rel`` against a concrete tree root."""
    return os.path.join(root, *rel)


def display_path(rel: RelPath) -> str:
    """Render ``rel`` with forward slashes, ``.`` for the root."""
    return "/".join(rel) if rel else "."
