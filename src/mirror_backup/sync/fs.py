"""Asynchronous filesystem primitives used by the sync engine.

Every primitive runs the blocking ``os``/``shutil`` call in a worker thread
so the event loop keeps scheduling sibling subtrees.
"""

import asyncio
import logging
import os
import shutil
import stat
from dataclasses import dataclass
from typing import Dict, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NodeStat:
    """Metadata for a single node in one of the trees."""
    is_directory: bool
    is_file: bool
    size: int
    modified_ns: int

    @classmethod
    def from_os(cls, st: os.stat_result) -> "NodeStat":
        return cls(
            is_directory=stat.S_ISDIR(st.st_mode),
            is_file=stat.S_ISREG(st.st_mode),
            size=st.st_size,
            modified_ns=st.st_mtime_ns,
        )


def _entry_is_dir(entry: os.DirEntry) -> bool:
    try:
        return entry.is_dir()
    except OSError:
        return False


def _list_children(path: str) -> Dict[str, bool]:
    try:
        with os.scandir(path) as entries:
            return {entry.name: _entry_is_dir(entry) for entry in entries}
    except OSError as e:
        # An unreadable or missing directory behaves like an empty one
        logger.debug(f"Cannot list {path}: {e}")
        return {}


def _stat_node(path: str) -> Optional[NodeStat]:
    try:
        return NodeStat.from_os(os.stat(path))
    except FileNotFoundError:
        return None


async def list_children(path: str) -> Dict[str, bool]:
    """Map the names in ``path`` to whether each is a directory.
    
    Directory flags come from the listing itself (symlinks followed), so no
    node is stat-ed. ``{}`` if ``path`` cannot be read.
    """
    return await asyncio.to_thread(_list_children, path)


async def stat_node(path: str) -> Optional[NodeStat]:
    """Stat ``path``; ``None`` if it does not exist."""
    return await asyncio.to_thread(_stat_node, path)


async def create_directory(path: str, recursive: bool = False) -> None:
    """Create a directory; with ``recursive`` existing directories are fine."""
    if recursive:
        await asyncio.to_thread(os.makedirs, path, exist_ok=True)
    else:
        await asyncio.to_thread(os.mkdir, path)


async def copy_file(src: str, dst: str) -> None:
    """Copy file bytes together with the modification time."""
    await asyncio.to_thread(shutil.copy2, src, dst)


async def move_node(src: str, dst: str) -> None:
    """Move a file or a whole directory."""
    await asyncio.to_thread(shutil.move, src, dst)
