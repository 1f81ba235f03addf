"""Storage backends: how the engine materializes its decisions.

The engine only decides *what* happens to a relative path. A backend decides
what copying a path into the current tree and relocating a path into the
backup tree mean. Backends are chosen when a run is set up and are never
switched during it.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Dict

from ..exceptions import NodeOperationError
from . import fs
from .paths import RelPath, parent_rel, to_native

logger = logging.getLogger(__name__)


class StorageBackend(ABC):
    """Capability set driven by :class:`~mirror_backup.sync.engine.SyncEngine`.
    
    Each operation takes a relative path, returns the same path on success
    and raises :class:`NodeOperationError` on failure.
    """
    
    @abstractmethod
    async def copy(self, rel: RelPath) -> RelPath:
        """Copy the source file at ``rel`` into the current tree."""
    
    @abstractmethod
    async def relocate(self, rel: RelPath) -> RelPath:
        """Move the current-tree node at ``rel`` into the backup tree."""
    
    @abstractmethod
    async def make_directory(self, rel: RelPath, parents: bool = False) -> RelPath:
        """Create the current-tree directory at ``rel``."""


class FilesystemBackend(StorageBackend):
    """Backend operating on three local directory roots."""
    
    def __init__(self, source_root: str, current_root: str, backup_root: str):
        """Initialize filesystem backend.
        
        Args:
            source_root: Tree being mirrored
            current_root: Live mirror
            backup_root: Directory receiving displaced nodes for this run
        """
        self.source_root = source_root
        self.current_root = current_root
        self.backup_root = backup_root
        # backup directory -> creation task, so each is created at most once
        self._backup_dirs: Dict[RelPath, asyncio.Future] = {}
    
    async def copy(self, rel: RelPath) -> RelPath:
        src = to_native(self.source_root, rel)
        dst = to_native(self.current_root, rel)
        try:
            await fs.copy_file(src, dst)
        except OSError as e:
            raise NodeOperationError("copy", rel, e) from e
        logger.debug(f"Copied {src} -> {dst}")
        return rel
    
    async def relocate(self, rel: RelPath) -> RelPath:
        src = to_native(self.current_root, rel)
        dst = to_native(self.backup_root, rel)
        try:
            await self._ensure_backup_dir(parent_rel(rel))
            await fs.move_node(src, dst)
        except OSError as e:
            raise NodeOperationError("relocate", rel, e) from e
        logger.debug(f"Relocated {src} -> {dst}")
        return rel
    
    async def make_directory(self, rel: RelPath, parents: bool = False) -> RelPath:
        try:
            await fs.create_directory(to_native(self.current_root, rel), recursive=parents)
        except OSError as e:
            raise NodeOperationError("mkdir", rel, e) from e
        return rel
    
    async def _ensure_backup_dir(self, rel: RelPath) -> None:
        # Check-and-set is atomic on the event loop; concurrent relocations
        # into one directory share a single creation task
        pending = self._backup_dirs.get(rel)
        if pending is None:
            path = to_native(self.backup_root, rel)
            pending = asyncio.ensure_future(fs.create_directory(path, recursive=True))
            self._backup_dirs[rel] = pending
        try:
            await pending
        except OSError:
            # Forget the failure so a later relocation retries the creation
            if self._backup_dirs.get(rel) is pending:
                del self._backup_dirs[rel]
            raise


class NoopBackend(StorageBackend):
    """Backend that reports success without touching any tree.
    
    Used for dry runs: the engine still walks both trees and emits every
    event it would emit for a real run.
    """
    
    async def copy(self, rel: RelPath) -> RelPath:
        return rel
    
    async def relocate(self, rel: RelPath) -> RelPath:
        return rel
    
    async def make_directory(self, rel: RelPath, parents: bool = False) -> RelPath:
        return rel
