"""Tree diff and sync engine.

Walks the source and current trees together, one directory at a time. The
child names of each directory are merge-joined into names present on both
sides, only in the source and only in the current tree; each name becomes
an independent task and the directory completes once all of them have.
"""

import asyncio
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Awaitable, Dict, Iterable, Iterator, List, Optional, Tuple

from ..exceptions import MirrorBackupError, NodeOperationError, RootInitializationError
from . import fs
from .backends import FilesystemBackend, StorageBackend
from .events import BACKUP, COPY, NEW, RECURSE, RELOCATE, SYNC, EventBus
from .fs import NodeStat
from .ignore import IgnoreGate
from .paths import ROOT, RelPath, display_path, join_rel, to_native
from .root import new_backup_root

logger = logging.getLogger(__name__)

CURRENT = "current"
DEFAULT_PARALLEL_OPERATIONS = 16


class Side(Enum):
    """Where a child name was found."""
    BOTH = "both"
    SOURCE = "source"
    DESTINATION = "destination"


def merge_join(left: Iterable[str], right: Iterable[str]) -> Iterator[Tuple[Side, str]]:
    """Classify the names of two directory listings.

    Both lists are sorted by ordinal string comparison and walked with one
    cursor each. Every name of either list is yielded exactly once.

    Args:
        left: Child names in the source directory
        right: Child names in the current directory

    Yields:
        Tuples of (side, name)
    """
    names_l = sorted(left)
    names_r = sorted(right)
    idx_l = 0
    idx_r = 0
    while idx_l < len(names_l) and idx_r < len(names_r):
        name_l = names_l[idx_l]
        name_r = names_r[idx_r]
        if name_l == name_r:
            yield Side.BOTH, name_l
            idx_l += 1
            idx_r += 1
        elif name_l < name_r:
            yield Side.SOURCE, name_l
            idx_l += 1
        else:
            yield Side.DESTINATION, name_r
            idx_r += 1
    for name in names_l[idx_l:]:
        yield Side.SOURCE, name
    for name in names_r[idx_r:]:
        yield Side.DESTINATION, name


def is_current(source: NodeStat, destination: NodeStat) -> bool:
    """Whether a destination file already mirrors its source file.

    Equal size and a destination at least as new as the source.
    """
    return source.size == destination.size and destination.modified_ns >= source.modified_ns


@dataclass
class SyncReport:
    """Outcome of one sync run."""
    source_root: str
    current_root: str
    backup_root: str
    files_copied: int = 0
    files_relocated: int = 0
    bytes_copied: int = 0
    errors: List[str] = field(default_factory=list)


class SyncEngine:
    """Mirror a source tree into a current tree through a storage backend."""

    def __init__(
        self,
        source_root: str,
        current_root: str,
        backend: StorageBackend,
        bus: Optional[EventBus] = None,
        gate: Optional[IgnoreGate] = None,
        parallel_operations: int = DEFAULT_PARALLEL_OPERATIONS,
        backup_root: str = ""
    ):
        """Initialize sync engine.

        Args:
            source_root: Tree being mirrored
            current_root: Live mirror
            backend: Storage actions for copies and relocations
            bus: Event channels; a private bus is used when omitted
            gate: Ignore gate; defaults to the built-in patterns only
            parallel_operations: Maximum filesystem operations in flight
            backup_root: Backup directory of this run, for reporting
        """
        if parallel_operations < 1:
            raise ValueError("parallel_operations must be at least 1")

        self.source_root = source_root
        self.current_root = current_root
        self.backend = backend
        self.bus = bus or EventBus()
        self.gate = gate or IgnoreGate(bus=self.bus)
        self.parallel_operations = parallel_operations
        self.report = SyncReport(source_root, current_root, backup_root)
        self._slots: Optional[asyncio.Semaphore] = None

    async def run(self) -> SyncReport:
        """Ensure the current root exists, then sync from the tree root.

        Raises:
            RootInitializationError: If the current root cannot be created
        """
        self._slots = asyncio.Semaphore(self.parallel_operations)

        try:
            await self.backend.make_directory(ROOT, parents=True)
        except NodeOperationError as e:
            raise RootInitializationError(self.current_root, e.cause) from e

        logger.info(f"Syncing {self.source_root} -> {self.current_root}")
        await self._recurse(ROOT)
        logger.info(
            f"Sync finished: {self.report.files_copied} copied, "
            f"{self.report.files_relocated} relocated, {len(self.report.errors)} errors"
        )
        return self.report

    async def _io(self, func, *args):
        # Slots bound single operations, never whole subtrees
        async with self._slots:
            return await func(*args)

    async def _guarded(self, rel: RelPath, unit: Awaitable[None]) -> None:
        try:
            await unit
        except (MirrorBackupError, OSError) as e:
            message = f"Error: {e}"
            logger.error(f"{display_path(rel)}: {e}")
            self.report.errors.append(message)
            self.bus.error(message, rel)

    def _source(self, rel: RelPath) -> str:
        return to_native(self.source_root, rel)

    def _current(self, rel: RelPath) -> str:
        return to_native(self.current_root, rel)

    async def _recurse(self, rel: RelPath) -> None:
        self.bus.info(RECURSE, rel)
        left, right = await asyncio.gather(
            self._io(fs.list_children, self._source(rel)),
            self._io(fs.list_children, self._current(rel)),
        )
        await self._sync_children(rel, left, right)

    async def _sync_children(self, rel: RelPath, left: Dict[str, bool], right: Dict[str, bool]) -> None:
        # Directory flags come from the listings so directory-only patterns
        # apply before a node is stat-ed or touched
        units = []
        for side, name in merge_join(left, right):
            child = join_rel(rel, name)
            if side is Side.BOTH:
                unit = self._sync_single(child, left[name] or right[name])
            elif side is Side.SOURCE:
                unit = self._sync_new(child, left[name])
            else:
                unit = self._sync_stale(child, right[name])
            units.append(self._guarded(child, unit))
        if units:
            await asyncio.gather(*units)

    async def _sync_single(self, rel: RelPath, is_dir: bool) -> None:
        self.bus.info(SYNC, rel)
        if not self.gate.accept(rel, is_dir=is_dir):
            return
        src_stat, dst_stat = await asyncio.gather(
            self._io(fs.stat_node, self._source(rel)),
            self._io(fs.stat_node, self._current(rel)),
        )
        # Either side may have vanished since the listing
        if src_stat is None and dst_stat is None:
            return
        if src_stat is None:
            await self._relocate(rel)
            return
        if dst_stat is None:
            await self._copy_node(rel, src_stat)
            return

        if src_stat.is_directory and dst_stat.is_directory:
            await self._recurse(rel)
            return
        if src_stat.is_file and dst_stat.is_file and is_current(src_stat, dst_stat):
            return

        await self._relocate(rel)
        await self._copy_node(rel, src_stat)

    async def _sync_new(self, rel: RelPath, is_dir: bool) -> None:
        self.bus.info(NEW, rel)
        if not self.gate.accept(rel, is_dir=is_dir):
            return
        src_stat = await self._io(fs.stat_node, self._source(rel))
        if src_stat is not None:
            await self._copy_node(rel, src_stat)

    async def _sync_stale(self, rel: RelPath, is_dir: bool) -> None:
        if self.gate.accept(rel, is_dir=is_dir):
            await self._relocate(rel)

    async def _relocate(self, rel: RelPath) -> None:
        self.bus.info(BACKUP, rel)
        await self._io(self.backend.relocate, rel)
        self.report.files_relocated += 1
        self.bus.file(RELOCATE, rel)

    async def _copy_node(self, rel: RelPath, src_stat: NodeStat) -> None:
        if src_stat.is_file:
            await self._io(self.backend.copy, rel)
            self.report.files_copied += 1
            self.report.bytes_copied += src_stat.size
            self.bus.file(COPY, rel)
        elif src_stat.is_directory:
            await self._io(self.backend.make_directory, rel)
            await self._copy_deep(rel)
        else:
            logger.debug(f"Skipping special file {self._source(rel)}")

    async def _copy_deep(self, rel: RelPath) -> None:
        # The destination directory is new: copy everything, no diffing
        children = await self._io(fs.list_children, self._source(rel))
        units = []
        for name, is_dir in children.items():
            child = join_rel(rel, name)
            units.append(self._guarded(child, self._copy_child(child, is_dir)))
        if units:
            await asyncio.gather(*units)

    async def _copy_child(self, rel: RelPath, is_dir: bool) -> None:
        if not self.gate.accept(rel, is_dir=is_dir):
            return
        src_stat = await self._io(fs.stat_node, self._source(rel))
        if src_stat is not None:
            await self._copy_node(rel, src_stat)


async def sync(
    source_root: str,
    target_root: str,
    backend: Optional[StorageBackend] = None,
    *,
    bus: Optional[EventBus] = None,
    ignore_patterns: Iterable[str] = (),
    parallel_operations: int = DEFAULT_PARALLEL_OPERATIONS,
    moment: Optional[datetime] = None
) -> SyncReport:
    """Mirror ``source_root`` into ``<target_root>/current``.

    Content displaced from the current tree is moved to
    ``<target_root>/YYYY/MM/DD/HH.MM.SS.mmm``, named from ``moment``.

    Args:
        source_root: Directory to mirror
        target_root: Parent of the current tree and the backup trees
        backend: Storage backend; a filesystem backend when omitted
        bus: Event channels receiving the live trace
        ignore_patterns: Extra gitignore patterns
        parallel_operations: Maximum filesystem operations in flight
        moment: Timestamp naming the backup root (defaults to now)

    Returns:
        SyncReport for the run

    Raises:
        RootInitializationError: If the current tree cannot be created
    """
    bus = bus or EventBus()
    current_root = os.path.join(target_root, CURRENT)
    backup_root = os.path.join(target_root, *new_backup_root(moment))
    if backend is None:
        backend = FilesystemBackend(source_root, current_root, backup_root)

    engine = SyncEngine(
        source_root,
        current_root,
        backend,
        bus=bus,
        gate=IgnoreGate(ignore_patterns, bus=bus),
        parallel_operations=parallel_operations,
        backup_root=backup_root,
    )
    return await engine.run()
