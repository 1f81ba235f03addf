"""Sync engine for mirror backups."""

from .backup_manager import BackupManager
from .backends import FilesystemBackend, NoopBackend, StorageBackend
from .engine import SyncEngine, SyncReport, merge_join, sync
from .events import EventBus
from .ignore import IgnoreGate
from .root import backup_root_name, list_backup_roots, new_backup_root

__all__ = [
    "BackupManager",
    "sync",
    "SyncEngine",
    "SyncReport",
    "merge_join",
    "EventBus",
    "IgnoreGate",
    "StorageBackend",
    "FilesystemBackend",
    "NoopBackend",
    "backup_root_name",
    "new_backup_root",
    "list_backup_roots",
]
