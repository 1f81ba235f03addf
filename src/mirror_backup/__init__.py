"""
Mirror Backup Application

Mirrors a source directory tree into a "current" tree and preserves
everything a run replaces or removes in a timestamped backup tree.
"""

__version__ = "1.0.0"
__author__ = "Mirror Backup Tool"
__description__ = "Mirror a directory tree, keeping replaced files in dated backups"

from .config.settings import MirrorConfig
from .sync.backup_manager import BackupManager
from .sync.engine import sync

__all__ = ["MirrorConfig", "BackupManager", "sync"]
