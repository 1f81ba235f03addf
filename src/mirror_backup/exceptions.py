"""Exception types raised by the sync engine."""

from typing import Optional, Tuple


class MirrorBackupError(Exception):
    """Base class for all mirror-backup errors."""


class RootInitializationError(MirrorBackupError):
    """The current (mirror) root could not be created; the run is aborted."""

    def __init__(self, root: str, cause: Optional[BaseException] = None):
        self.root = root
        self.cause = cause
        super().__init__(f"Cannot initialize {root}: {cause}")


class NodeOperationError(MirrorBackupError):
    """A filesystem operation failed for a single relative path."""

    def __init__(self, operation: str, rel: Tuple[str, ...], cause: Optional[BaseException] = None):
        self.operation = operation
        self.rel = rel
        self.cause = cause
        super().__init__(f"{operation} failed for {'/'.join(rel) or '.'}: {cause}")
