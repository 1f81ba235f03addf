"""Live event channels emitted by the sync engine.

The engine never prints. It reports to an :class:`EventBus` whose sinks are
registered by the caller (the CLI, the backup manager, tests). Events are
delivered synchronously at emission time and are not kept for replay.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from .paths import RelPath, display_path

logger = logging.getLogger(__name__)

# Info tags
NEW = "New"
SYNC = "Sync"
RECURSE = "Recurse"
BACKUP = "Backup"
ACCEPT = "accept"
REJECT = "reject"

# File actions
COPY = "copy"
RELOCATE = "relocate"


@dataclass(frozen=True)
class InfoEvent:
    """Trace line: what the engine is about to do with a path."""
    tag: str
    path: RelPath

    def __str__(self) -> str:
        return f"{self.tag} {display_path(self.path)}"


@dataclass(frozen=True)
class ErrorEvent:
    """A node operation failed; its subtree was abandoned."""
    message: str
    path: Optional[RelPath] = None

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class FileEvent:
    """A storage action completed for a path."""
    action: str
    path: RelPath

    def __str__(self) -> str:
        return display_path(self.path)


InfoSink = Callable[[InfoEvent], None]
ErrorSink = Callable[[ErrorEvent], None]
FileSink = Callable[[FileEvent], None]


class EventBus:
    """Three output channels: info trace, error trace and completed actions."""
    
    def __init__(self):
        self._info_sinks: List[InfoSink] = []
        self._error_sinks: List[ErrorSink] = []
        self._file_sinks: List[FileSink] = []
    
    def on_info(self, sink: InfoSink) -> InfoSink:
        self._info_sinks.append(sink)
        return sink
    
    def on_error(self, sink: ErrorSink) -> ErrorSink:
        self._error_sinks.append(sink)
        return sink
    
    def on_file(self, sink: FileSink) -> FileSink:
        self._file_sinks.append(sink)
        return sink
    
    def info(self, tag: str, path: RelPath) -> None:
        self._dispatch(self._info_sinks, InfoEvent(tag, path))
    
    def error(self, message: str, path: Optional[RelPath] = None) -> None:
        self._dispatch(self._error_sinks, ErrorEvent(message, path))
    
    def file(self, action: str, path: RelPath) -> None:
        self._dispatch(self._file_sinks, FileEvent(action, path))
    
    @staticmethod
    def _dispatch(sinks, event) -> None:
        # A broken consumer must not change what the engine does
        for sink in sinks:
            try:
                sink(event)
            except Exception as e:
                logger.warning(f"Event sink {sink!r} failed on {event}: {e}")
