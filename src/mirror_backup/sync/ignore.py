"""Gitignore-style exclusion of paths from a sync run."""

from typing import Iterable, Optional, Tuple

from pathspec import GitIgnoreSpec

from .events import ACCEPT, REJECT, EventBus
from .paths import RelPath

ALWAYS_IGNORED: Tuple[str, ...] = ("node_modules", ".git")


class IgnoreGate:
    """Decide which relative paths take part in a sync.
    
    The pattern set is fixed at construction. ``node_modules`` and ``.git``
    are always excluded. Because the engine asks the gate before listing a
    directory, an excluded directory's contents are never visited.
    """
    
    def __init__(self, patterns: Iterable[str] = (), bus: Optional[EventBus] = None):
        """Initialize the gate.
        
        Args:
            patterns: Additional gitignore pattern lines
            bus: Event bus receiving an accept/reject trace for every decision
        """
        extra = [p for p in patterns if p and p not in ALWAYS_IGNORED]
        self.patterns: Tuple[str, ...] = ALWAYS_IGNORED + tuple(extra)
        self._spec = GitIgnoreSpec.from_lines(self.patterns)
        self._bus = bus
    
    def is_ignored(self, rel: RelPath, is_dir: bool = False) -> bool:
        """Pure pattern test, without emitting events."""
        if not rel:
            return False
        candidate = "/".join(rel)
        if is_dir:
            candidate += "/"
        return self._spec.match_file(candidate)
    
    def accept(self, rel: RelPath, is_dir: bool = False) -> bool:
        """Return whether ``rel`` participates in the sync.
        
        Args:
            rel: Path relative to the tree roots; ``()`` is always accepted
            is_dir: Whether ``rel`` is known to be a directory, so that
                directory-only patterns (``build/``) apply to it directly
        """
        accepted = not self.is_ignored(rel, is_dir)
        if self._bus is not None:
            self._bus.info(ACCEPT if accepted else REJECT, rel)
        return accepted
