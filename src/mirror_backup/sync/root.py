"""Naming and discovery of timestamped backup roots.

Each run relocates displaced content under ``<target>/YYYY/MM/DD/HH.MM.SS.mmm``.
The segments sort chronologically, both as strings and as directories.
"""

import os
import re
from datetime import datetime, timezone
from typing import List, Optional, Pattern

from .paths import RelPath

_YEAR_SEGMENT = re.compile(r"^\d{4}$")
_TWO_DIGITS = re.compile(r"^\d{2}$")
_TIME_SEGMENT = re.compile(r"^\d{2}\.\d{2}\.\d{2}\.\d{3}$")


def backup_root_name(moment: datetime) -> RelPath:
    """Return the backup root segments for ``moment``.
    
    Naive datetimes are taken as UTC; aware ones are converted to UTC first.
    
    Args:
        moment: Timestamp of the run
        
    Returns:
        Tuple of (year, month, day, time-of-day) segments
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    else:
        moment = moment.astimezone(timezone.utc)
    
    time_of_day = f"{moment:%H:%M:%S}.{moment.microsecond // 1000:03d}"
    return (
        f"{moment.year:04d}",
        f"{moment.month:02d}",
        f"{moment.day:02d}",
        time_of_day.replace(":", "."),
    )


def new_backup_root(moment: Optional[datetime] = None) -> RelPath:
    """Backup root for the current instant, fixed once per run."""
    return backup_root_name(moment or datetime.now(timezone.utc))


def list_backup_roots(target: str) -> List[RelPath]:
    """Find the backup roots written under ``target``, oldest first.
    
    Args:
        target: Directory holding ``current`` and the dated backup trees
        
    Returns:
        List of backup root segment tuples
    """
    roots: List[RelPath] = []
    for year in _sorted_dirs(target, _YEAR_SEGMENT):
        for month in _sorted_dirs(os.path.join(target, year), _TWO_DIGITS):
            for day in _sorted_dirs(os.path.join(target, year, month), _TWO_DIGITS):
                day_dir = os.path.join(target, year, month, day)
                for name in _sorted_dirs(day_dir, _TIME_SEGMENT):
                    roots.append((year, month, day, name))
    return roots


def _sorted_dirs(path: str, segment: Pattern[str]) -> List[str]:
    # Unreadable levels are skipped like missing ones
    try:
        names = os.listdir(path)
    except OSError:
        return []
    return sorted(
        name for name in names
        if segment.match(name) and os.path.isdir(os.path.join(path, name))
    )
