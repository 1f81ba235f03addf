"""Shared fixtures for the mirror backup tests."""

import asyncio
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Add src to Python path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from mirror_backup.exceptions import NodeOperationError
from mirror_backup.sync.backends import FilesystemBackend
from mirror_backup.sync.events import EventBus

# 2020-09-13T12:26:40Z
BASE_NS = 1_600_000_000 * 10**9

MOMENT = datetime(2024, 5, 6, 7, 8, 9, 123456, tzinfo=timezone.utc)
BACKUP_SEGMENTS = ("2024", "05", "06", "07.08.09.123")


class EventLog:
    """Collects everything emitted on a bus."""

    def __init__(self, bus: EventBus):
        self.info = []
        self.errors = []
        self.files = []
        bus.on_info(self.info.append)
        bus.on_error(self.errors.append)
        bus.on_file(self.files.append)

    def tagged(self, tag):
        return [event.path for event in self.info if event.tag == tag]

    def actions(self):
        return [(event.action, event.path) for event in self.files]


class RecordingBackend(FilesystemBackend):
    """Filesystem backend that records the order of its operations."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.operations = []

    async def copy(self, rel):
        self.operations.append(("copy", rel))
        return await super().copy(rel)

    async def relocate(self, rel):
        self.operations.append(("relocate", rel))
        return await super().relocate(rel)


class FailingBackend(FilesystemBackend):
    """Filesystem backend failing copies of selected paths."""

    def __init__(self, *args, fail_on=(), **kwargs):
        super().__init__(*args, **kwargs)
        self.fail_on = set(fail_on)

    async def copy(self, rel):
        if rel in self.fail_on:
            raise NodeOperationError("copy", rel, PermissionError("denied"))
        return await super().copy(rel)


class ThrottleProbeBackend(FilesystemBackend):
    """Filesystem backend tracking how many copies run at once."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.in_flight = 0
        self.peak = 0

    async def copy(self, rel):
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        try:
            await asyncio.sleep(0.01)
            return await super().copy(rel)
        finally:
            self.in_flight -= 1


def _write(path: Path, content="", mtime_ns=None) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content)
    if mtime_ns is not None:
        os.utime(path, ns=(mtime_ns, mtime_ns))
    return path


@pytest.fixture
def make_file():
    """Create a file with parents and an optional exact mtime."""
    return _write


@pytest.fixture
def source(tmp_path):
    path = tmp_path / "source"
    path.mkdir()
    return path


@pytest.fixture
def target(tmp_path):
    return tmp_path / "target"


@pytest.fixture
def current(target):
    return target / "current"


@pytest.fixture
def backup_dir(target):
    return target.joinpath(*BACKUP_SEGMENTS)


@pytest.fixture
def moment():
    return MOMENT


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def events(bus):
    return EventLog(bus)


@pytest.fixture
def backends(source, current, backup_dir):
    """Factories for instrumented backends bound to the test trees."""
    roots = (str(source), str(current), str(backup_dir))
    return {
        "recording": lambda: RecordingBackend(*roots),
        "failing": lambda fail_on: FailingBackend(*roots, fail_on=fail_on),
        "throttle": lambda: ThrottleProbeBackend(*roots),
    }


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers the CLI installs on the package logger."""
    yield
    logging.getLogger("mirror_backup").handlers.clear()
