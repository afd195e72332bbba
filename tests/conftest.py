import sys
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from depprobe.platform import PlatformConventions


class RecordingLogger:
    """Logger stub that keeps messages per level."""

    def __init__(self):
        self.messages = []
        self.verbose = False

    def _record(self, level, msg):
        self.messages.append((level, msg))

    def debug(self, msg):
        self._record("debug", msg)

    def info(self, msg):
        self._record("info", msg)

    def warning(self, msg):
        self._record("warning", msg)

    def error(self, msg):
        self._record("error", msg)

    def success(self, msg):
        self._record("success", msg)

    def at(self, level):
        return [msg for lvl, msg in self.messages if lvl == level]


class FakeFilesystem:
    """Existence check over a fixed set of paths that counts every lookup."""

    def __init__(self, *paths):
        self.paths = set(paths)
        self.checks = []

    def exists(self, path):
        self.checks.append(path)
        return path in self.paths


@pytest.fixture
def fake_fs():
    return FakeFilesystem


@pytest.fixture
def logger():
    return RecordingLogger()


@pytest.fixture
def linux_conventions():
    return PlatformConventions(
        platform="linux",
        arch="x64",
        library_prefixes=["lib", ""],
        library_suffixes=[".so", ".a"],
    )
