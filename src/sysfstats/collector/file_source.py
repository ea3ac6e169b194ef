"""
Read/write access to the monitored pseudo-files.

SysfsFileSource reads real files. An optional root prefix lets a fake
tree (see sysfstats.mock.fake_sysfs) stand in for /sys. ReadOnlyFileSource
wraps another source and drops writes, so a dry run never resets counters.
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from typing import Optional

log = logging.getLogger(__name__)


class FileSourceError(Exception):
    """Base exception for file source errors."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class FileNotAvailable(FileSourceError):
    """The file is missing or unreadable."""


class WriteFailed(FileSourceError):
    """The file could not be overwritten."""


class FileSource(ABC):

    @abstractmethod
    def read(self, path: str) -> str:
        """Return the full contents of path, or raise FileNotAvailable."""
        ...

    @abstractmethod
    def write(self, path: str, content: str) -> None:
        """Overwrite path with content, or raise WriteFailed."""
        ...


class SysfsFileSource(FileSource):

    def __init__(self, root: Optional[str] = None):
        self._root = root

    def resolve(self, path: str) -> str:
        if not self._root:
            return path
        return os.path.join(self._root, path.lstrip("/"))

    def read(self, path: str) -> str:
        real_path = self.resolve(path)
        try:
            with open(real_path, "r", encoding="ascii", errors="replace") as f:
                return f.read()
        except OSError as e:
            raise FileNotAvailable(path, e.strerror or str(e)) from e

    def write(self, path: str, content: str) -> None:
        real_path = self.resolve(path)
        try:
            with open(real_path, "w", encoding="ascii") as f:
                f.write(content)
        except OSError as e:
            raise WriteFailed(path, e.strerror or str(e)) from e


class ReadOnlyFileSource(FileSource):

    def __init__(self, inner: FileSource):
        self._inner = inner

    def read(self, path: str) -> str:
        return self._inner.read(path)

    def write(self, path: str, content: str) -> None:
        log.debug("Read-only source, not writing %r to %s", content, path)
