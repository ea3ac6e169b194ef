"""
Metrics sink interface.

A sink is acquired once per collection round and released at the end
of it. ``session()`` pairs the two so the handle is released on every
exit path.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterator

from sysfstats.metrics import MetricReading


class SinkUnavailable(Exception):
    """The stats service could not be reached for this round."""


class SinkHandle(ABC):

    @abstractmethod
    def report(self, reading: MetricReading) -> None:
        """Forward one reading. Best-effort, no acknowledgment."""
        ...


class MetricsSink(ABC):

    @abstractmethod
    def acquire(self) -> SinkHandle:
        """Open a handle for one round, or raise SinkUnavailable."""
        ...

    @abstractmethod
    def release(self, handle: SinkHandle) -> None:
        ...

    @abstractmethod
    def name(self) -> str:
        ...

    @contextmanager
    def session(self) -> Iterator[SinkHandle]:
        handle = self.acquire()
        try:
            yield handle
        finally:
            self.release(handle)
