"""
Base collector interface.

A collector reads one metric family from the file source and reports
whatever is worth reporting to an open sink handle. Each one owns its
own edge-case policy (skip zero, reset after read, two-channel split),
so they can be tested one at a time.
"""

from abc import ABC, abstractmethod
from typing import List

from sysfstats.collector.file_source import FileSource
from sysfstats.metrics import MetricReading
from sysfstats.sink.base import SinkHandle


class Collector(ABC):
    """Interface for all metric families."""

    @abstractmethod
    def collect(self, files: FileSource, sink: SinkHandle) -> List[MetricReading]:
        """Read, parse and report. Returns the readings that were reported."""
        ...

    @abstractmethod
    def name(self) -> str:
        """Human-readable name for this metric family."""
        ...
