"""In-process sink that just keeps the readings. Used for dry runs."""

from __future__ import annotations

from typing import List

from sysfstats.metrics import MetricReading
from sysfstats.sink.base import MetricsSink, SinkHandle, SinkUnavailable


class _MemoryHandle(SinkHandle):

    def __init__(self, sink: "MemorySink"):
        self._sink = sink

    def report(self, reading: MetricReading) -> None:
        self._sink.readings.append(reading)


class MemorySink(MetricsSink):

    def __init__(self, available: bool = True):
        self.available = available
        self.readings: List[MetricReading] = []
        self.acquired = 0
        self.released = 0

    @property
    def is_open(self) -> bool:
        return self.acquired > self.released

    def acquire(self) -> SinkHandle:
        if not self.available:
            raise SinkUnavailable("memory sink marked unavailable")
        if self.is_open:
            raise SinkUnavailable("memory sink already has an open handle")
        self.acquired += 1
        return _MemoryHandle(self)

    def release(self, handle: SinkHandle) -> None:
        self.released += 1

    def name(self) -> str:
        return "memory"
