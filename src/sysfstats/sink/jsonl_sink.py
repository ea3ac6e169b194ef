"""
JSONL sink: one JSON object per reading, one reading per line.
Handy for piping into other tools.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional, TextIO

from sysfstats.metrics import MetricReading
from sysfstats.sink.base import MetricsSink, SinkHandle

log = logging.getLogger(__name__)


class _JsonlHandle(SinkHandle):

    def __init__(self, stream: TextIO):
        self.stream = stream
        self.failed_reports = 0

    def report(self, reading: MetricReading) -> None:
        record = reading.to_dict()
        record["timestamp"] = datetime.now(timezone.utc).isoformat()
        try:
            self.stream.write(json.dumps(record) + "\n")
        except (OSError, ValueError) as e:
            # ValueError: write to a closed stream
            self.failed_reports += 1
            log.warning("Failed to write %s: %s", reading.kind, e)


class JsonlSink(MetricsSink):

    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream

    def acquire(self) -> SinkHandle:
        return _JsonlHandle(self._stream or sys.stdout)

    def release(self, handle: SinkHandle) -> None:
        if handle.failed_reports:
            log.warning("%d report(s) to %s failed this round", handle.failed_reports, self.name())
        try:
            handle.stream.flush()
        except (OSError, ValueError) as e:
            log.error("Failed to flush %s output: %s", self.name(), e)

    def name(self) -> str:
        return "jsonl"
