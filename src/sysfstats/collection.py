"""
One collection round: acquire the sink, run every collector, release.

A collector that blows up is logged and skipped; its siblings still run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Sequence

from sysfstats.collector.base import Collector
from sysfstats.collector.file_source import FileSource
from sysfstats.metrics import MetricReading
from sysfstats.sink.base import MetricsSink, SinkHandle, SinkUnavailable

log = logging.getLogger(__name__)


@dataclass
class RoundSummary:
    sink_available: bool = True
    reported: List[MetricReading] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


def _run_collectors(
    handle: SinkHandle,
    files: FileSource,
    collectors: Sequence[Collector],
    summary: RoundSummary,
):
    for collector in collectors:
        try:
            summary.reported.extend(collector.collect(files, handle))
        except Exception:
            log.exception("Collector %s failed", collector.name())
            summary.failed.append(collector.name())


def run_round(
    sink: MetricsSink,
    files: FileSource,
    collectors: Sequence[Collector],
) -> RoundSummary:
    summary = RoundSummary()

    try:
        with sink.session() as handle:
            _run_collectors(handle, files, collectors, summary)
    except SinkUnavailable as e:
        log.error("Unable to connect to %s sink: %s", sink.name(), e)
        summary.sink_available = False
        return summary

    log.info(
        "Collection round done: %d reading(s) sent to %s, %d collector(s) failed",
        len(summary.reported), sink.name(), len(summary.failed),
    )
    return summary
