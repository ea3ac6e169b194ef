"""
Collectors for the device-health sysfs nodes.

Read failures and parse failures are logged and end that collector's
work for the round. Nothing here raises for bad data.
"""

from __future__ import annotations

import logging
from typing import List

from sysfstats.collector.base import Collector
from sysfstats.collector.file_source import FileNotAvailable, FileSource, WriteFailed
from sysfstats.collector.parsers import (
    format_charge_cycles,
    is_fault,
    ohms_to_milli_ohms,
    parse_float_pair,
    parse_leading_int,
)
from sysfstats.config import CollectorPaths
from sysfstats.metrics import (
    ChargeCycleHistogram,
    HardwareErrorCode,
    HardwareFault,
    HardwareType,
    IoOperation,
    MetricReading,
    SlowIoCount,
    SpeakerImpedance,
)
from sysfstats.sink.base import SinkHandle

log = logging.getLogger(__name__)

SLOW_IO_RESET_VALUE = "0"


class ChargeCyclesCollector(Collector):

    def __init__(self, path: str):
        self.path = path

    def collect(self, files: FileSource, sink: SinkHandle) -> List[MetricReading]:
        try:
            contents = files.read(self.path)
        except FileNotAvailable as e:
            log.error("Unable to read battery charge cycles - %s", e.reason)
            return []

        reading = ChargeCycleHistogram(bins=format_charge_cycles(contents))
        sink.report(reading)
        return [reading]

    def name(self) -> str:
        return "charge cycles"


class CodecFaultCollector(Collector):
    """Reports a codec failure whenever the codec state is not "0"."""

    def __init__(self, path: str):
        self.path = path

    def collect(self, files: FileSource, sink: SinkHandle) -> List[MetricReading]:
        try:
            contents = files.read(self.path)
        except FileNotAvailable as e:
            log.error("Unable to read codec state - %s", e.reason)
            return []

        if not is_fault(contents):
            return []

        reading = HardwareFault(
            hardware_type=HardwareType.CODEC,
            hardware_location=0,
            error_code=HardwareErrorCode.COMPLETE,
        )
        sink.report(reading)
        return [reading]

    def name(self) -> str:
        return "codec fault"


class SlowIoCollector(Collector):
    """Consume-on-read counter of slow I/O operations of one kind.

    The file is reset to "0" after every successful read, whether or not
    anything was reported. A crash between the read and the reset means
    the same count is reported again next round.
    """

    def __init__(self, path: str, operation: IoOperation):
        self.path = path
        self.operation = operation

    def collect(self, files: FileSource, sink: SinkHandle) -> List[MetricReading]:
        try:
            contents = files.read(self.path)
        except FileNotAvailable as e:
            log.error("Unable to read %s - %s", self.path, e.reason)
            return []

        reported: List[MetricReading] = []
        try:
            count = parse_leading_int(contents)
            if count is None:
                log.error("Unable to parse %r from file %s to int.", contents, self.path)
            elif count > 0:
                reading = SlowIoCount(operation=self.operation, count=count)
                sink.report(reading)
                reported.append(reading)
        finally:
            try:
                files.write(self.path, SLOW_IO_RESET_VALUE)
            except WriteFailed as e:
                log.error("Unable to clear slow I/O entry %s - %s", self.path, e.reason)

        return reported

    def name(self) -> str:
        return f"slow I/O ({self.operation.value})"


class SpeakerImpedanceCollector(Collector):
    """Last-detected impedance of the left (0) and right (1) speakers."""

    def __init__(self, path: str):
        self.path = path

    def collect(self, files: FileSource, sink: SinkHandle) -> List[MetricReading]:
        try:
            contents = files.read(self.path)
        except FileNotAvailable as e:
            log.error("Unable to read impedance path %s - %s", self.path, e.reason)
            return []

        pair = parse_float_pair(contents)
        if pair is None:
            log.error("Unable to parse speaker impedance %r", contents)
            return []

        readings: List[MetricReading] = [
            SpeakerImpedance(channel=channel, milli_ohms=ohms_to_milli_ohms(ohms))
            for channel, ohms in enumerate(pair)
        ]
        for reading in readings:
            sink.report(reading)
        return readings

    def name(self) -> str:
        return "speaker impedance"


def default_collectors(paths: CollectorPaths) -> List[Collector]:
    """All collectors, in reporting order."""
    return [
        ChargeCyclesCollector(paths.cycle_count_bins),
        CodecFaultCollector(paths.codec_state),
        SlowIoCollector(paths.slowio_read_cnt, IoOperation.READ),
        SlowIoCollector(paths.slowio_write_cnt, IoOperation.WRITE),
        SlowIoCollector(paths.slowio_unmap_cnt, IoOperation.UNMAP),
        SlowIoCollector(paths.slowio_sync_cnt, IoOperation.SYNC),
        SpeakerImpedanceCollector(paths.speaker_impedance),
    ]
