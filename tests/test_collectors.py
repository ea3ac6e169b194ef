"""Tests for the per-family collectors and their reporting policies."""

import sqlite3

import pytest

from sysfstats.collector.sysfs_collectors import (
    ChargeCyclesCollector,
    CodecFaultCollector,
    SlowIoCollector,
    SpeakerImpedanceCollector,
    default_collectors,
)
from sysfstats.config import CollectorPaths
from sysfstats.metrics import (
    ChargeCycleHistogram,
    HardwareErrorCode,
    HardwareFault,
    HardwareType,
    IoOperation,
    SlowIoCount,
    SpeakerImpedance,
)

CYCLES = "/sys/cycles"
CODEC = "/sys/codec"
SLOW = "/sys/slowio_read_cnt"
IMPEDANCE = "/sys/impedance"


def _run(collector, files, sink):
    with sink.session() as handle:
        return collector.collect(files, handle)


def test_charge_cycles_reported_as_comma_list(make_files, sink):
    files = make_files({CYCLES: "1 2 3 "})
    _run(ChargeCyclesCollector(CYCLES), files, sink)

    assert sink.readings == [ChargeCycleHistogram(bins="1,2,3")]
    assert sink.readings[0].buckets == (1, 2, 3)


def test_charge_cycles_missing_file(make_files, sink):
    reported = _run(ChargeCyclesCollector(CYCLES), make_files(), sink)
    assert reported == []
    assert sink.readings == []


def test_codec_zero_is_healthy(make_files, sink):
    _run(CodecFaultCollector(CODEC), make_files({CODEC: "0"}), sink)
    assert sink.readings == []


def test_codec_nonzero_reports_one_fault(make_files, sink):
    _run(CodecFaultCollector(CODEC), make_files({CODEC: "1"}), sink)
    assert sink.readings == [
        HardwareFault(HardwareType.CODEC, 0, HardwareErrorCode.COMPLETE)
    ]


def test_codec_missing_file(make_files, sink):
    assert _run(CodecFaultCollector(CODEC), make_files(), sink) == []


def test_slow_io_reports_then_resets(make_files, sink):
    files = make_files({SLOW: "5"})
    _run(SlowIoCollector(SLOW, IoOperation.READ), files, sink)

    assert sink.readings == [SlowIoCount(IoOperation.READ, 5)]
    assert files.writes == [(SLOW, "0")]
    assert files.files[SLOW] == "0"


def test_slow_io_zero_not_reported_but_still_reset(make_files, sink):
    files = make_files({SLOW: "0\n"})
    _run(SlowIoCollector(SLOW, IoOperation.WRITE), files, sink)

    assert sink.readings == []
    assert files.writes == [(SLOW, "0")]


def test_slow_io_garbage_still_reset(make_files, sink):
    files = make_files({SLOW: "busy"})
    _run(SlowIoCollector(SLOW, IoOperation.SYNC), files, sink)

    assert sink.readings == []
    assert files.writes == [(SLOW, "0")]


def test_slow_io_negative_not_reported(make_files, sink):
    files = make_files({SLOW: "-2"})
    _run(SlowIoCollector(SLOW, IoOperation.UNMAP), files, sink)
    assert sink.readings == []


def test_slow_io_reset_failure_is_not_fatal(make_files, sink):
    files = make_files({SLOW: "3"}, read_only=[SLOW])
    reported = _run(SlowIoCollector(SLOW, IoOperation.READ), files, sink)

    assert reported == [SlowIoCount(IoOperation.READ, 3)]
    assert files.files[SLOW] == "3"


def test_slow_io_missing_file_skips_reset(make_files, sink):
    files = make_files()
    _run(SlowIoCollector(SLOW, IoOperation.READ), files, sink)
    assert files.writes == []


def test_speaker_impedance_two_channels(make_files, sink):
    _run(SpeakerImpedanceCollector(IMPEDANCE), make_files({IMPEDANCE: "3.0,4.5"}), sink)
    assert sink.readings == [SpeakerImpedance(0, 3000), SpeakerImpedance(1, 4500)]


def test_speaker_impedance_single_value_reports_nothing(make_files, sink):
    _run(SpeakerImpedanceCollector(IMPEDANCE), make_files({IMPEDANCE: "3.0"}), sink)
    assert sink.readings == []


def test_speaker_impedance_non_numeric_reports_nothing(make_files, sink):
    _run(SpeakerImpedanceCollector(IMPEDANCE), make_files({IMPEDANCE: "n/a"}), sink)
    assert sink.readings == []


def test_default_collectors_cover_every_node():
    paths = CollectorPaths()
    collectors = default_collectors(paths)

    assert len(collectors) == 7
    assert {c.path for c in collectors} == {
        paths.cycle_count_bins,
        paths.codec_state,
        paths.slowio_read_cnt,
        paths.slowio_write_cnt,
        paths.slowio_unmap_cnt,
        paths.slowio_sync_cnt,
        paths.speaker_impedance,
    }
    operations = [c.operation for c in collectors if isinstance(c, SlowIoCollector)]
    assert operations == [IoOperation.READ, IoOperation.WRITE, IoOperation.UNMAP, IoOperation.SYNC]


class BrokenHandle:
    """Sink handle whose report always raises."""

    def report(self, reading):
        raise sqlite3.OperationalError("database is locked")


def test_slow_io_reset_even_when_report_raises(make_files):
    files = make_files({SLOW: "5"})

    with pytest.raises(sqlite3.OperationalError):
        SlowIoCollector(SLOW, IoOperation.READ).collect(files, BrokenHandle())

    assert files.writes == [(SLOW, "0")]
    assert files.files[SLOW] == "0"


def test_codec_zero_with_newline_is_healthy(make_files, sink):
    _run(CodecFaultCollector(CODEC), make_files({CODEC: "0\n"}), sink)
    assert sink.readings == []


def test_speaker_impedance_overflow_is_parse_failure(make_files, sink):
    reported = _run(SpeakerImpedanceCollector(IMPEDANCE), make_files({IMPEDANCE: "1e400,7.5"}), sink)
    assert reported == []
    assert sink.readings == []
