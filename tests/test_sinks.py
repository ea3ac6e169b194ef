"""Tests for the sink implementations and the scoped session."""

import io
import json
import os
import tempfile

import httpx
import pytest

from sysfstats.metrics import HardwareErrorCode, HardwareFault, HardwareType, IoOperation, SlowIoCount, SpeakerImpedance
from sysfstats.sink.base import SinkUnavailable
from sysfstats.sink.http_sink import HttpSink
from sysfstats.sink.jsonl_sink import JsonlSink
from sysfstats.sink.memory_sink import MemorySink
from sysfstats.sink.sqlite_sink import SqliteSink


def test_session_releases_on_error():
    sink = MemorySink()
    with pytest.raises(RuntimeError):
        with sink.session():
            raise RuntimeError("collector blew up")
    assert sink.acquired == 1
    assert sink.released == 1
    assert not sink.is_open


def test_memory_sink_one_handle_at_a_time():
    sink = MemorySink()
    with sink.session():
        with pytest.raises(SinkUnavailable):
            sink.acquire()


def test_jsonl_sink_writes_one_line_per_reading():
    stream = io.StringIO()
    sink = JsonlSink(stream=stream)
    with sink.session() as handle:
        handle.report(SlowIoCount(IoOperation.READ, 4))
        handle.report(SpeakerImpedance(1, 7000))

    lines = stream.getvalue().splitlines()
    assert len(lines) == 2
    first = json.loads(lines[0])
    assert first["kind"] == "slow_io"
    assert first["operation"] == "read"
    assert first["count"] == 4
    assert "timestamp" in first


def test_sqlite_sink_persists_reports():
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = f.name

    try:
        sink = SqliteSink(db_path=db_path)
        assert sink.count() == 0

        with sink.session() as handle:
            handle.report(HardwareFault(HardwareType.CODEC, 0, HardwareErrorCode.COMPLETE))
            handle.report(SlowIoCount(IoOperation.SYNC, 9))

        assert sink.count() == 2
        history = sink.history(limit=10)
        assert [row["kind"] for row in history] == ["slow_io", "hardware_fault"]
        assert history[0]["payload"]["count"] == 9
        assert history[1]["payload"]["hardware_type"] == "codec"
    finally:
        os.unlink(db_path)


def test_sqlite_sink_unavailable_for_bad_path():
    sink = SqliteSink(db_path="/nonexistent-dir/sub/stats.db")
    with pytest.raises(SinkUnavailable):
        sink.acquire()


def _transport(requests, health_status=200, report_status=200):
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if request.url.path == "/v1/health":
            return httpx.Response(health_status, json={"ok": health_status == 200})
        return httpx.Response(report_status, json={})
    return httpx.MockTransport(handler)


def test_http_sink_posts_readings():
    requests = []
    sink = HttpSink("http://stats.local/", transport=_transport(requests))

    with sink.session() as handle:
        handle.report(SpeakerImpedance(0, 3000))

    assert [r.url.path for r in requests] == ["/v1/health", "/v1/reports"]
    body = json.loads(requests[1].content)
    assert body["kind"] == "speaker_impedance"
    assert body["channel"] == 0
    assert body["milli_ohms"] == 3000
    assert requests[1].headers["User-Agent"].startswith("sysfstats/")


def test_http_sink_unavailable_when_health_fails():
    requests = []
    sink = HttpSink("http://stats.local", transport=_transport(requests, health_status=503))

    with pytest.raises(SinkUnavailable):
        sink.acquire()


def test_http_sink_unavailable_when_unreachable():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    sink = HttpSink("http://stats.local", transport=httpx.MockTransport(handler))
    with pytest.raises(SinkUnavailable):
        sink.acquire()


def test_http_sink_report_failure_is_best_effort():
    requests = []
    sink = HttpSink("http://stats.local", transport=_transport(requests, report_status=500))

    with sink.session() as handle:
        handle.report(SlowIoCount(IoOperation.WRITE, 1))
        handle.report(SlowIoCount(IoOperation.UNMAP, 2))
        assert handle.failed_reports == 2


def test_sqlite_sink_report_failure_is_best_effort():
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = f.name

    try:
        sink = SqliteSink(db_path=db_path)
        with sink.session() as handle:
            handle.conn.execute("DROP TABLE reports")
            handle.report(SlowIoCount(IoOperation.READ, 5))
            handle.report(SpeakerImpedance(0, 7000))
            assert handle.failed_reports == 2
    finally:
        os.unlink(db_path)


class BrokenPipeStream(io.StringIO):

    def write(self, s):
        raise BrokenPipeError("Broken pipe")


def test_jsonl_sink_report_failure_is_best_effort():
    sink = JsonlSink(stream=BrokenPipeStream())

    with sink.session() as handle:
        handle.report(SlowIoCount(IoOperation.READ, 5))
        assert handle.failed_reports == 1


def test_jsonl_sink_closed_stream_is_best_effort():
    stream = io.StringIO()
    stream.close()
    sink = JsonlSink(stream=stream)

    with sink.session() as handle:
        handle.report(SpeakerImpedance(1, 7000))
        assert handle.failed_reports == 1
