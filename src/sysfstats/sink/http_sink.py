"""
HTTP sink for a remote stats service.

acquire() opens a client and probes the health endpoint; if that fails
the round is skipped. Reports are posted one reading at a time and are
best-effort: a failed POST is logged and the round carries on.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

import httpx

from sysfstats import __version__
from sysfstats.metrics import MetricReading
from sysfstats.sink.base import MetricsSink, SinkHandle, SinkUnavailable

log = logging.getLogger(__name__)

HEALTH_ENDPOINT = "/v1/health"
REPORTS_ENDPOINT = "/v1/reports"


class _HttpHandle(SinkHandle):

    def __init__(self, client: httpx.Client):
        self.client = client
        self.failed_reports = 0

    def report(self, reading: MetricReading) -> None:
        payload = reading.to_dict()
        payload["timestamp"] = datetime.now(timezone.utc).isoformat()
        try:
            response = self.client.post(REPORTS_ENDPOINT, json=payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            self.failed_reports += 1
            log.warning("Failed to report %s: %s", reading.kind, e)


class HttpSink(MetricsSink):

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 5.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout_seconds
        self._transport = transport

    def acquire(self) -> SinkHandle:
        client = httpx.Client(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
            headers={"User-Agent": f"sysfstats/{__version__}"},
        )
        try:
            response = client.get(HEALTH_ENDPOINT)
            response.raise_for_status()
        except httpx.HTTPError as e:
            client.close()
            raise SinkUnavailable(f"{self._base_url}: {e}") from e
        return _HttpHandle(client)

    def release(self, handle: SinkHandle) -> None:
        if handle.failed_reports:
            log.warning("%d report(s) to %s failed this round", handle.failed_reports, self._base_url)
        handle.client.close()

    def name(self) -> str:
        return f"http ({self._base_url})"
