"""
SQLite sink. Keeps every report locally, one row per reading, so a
device without a stats service still has a history to look at.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime, timezone
from typing import List

from sysfstats.metrics import MetricReading
from sysfstats.sink.base import MetricsSink, SinkHandle, SinkUnavailable

log = logging.getLogger(__name__)

DEFAULT_DB_PATH = "sysfstats.db"


class _SqliteHandle(SinkHandle):

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self.failed_reports = 0

    def report(self, reading: MetricReading) -> None:
        try:
            self.conn.execute(
                "INSERT INTO reports (timestamp, kind, payload) VALUES (?, ?, ?)",
                (
                    datetime.now(timezone.utc).isoformat(),
                    reading.kind,
                    json.dumps(reading.to_dict()),
                ),
            )
        except sqlite3.Error as e:
            self.failed_reports += 1
            log.warning("Failed to record %s: %s", reading.kind, e)


class SqliteSink(MetricsSink):

    def __init__(self, db_path: str = DEFAULT_DB_PATH):
        self._db_path = db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS reports (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                timestamp TEXT NOT NULL,
                kind TEXT NOT NULL,
                payload TEXT NOT NULL
            )
        """)
        return conn

    def acquire(self) -> SinkHandle:
        try:
            return _SqliteHandle(self._connect())
        except sqlite3.Error as e:
            raise SinkUnavailable(f"{self._db_path}: {e}") from e

    def release(self, handle: SinkHandle) -> None:
        if handle.failed_reports:
            log.warning("%d report(s) to %s failed this round", handle.failed_reports, self._db_path)
        try:
            handle.conn.commit()
        except sqlite3.Error as e:
            log.error("Failed to commit reports to %s: %s", self._db_path, e)
        finally:
            handle.conn.close()

    def name(self) -> str:
        return f"sqlite ({self._db_path})"

    def count(self) -> int:
        conn = self._connect()
        try:
            return conn.execute("SELECT COUNT(*) FROM reports").fetchone()[0]
        finally:
            conn.close()

    def history(self, limit: int = 50) -> List[dict]:
        """Most recent reports first."""
        conn = self._connect()
        try:
            rows = conn.execute(
                "SELECT timestamp, kind, payload FROM reports ORDER BY id DESC LIMIT ?",
                (limit,),
            ).fetchall()
        finally:
            conn.close()
        return [
            {"timestamp": ts, "kind": kind, "payload": json.loads(payload)}
            for ts, kind, payload in rows
        ]
