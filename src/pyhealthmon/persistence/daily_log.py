"""Append-only daily NDJSON log of accepted full readings.

One file per calendar day (UTC), named ``health_data_udp_<YYYY-MM-DD>.json``,
holding one compact JSON document per line.  Files are never rewritten.
"""

from __future__ import annotations

import json
import logging
import queue
import threading
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Protocol

from pyhealthmon._constants import log_file_name
from pyhealthmon.exceptions import PersistenceError
from pyhealthmon.models.records import EnrichedReading

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class LogWriter(Protocol):
    """Structural interface used by the ingestion pipeline.

    Lets tests pass in-memory doubles while the service picks either the
    synchronous or the background implementation.
    """

    def append(self, reading: EnrichedReading) -> None: ...

    def close(self) -> None: ...


class DailyLogWriter:
    """Synchronous writer: one locked ``open(..., "a")`` + ``write`` per record."""

    def __init__(self, log_dir: Path | str, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._log_dir = Path(log_dir)
        self._clock = clock
        self._lock = threading.Lock()

    @property
    def log_dir(self) -> Path:
        return self._log_dir

    def path_for(self, when: datetime) -> Path:
        """Return the log file that records appended at *when* go to."""
        if when.tzinfo is not None:
            when = when.astimezone(UTC)
        return self._log_dir / log_file_name(when.date().isoformat())

    @staticmethod
    def serialize(reading: EnrichedReading) -> str:
        return json.dumps(reading.to_record(), separators=(",", ":"), ensure_ascii=False, allow_nan=False) + "\n"

    def append(self, reading: EnrichedReading, *, now: datetime | None = None) -> None:
        """Append *reading* to the file for the current day.

        Raises
        ------
        PersistenceError
            If the directory cannot be created or the file cannot be written.
        """
        line = self.serialize(reading)
        path = self.path_for(now or self._clock())
        with self._lock:
            try:
                self._log_dir.mkdir(parents=True, exist_ok=True)
                with path.open("a", encoding="utf-8") as fh:
                    fh.write(line)
            except OSError as exc:
                raise PersistenceError(f"Failed to append to {path}: {exc}", path=str(path)) from exc

    def close(self) -> None:
        """Nothing is held open between appends."""


_STOP = object()


class BackgroundLogWriter:
    """Moves log appends off the ingestion path.

    Records are queued with their append-time timestamp (so the day bucket
    does not depend on when the worker gets to them) and written by a
    dedicated thread.  When the queue is full the record is dropped and
    counted; the in-memory state is unaffected.  :meth:`close` drains
    everything already queued before returning.
    """

    def __init__(
        self,
        writer: DailyLogWriter,
        *,
        max_queue: int = 1000,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._writer = writer
        self._clock = clock
        self._queue: queue.Queue[object] = queue.Queue(maxsize=max_queue)
        self._thread: threading.Thread | None = None
        self.written = 0
        self.dropped = 0
        self.failed = 0

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running:
            return
        self._thread = threading.Thread(target=self._run, name="pyhealthmon-log-writer", daemon=True)
        self._thread.start()
        _logger.debug("Background log writer started dir=%s", self._writer.log_dir)

    def append(self, reading: EnrichedReading) -> None:
        if not self.is_running:
            self.start()
        try:
            self._queue.put_nowait((reading, self._clock()))
        except queue.Full:
            self.dropped += 1
            _logger.warning(
                "Log queue full, dropping record device=%s dropped_total=%d",
                reading.device_id,
                self.dropped,
            )

    def close(self) -> None:
        thread = self._thread
        if thread is None:
            return
        self._queue.put(_STOP)
        thread.join()
        self._thread = None
        _logger.debug(
            "Background log writer stopped written=%d dropped=%d failed=%d",
            self.written,
            self.dropped,
            self.failed,
        )

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            if item is _STOP:
                return
            reading, when = item  # type: ignore[misc]
            try:
                self._writer.append(reading, now=when)
                self.written += 1
            except PersistenceError as exc:
                self.failed += 1
                _logger.error("Daily log write failed: %s", exc)
