"""Per-datagram ingestion state machine.

Owns:
- decoding each datagram
- updating the device registry
- routing full readings to the retention store and the daily log
- routing high-frequency samples to the retention store
- ingestion counters

Every failure is contained to the datagram that caused it.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pyhealthmon._preview import preview_for_log, preview_payload
from pyhealthmon.exceptions import PersistenceError
from pyhealthmon.ingestion.decode import decode_packet
from pyhealthmon.models.packets import FullReading, Heartbeat, HighFrequencySample, Packet
from pyhealthmon.models.records import EnrichedReading, HighFrequencyPoint
from pyhealthmon.persistence.daily_log import LogWriter
from pyhealthmon.state.registry import DeviceRegistry
from pyhealthmon.state.store import RetentionStore

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class IngestOutcome(StrEnum):
    REJECTED = "rejected"
    STORED = "stored"
    SAMPLED = "sampled"
    HEARTBEAT = "heartbeat"
    IGNORED = "ignored"
    FAILED = "failed"


@dataclass
class IngestStats:
    """Running counters for the ingestion path."""

    started_at: float = field(default_factory=time.time)
    received: int = 0
    decode_failed: int = 0
    full_readings: int = 0
    samples: int = 0
    heartbeats: int = 0
    ignored: int = 0
    duplicates: int = 0
    persist_failed: int = 0
    internal_errors: int = 0
    last_message_at: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class IngestionPipeline:
    """Routes decoded packets into the registry, the store and the log.

    Usage::

        pipeline = IngestionPipeline(registry=registry, store=store, log_writer=writer)
        pipeline.handle_datagram(data, ("192.168.1.40", 50123))
    """

    def __init__(
        self,
        *,
        registry: DeviceRegistry,
        store: RetentionStore,
        log_writer: LogWriter | None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._registry = registry
        self._store = store
        self._log_writer = log_writer
        self._clock = clock
        self.stats = IngestStats()

    def handle_datagram(self, payload: bytes, addr: tuple[str, int]) -> IngestOutcome:
        """Process one datagram to completion.  Never raises."""
        self.stats.received += 1
        self.stats.last_message_at = time.time()
        try:
            return self._handle(payload, addr)
        except Exception:
            self.stats.internal_errors += 1
            _logger.exception("Unexpected error while ingesting datagram from %s:%s", addr[0], addr[1])
            return IngestOutcome.FAILED

    def _handle(self, payload: bytes, addr: tuple[str, int]) -> IngestOutcome:
        result = decode_packet(payload)
        if result.packet is None:
            self.stats.decode_failed += 1
            reason = result.error.reason if result.error is not None else "unknown"
            _logger.warning(
                "Discarding datagram from %s:%s reason=%s error=%s raw=%s",
                addr[0],
                addr[1],
                reason,
                result.error,
                preview_payload(payload),
            )
            return IngestOutcome.REJECTED

        packet = result.packet
        now = self._clock()
        address, port = addr[0], int(addr[1])
        self._record_seen(packet, address, port, now)

        if isinstance(packet, FullReading):
            return self._on_full_reading(packet, address, port, now)
        if isinstance(packet, HighFrequencySample):
            self._store.record_high_frequency_sample(HighFrequencyPoint.from_sample(packet))
            self.stats.samples += 1
            return IngestOutcome.SAMPLED
        if isinstance(packet, Heartbeat):
            self.stats.heartbeats += 1
            _logger.info("Heartbeat from %s, uptime: %ss", packet.device_id, packet.uptime_seconds)
            return IngestOutcome.HEARTBEAT

        self.stats.ignored += 1
        _logger.debug(
            "Ignoring packetType=%r from %s raw=%s",
            packet.packet_type,
            packet.device_id,
            preview_for_log(packet.raw),
        )
        return IngestOutcome.IGNORED

    def _record_seen(self, packet: Packet, address: str, port: int, now: datetime) -> None:
        previous = self._registry.record_seen(packet.device_id, address, port, packet.packet_number, now)
        # Best-effort only: the registry keeps one record per device.
        if (
            previous is not None
            and packet.packet_number is not None
            and previous.packet_number == packet.packet_number
        ):
            self.stats.duplicates += 1
            _logger.debug("Repeated packetNumber=%s from %s", packet.packet_number, packet.device_id)

    def _on_full_reading(self, packet: FullReading, address: str, port: int, now: datetime) -> IngestOutcome:
        reading = EnrichedReading.enrich(packet, address=address, port=port, now=now)
        self._store.record_full_reading(reading)
        self.stats.full_readings += 1

        temps = packet.temperatures
        heart_rate = packet.heart_rate
        _logger.info(
            "Data from %s: T0=%s°C, ECG=%s, BPM=%s",
            packet.device_id,
            temps.t0 if temps is not None else None,
            packet.ecg.value if packet.ecg is not None else None,
            heart_rate.current_bpm if heart_rate is not None else None,
        )

        if self._log_writer is not None:
            try:
                self._log_writer.append(reading)
            except PersistenceError as exc:
                self.stats.persist_failed += 1
                _logger.error("Daily log write failed: %s", exc)
        return IngestOutcome.STORED
