"""Retained record models served by the query interface."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import field_serializer

from pyhealthmon.ingestion.normalize import sanitize_json
from pyhealthmon.models._base import HealthModel, utc_isoformat
from pyhealthmon.models.packets import FullReading, HighFrequencySample


class RemoteInfo(HealthModel):
    """Network origin of a datagram."""

    address: str
    port: int


class EnrichedReading(HealthModel):
    """A full reading augmented with server-side ingestion metadata.

    Parameters
    ----------
    reading : FullReading
        The decoded packet, including its ``raw`` payload.
    server_timestamp : datetime
        Server wall-clock time (UTC) at ingestion.
    remote_info : RemoteInfo
        Sender address and port.
    """

    reading: FullReading
    server_timestamp: datetime
    remote_info: RemoteInfo

    @classmethod
    def enrich(cls, reading: FullReading, *, address: str, port: int, now: datetime) -> EnrichedReading:
        return cls(
            reading=reading,
            server_timestamp=now,
            remote_info=RemoteInfo(address=address, port=port),
        )

    @property
    def device_id(self) -> str:
        return self.reading.device_id

    def to_record(self) -> dict[str, Any]:
        """Return the JSON document for the daily log and the query interface.

        This is the original packet object with ``serverTimestamp`` and
        ``remoteInfo`` added.  A fresh dict is built on every call.
        """
        record: dict[str, Any] = sanitize_json(self.reading.raw)
        record["serverTimestamp"] = utc_isoformat(self.server_timestamp)
        record["remoteInfo"] = {"address": self.remote_info.address, "port": self.remote_info.port}
        return record


class HighFrequencyPoint(HealthModel):
    """Projection of a high-frequency sample kept in the rolling window."""

    timestamp: int
    value: int
    contact: bool
    device_id: str

    @classmethod
    def from_sample(cls, sample: HighFrequencySample) -> HighFrequencyPoint:
        return cls(
            timestamp=sample.timestamp,
            value=sample.ecg_value,
            contact=sample.ecg_contact,
            device_id=sample.device_id,
        )

    def to_record(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class DeviceStatusRecord(HealthModel):
    """Last packet observed from a device, of any kind."""

    last_seen: datetime
    remote_address: str
    remote_port: int
    packet_number: int | None = None

    @field_serializer("last_seen")
    def _serialize_last_seen(self, value: datetime) -> str:
        return utc_isoformat(value)

    def to_record(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)
