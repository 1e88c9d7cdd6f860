"""Decoded device packet models.

The firmware sends three packet kinds, tagged by ``packetType``:

* ``"data"`` - complete periodic reading (temperatures, heart rate, ECG)
* ``"ecg"`` - single high-frequency ECG sample
* ``"heartbeat"`` - keepalive carrying the device uptime
"""

from __future__ import annotations

from enum import StrEnum
from typing import ClassVar

from pydantic import AliasChoices, Field, field_validator

from pyhealthmon.models._base import HealthModel, PacketModel


class PacketKind(StrEnum):
    FULL_READING = "data"
    HIGH_FREQUENCY_SAMPLE = "ecg"
    HEARTBEAT = "heartbeat"


class Temperatures(HealthModel):
    """Up to three probe temperatures in °C; missing probes are ``None``."""

    t0: float | None = None
    t1: float | None = None
    t2: float | None = None


class HeartRateSummary(HealthModel):
    """Heart-rate summary computed on the device.

    Parameters
    ----------
    current_bpm : float or None
        Instantaneous beats per minute.
    average_bpm : float or None
        Rolling average beats per minute.  Accepts both ``averageBPM``
        and the shorter ``avgBPM`` key.
    """

    current_bpm: float | None = Field(
        default=None,
        validation_alias=AliasChoices("currentBPM", "currentBpm", "current_bpm"),
        serialization_alias="currentBPM",
    )
    average_bpm: float | None = Field(
        default=None,
        validation_alias=AliasChoices("averageBPM", "avgBPM", "averageBpm", "average_bpm"),
        serialization_alias="averageBPM",
    )


class EcgReading(HealthModel):
    """Instantaneous ECG value carried inside a full reading."""

    value: float | None = None
    contact: bool | None = None


class PacketBase(PacketModel):
    """Fields common to every packet kind."""

    kind: ClassVar[PacketKind | None] = None

    device_id: str
    packet_type: str
    packet_number: int | None = None

    @field_validator("device_id")
    @classmethod
    def _reject_blank_device_id(cls, value: str) -> str:
        # Kept verbatim: the registry key must match deviceId in the raw record.
        if not value.strip():
            raise ValueError("deviceId must be non-empty")
        return value


class FullReading(PacketBase):
    """Complete periodic telemetry packet (``packetType == "data"``).

    All nested blocks are optional; a block that is present but of the
    wrong shape fails validation.
    """

    kind: ClassVar[PacketKind | None] = PacketKind.FULL_READING

    temperatures: Temperatures | None = None
    heart_rate: HeartRateSummary | None = None
    ecg: EcgReading | None = None


class HighFrequencySample(PacketBase):
    """Single ECG waveform sample (``packetType == "ecg"``).

    Parameters
    ----------
    timestamp : int
        Device clock timestamp (``millis()`` on the device).
    ecg_value : int
        Raw ADC reading.
    ecg_contact : bool
        Whether the electrodes report good skin contact.
    """

    kind: ClassVar[PacketKind | None] = PacketKind.HIGH_FREQUENCY_SAMPLE

    timestamp: int
    ecg_value: int
    ecg_contact: bool


class Heartbeat(PacketBase):
    """Keepalive packet (``packetType == "heartbeat"``)."""

    kind: ClassVar[PacketKind | None] = PacketKind.HEARTBEAT

    uptime: int

    @property
    def uptime_seconds(self) -> int:
        return self.uptime // 1000


class UnrecognizedPacket(PacketBase):
    """Well-formed packet whose ``packetType`` is not a known kind."""


Packet = FullReading | HighFrequencySample | Heartbeat | UnrecognizedPacket

PACKET_MODELS: dict[PacketKind, type[PacketBase]] = {
    PacketKind.FULL_READING: FullReading,
    PacketKind.HIGH_FREQUENCY_SAMPLE: HighFrequencySample,
    PacketKind.HEARTBEAT: Heartbeat,
}
