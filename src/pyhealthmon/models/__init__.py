"""Data models for device packets and retained records."""

from pyhealthmon.models._base import HealthModel, PacketModel, utc_isoformat
from pyhealthmon.models.packets import (
    PACKET_MODELS,
    EcgReading,
    FullReading,
    HeartRateSummary,
    Heartbeat,
    HighFrequencySample,
    Packet,
    PacketBase,
    PacketKind,
    Temperatures,
    UnrecognizedPacket,
)
from pyhealthmon.models.records import (
    DeviceStatusRecord,
    EnrichedReading,
    HighFrequencyPoint,
    RemoteInfo,
)

__all__ = [
    "DeviceStatusRecord",
    "EcgReading",
    "EnrichedReading",
    "FullReading",
    "HealthModel",
    "HeartRateSummary",
    "Heartbeat",
    "HighFrequencyPoint",
    "HighFrequencySample",
    "PACKET_MODELS",
    "Packet",
    "PacketBase",
    "PacketKind",
    "PacketModel",
    "RemoteInfo",
    "Temperatures",
    "UnrecognizedPacket",
    "utc_isoformat",
]
