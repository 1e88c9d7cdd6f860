"""pyhealthmon - UDP ingest service for wearable health telemetry."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyhealthmon")
except PackageNotFoundError:
    __version__ = "0+local"
from pyhealthmon.config import MonitorConfig
from pyhealthmon.exceptions import (
    HealthConfigError,
    HealthMonitorError,
    HealthTransportError,
    PacketDecodeError,
    PersistenceError,
    UnrecognizedPacketError,
)
from pyhealthmon.ingestion.decode import DecodeResult, decode_packet, parse_packet
from pyhealthmon.ingestion.pipeline import IngestionPipeline, IngestOutcome, IngestStats
from pyhealthmon.models import (
    DeviceStatusRecord,
    EcgReading,
    EnrichedReading,
    FullReading,
    HeartRateSummary,
    Heartbeat,
    HighFrequencyPoint,
    HighFrequencySample,
    Packet,
    PacketKind,
    RemoteInfo,
    Temperatures,
    UnrecognizedPacket,
)
from pyhealthmon.monitor import HealthMonitor
from pyhealthmon.persistence import BackgroundLogWriter, DailyLogWriter
from pyhealthmon.state import DeviceRegistry, RetentionStore

__all__ = [
    "BackgroundLogWriter",
    "DailyLogWriter",
    "DecodeResult",
    "DeviceRegistry",
    "DeviceStatusRecord",
    "EcgReading",
    "EnrichedReading",
    "FullReading",
    "HealthConfigError",
    "HealthMonitor",
    "HealthMonitorError",
    "HealthTransportError",
    "HeartRateSummary",
    "Heartbeat",
    "HighFrequencyPoint",
    "HighFrequencySample",
    "IngestOutcome",
    "IngestStats",
    "IngestionPipeline",
    "MonitorConfig",
    "Packet",
    "PacketDecodeError",
    "PacketKind",
    "PersistenceError",
    "RemoteInfo",
    "RetentionStore",
    "Temperatures",
    "UnrecognizedPacket",
    "UnrecognizedPacketError",
    "__version__",
]
