"""Custom exception hierarchy for pyhealthmon."""

from __future__ import annotations


class HealthMonitorError(Exception):
    """Base exception for all pyhealthmon errors."""


class HealthConfigError(HealthMonitorError):
    """Invalid or missing configuration."""


class PacketDecodeError(HealthMonitorError):
    """Datagram payload could not be turned into a packet.

    Covers invalid UTF-8, invalid JSON, non-object JSON and packets
    missing the fields required by their declared kind.
    """

    def __init__(
        self,
        message: str,
        *,
        reason: str = "",
        payload: bytes = b"",
    ) -> None:
        self.reason = reason or message
        self.payload = payload
        super().__init__(message)


class UnrecognizedPacketError(PacketDecodeError):
    """Well-formed packet whose ``packetType`` is not a known kind.

    Only raised by ``parse_packet(..., strict=True)``.  The default
    decoding path reports such packets as
    :class:`~pyhealthmon.models.packets.UnrecognizedPacket` instead.
    """

    def __init__(
        self,
        message: str,
        *,
        packet_type: str = "",
        payload: bytes = b"",
    ) -> None:
        self.packet_type = packet_type
        super().__init__(message, reason="unrecognized packetType", payload=payload)


class HealthTransportError(HealthMonitorError):
    """UDP listener failure (bind error, socket closed with an error)."""

    def __init__(
        self,
        message: str,
        *,
        host: str = "",
        port: int | None = None,
    ) -> None:
        self.host = host
        self.port = port
        super().__init__(message)


class PersistenceError(HealthMonitorError):
    """Daily log directory or file could not be written.

    Never fatal to ingestion: in-memory state stays correct and the
    next packet is processed normally.
    """

    def __init__(self, message: str, *, path: str = "") -> None:
        self.path = path
        super().__init__(message)
