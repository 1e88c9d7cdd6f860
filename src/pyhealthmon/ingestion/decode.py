"""Datagram decoding.

Turns a raw UDP payload into a typed packet.  Decoding is pure: no state is
touched and no logging happens here; callers decide what to do with failures.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from pyhealthmon.exceptions import PacketDecodeError, UnrecognizedPacketError
from pyhealthmon.models.packets import PACKET_MODELS, Packet, PacketKind, UnrecognizedPacket


class _PacketEnvelope(BaseModel):
    """Minimal envelope every packet must satisfy before kind dispatch."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    deviceId: str = Field(..., min_length=1)
    packetType: str = Field(...)


@dataclass(frozen=True)
class DecodeResult:
    """Outcome of decoding one datagram: exactly one of *packet*/*error* is set."""

    packet: Packet | None = None
    error: PacketDecodeError | None = None

    @property
    def ok(self) -> bool:
        return self.packet is not None


def _format_validation_error(exc: ValidationError) -> str:
    parts: list[str] = []
    for err in exc.errors():
        loc = ".".join(str(item) for item in err.get("loc", ())) or "<packet>"
        parts.append(f"{loc}: {err.get('msg', 'invalid')}")
    return "; ".join(parts)


def _load_object(payload: bytes) -> dict[str, Any]:
    try:
        text = payload.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise PacketDecodeError(f"Payload is not UTF-8: {exc}", reason="invalid encoding", payload=payload) from exc

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as exc:
        raise PacketDecodeError(f"Payload is not JSON: {exc}", reason="invalid JSON", payload=payload) from exc

    if not isinstance(parsed, dict):
        raise PacketDecodeError(
            f"Payload decoded to {type(parsed).__name__}, expected object",
            reason="not a JSON object",
            payload=payload,
        )
    return parsed


def parse_packet(payload: bytes, *, strict: bool = False) -> Packet:
    """Parse *payload* into a packet.

    Parameters
    ----------
    payload
        Raw datagram bytes (UTF-8 JSON object).
    strict
        Raise :class:`UnrecognizedPacketError` for unknown ``packetType``
        values instead of returning an :class:`UnrecognizedPacket`.

    Raises
    ------
    PacketDecodeError
        If the payload is malformed or misses fields its kind requires.
    """
    data = _load_object(payload)

    try:
        envelope = _PacketEnvelope.model_validate(data)
    except ValidationError as exc:
        raise PacketDecodeError(
            f"Invalid packet envelope: {_format_validation_error(exc)}",
            reason="missing deviceId or packetType",
            payload=payload,
        ) from exc

    try:
        kind = PacketKind(envelope.packetType)
    except ValueError:
        if strict:
            raise UnrecognizedPacketError(
                f"Unrecognized packetType {envelope.packetType!r}",
                packet_type=envelope.packetType,
                payload=payload,
            ) from None
        kind = None

    model = UnrecognizedPacket if kind is None else PACKET_MODELS[kind]
    try:
        packet = model.model_validate(data)
    except ValidationError as exc:
        raise PacketDecodeError(
            f"Invalid {envelope.packetType!r} packet: {_format_validation_error(exc)}",
            reason="invalid fields",
            payload=payload,
        ) from exc
    return packet  # type: ignore[return-value]


def decode_packet(payload: bytes) -> DecodeResult:
    """Decode *payload* without raising.

    Unknown packet kinds decode successfully as :class:`UnrecognizedPacket`;
    every other problem is reported through :attr:`DecodeResult.error`.
    """
    try:
        return DecodeResult(packet=parse_packet(payload))
    except PacketDecodeError as exc:
        return DecodeResult(error=exc)
    except RecursionError:
        # Deeply nested JSON blows the parser's stack.
        return DecodeResult(
            error=PacketDecodeError("Payload nesting too deep", reason="invalid JSON", payload=payload),
        )
