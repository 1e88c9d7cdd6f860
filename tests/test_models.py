"""Tests for packet and record models."""

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from pyhealthmon.models import (
    DeviceStatusRecord,
    EnrichedReading,
    FullReading,
    HighFrequencyPoint,
    HighFrequencySample,
    utc_isoformat,
)


def _dt() -> datetime:
    return datetime(2024, 3, 1, 12, 30, 45, 123456, tzinfo=UTC)


def test_utc_isoformat_uses_millis_and_z_suffix() -> None:
    assert utc_isoformat(_dt()) == "2024-03-01T12:30:45.123Z"


def test_utc_isoformat_converts_offsets_to_utc() -> None:
    local = datetime(2024, 3, 1, 1, 0, tzinfo=timezone(timedelta(hours=2)))
    assert utc_isoformat(local) == "2024-02-29T23:00:00.000Z"


def test_enriched_reading_record_adds_server_metadata() -> None:
    payload = {
        "deviceId": "ESP32_HEALTH_001",
        "packetType": "data",
        "packetNumber": 5,
        "temperatures": {"t0": 36.6},
        "custom": {"nested": [1, 2]},
    }
    reading = FullReading.model_validate(payload)

    enriched = EnrichedReading.enrich(reading, address="192.168.1.40", port=50123, now=_dt())
    record = enriched.to_record()

    assert record["deviceId"] == "ESP32_HEALTH_001"
    assert record["packetNumber"] == 5
    assert record["custom"] == {"nested": [1, 2]}
    assert record["serverTimestamp"] == "2024-03-01T12:30:45.123Z"
    assert record["remoteInfo"] == {"address": "192.168.1.40", "port": 50123}
    assert enriched.device_id == "ESP32_HEALTH_001"


def test_enriched_reading_record_is_a_fresh_copy() -> None:
    reading = FullReading.model_validate({"deviceId": "dev", "packetType": "data", "temperatures": {"t0": 1.0}})
    enriched = EnrichedReading.enrich(reading, address="10.0.0.2", port=1, now=_dt())

    first = enriched.to_record()
    first["temperatures"]["t0"] = 99.0

    assert enriched.to_record()["temperatures"]["t0"] == 1.0


def test_enriched_reading_record_replaces_non_finite_values() -> None:
    reading = FullReading.model_validate(
        json.loads('{"deviceId": "dev", "packetType": "data", "temperatures": {"t0": NaN}, "x": Infinity}')
    )
    record = EnrichedReading.enrich(reading, address="10.0.0.2", port=1, now=_dt()).to_record()

    assert record["temperatures"]["t0"] is None
    assert record["x"] is None
    json.dumps(record, allow_nan=False)


def test_high_frequency_point_projection() -> None:
    sample = HighFrequencySample.model_validate(
        {"deviceId": "dev", "packetType": "ecg", "timestamp": 42, "ecgValue": 2048, "ecgContact": False}
    )

    point = HighFrequencyPoint.from_sample(sample)

    assert point.to_record() == {"timestamp": 42, "value": 2048, "contact": False, "deviceId": "dev"}


def test_device_status_record_serializes_camel_case() -> None:
    record = DeviceStatusRecord(last_seen=_dt(), remote_address="10.0.0.2", remote_port=4210, packet_number=9)

    assert record.to_record() == {
        "lastSeen": "2024-03-01T12:30:45.123Z",
        "remoteAddress": "10.0.0.2",
        "remotePort": 4210,
        "packetNumber": 9,
    }


def test_device_status_record_without_packet_number() -> None:
    record = DeviceStatusRecord(last_seen=_dt(), remote_address="10.0.0.2", remote_port=4210)

    assert record.to_record()["packetNumber"] is None


def test_models_are_frozen() -> None:
    record = DeviceStatusRecord(last_seen=_dt(), remote_address="10.0.0.2", remote_port=4210)

    with pytest.raises(ValidationError):
        record.remote_port = 1  # type: ignore[misc]


def test_enriched_record_keeps_packet_when_payload_has_raw_key() -> None:
    payload = {"deviceId": "d", "packetType": "data", "temperatures": {"t0": 36.5}, "raw": {"adc": 1}}
    reading = FullReading.model_validate(payload)

    record = EnrichedReading.enrich(reading, address="10.0.0.2", port=1, now=_dt()).to_record()

    assert record == {
        **payload,
        "serverTimestamp": "2024-03-01T12:30:45.123Z",
        "remoteInfo": {"address": "10.0.0.2", "port": 1},
    }
