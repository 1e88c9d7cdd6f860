from __future__ import annotations

from datetime import UTC, datetime, timedelta

from pyhealthmon.state.registry import DeviceRegistry


def _dt(offset: int = 0) -> datetime:
    return datetime(2024, 1, 1, tzinfo=UTC) + timedelta(seconds=offset)


def test_first_sighting_returns_no_previous_record() -> None:
    registry = DeviceRegistry()

    previous = registry.record_seen("dev-a", "10.0.0.2", 4210, 1, _dt())

    assert previous is None
    record = registry.get("dev-a")
    assert record is not None
    assert record.remote_address == "10.0.0.2"
    assert record.remote_port == 4210
    assert record.packet_number == 1
    assert record.last_seen == _dt()


def test_record_is_overwritten_even_with_older_packet_number() -> None:
    registry = DeviceRegistry()
    registry.record_seen("dev-a", "10.0.0.2", 4210, 10, _dt(0))

    previous = registry.record_seen("dev-a", "10.0.0.3", 5000, 3, _dt(1))

    assert previous is not None and previous.packet_number == 10
    record = registry.get("dev-a")
    assert record is not None
    assert record.packet_number == 3
    assert record.remote_address == "10.0.0.3"


def test_devices_are_tracked_independently() -> None:
    registry = DeviceRegistry()
    registry.record_seen("dev-a", "10.0.0.2", 4210, 1, _dt())
    registry.record_seen("dev-b", "10.0.0.9", 4211, None, _dt())

    snapshot = registry.snapshot()

    assert set(snapshot) == {"dev-a", "dev-b"}
    assert snapshot["dev-b"].packet_number is None
    assert len(registry) == 2


def test_snapshot_is_a_copy() -> None:
    registry = DeviceRegistry()
    registry.record_seen("dev-a", "10.0.0.2", 4210, 1, _dt())

    snapshot = registry.snapshot()
    registry.record_seen("dev-b", "10.0.0.9", 4211, 1, _dt())

    assert "dev-b" not in snapshot
    assert registry.get("missing") is None
