from __future__ import annotations

import asyncio
import json
import socket
from datetime import UTC, datetime
from pathlib import Path

import aiohttp
import pytest

from pyhealthmon.config import MonitorConfig
from pyhealthmon.exceptions import HealthTransportError
from pyhealthmon.monitor import HealthMonitor


def _dt() -> datetime:
    return datetime(2024, 3, 1, 8, 15, tzinfo=UTC)


def _config(tmp_path: Path, **overrides: object) -> MonitorConfig:
    values: dict[str, object] = {
        "udp_host": "127.0.0.1",
        "udp_port": 0,
        "http_host": "127.0.0.1",
        "http_port": 0,
        "log_dir": tmp_path / "logs",
    }
    values.update(overrides)
    return MonitorConfig(**values)  # type: ignore[arg-type]


def _send(port: int, obj: object) -> None:
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        sock.sendto(json.dumps(obj).encode("utf-8"), ("127.0.0.1", port))


async def _wait_for_received(monitor: HealthMonitor, count: int) -> None:
    for _ in range(200):
        if monitor.stats.received >= count:
            return
        await asyncio.sleep(0.01)
    raise AssertionError(f"expected {count} datagrams, got {monitor.stats.received}")


@pytest.mark.asyncio
async def test_datagram_to_http_round_trip(tmp_path: Path) -> None:
    async with HealthMonitor(_config(tmp_path), clock=_dt) as monitor:
        _udp_host, udp_port = monitor.udp_address
        assert monitor.http_address is not None
        http_host, http_port = monitor.http_address

        _send(udp_port, {"deviceId": "esp32-1", "packetType": "data", "packetNumber": 1})
        _send(
            udp_port,
            {"deviceId": "esp32-1", "packetType": "ecg", "timestamp": 5, "ecgValue": 2048, "ecgContact": True},
        )
        await _wait_for_received(monitor, 2)

        async with aiohttp.ClientSession(base_url=f"http://{http_host}:{http_port}") as session:
            async with session.get("/api/health-data/latest") as resp:
                latest = await resp.json()
            async with session.get("/api/ecg-data") as resp:
                samples = await resp.json()
            async with session.get("/api/device-status") as resp:
                devices = await resp.json()

    assert latest["packetNumber"] == 1
    assert latest["remoteInfo"]["address"] == "127.0.0.1"
    assert samples[0]["value"] == 2048
    assert devices["esp32-1"]["packetNumber"] is None
    log_file = tmp_path / "logs" / "health_data_udp_2024-03-01.json"
    assert len(log_file.read_text(encoding="utf-8").splitlines()) == 1


@pytest.mark.asyncio
async def test_background_log_writer_is_flushed_on_close(tmp_path: Path) -> None:
    config = _config(tmp_path, http_enabled=False, log_queue_size=10)

    async with HealthMonitor(config, clock=_dt) as monitor:
        assert monitor.http_address is None
        _udp_host, udp_port = monitor.udp_address
        for number in range(3):
            _send(udp_port, {"deviceId": "esp32-1", "packetType": "data", "packetNumber": number})
        await _wait_for_received(monitor, 3)

    log_file = tmp_path / "logs" / "health_data_udp_2024-03-01.json"
    assert len(log_file.read_text(encoding="utf-8").splitlines()) == 3


@pytest.mark.asyncio
async def test_serve_forever_returns_after_request_stop(tmp_path: Path) -> None:
    async with HealthMonitor(_config(tmp_path, http_enabled=False)) as monitor:
        asyncio.get_running_loop().call_later(0.05, monitor.request_stop)
        await asyncio.wait_for(monitor.serve_forever(), timeout=2.0)


@pytest.mark.asyncio
async def test_udp_bind_conflict_raises(tmp_path: Path) -> None:
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as blocker:
        blocker.bind(("127.0.0.1", 0))
        port = blocker.getsockname()[1]
        monitor = HealthMonitor(_config(tmp_path, udp_port=port))

        with pytest.raises(HealthTransportError):
            async with monitor:
                pass
