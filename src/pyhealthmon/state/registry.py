"""Per-device liveness registry."""

from __future__ import annotations

import threading
from datetime import datetime

from pyhealthmon.models.records import DeviceStatusRecord


class DeviceRegistry:
    """Tracks the last packet observed from every device.

    Records are overwritten unconditionally: the registry reflects the last
    packet *received*, not the highest sequence number, so late or duplicate
    datagrams may move ``packet_number`` and ``last_seen`` backwards.
    Records live as long as the process.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._devices: dict[str, DeviceStatusRecord] = {}

    def record_seen(
        self,
        device_id: str,
        address: str,
        port: int,
        packet_number: int | None,
        now: datetime,
    ) -> DeviceStatusRecord | None:
        """Overwrite the record for *device_id* and return the previous one."""
        record = DeviceStatusRecord(
            last_seen=now,
            remote_address=address,
            remote_port=port,
            packet_number=packet_number,
        )
        with self._lock:
            previous = self._devices.get(device_id)
            self._devices[device_id] = record
        return previous

    def get(self, device_id: str) -> DeviceStatusRecord | None:
        with self._lock:
            return self._devices.get(device_id)

    def snapshot(self) -> dict[str, DeviceStatusRecord]:
        """Return a copy of the device map; records themselves are frozen."""
        with self._lock:
            return dict(self._devices)

    def __len__(self) -> int:
        with self._lock:
            return len(self._devices)
