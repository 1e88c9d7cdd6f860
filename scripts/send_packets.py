#!/usr/bin/env python3
"""Device simulator for the UDP health monitor.

Sends the same packet kinds the wearable firmware emits:

* a full ``"data"`` reading every ``--data-interval`` seconds,
* ``"ecg"`` samples at ``--ecg-rate`` Hz,
* a ``"heartbeat"`` every ``--heartbeat-interval`` seconds.

Use this to exercise the service and dashboard without hardware.
"""

from __future__ import annotations

import argparse
import json
import logging
import math
import random
import signal
import socket
import time
from dataclasses import dataclass
from typing import Any

_LOG = logging.getLogger("send_packets")


@dataclass
class SimulatorStats:
    started_at: float
    data_sent: int = 0
    ecg_sent: int = 0
    heartbeats_sent: int = 0


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Send simulated health telemetry packets over UDP.",
    )
    parser.add_argument("--host", default="127.0.0.1", help="Monitor host.")
    parser.add_argument("--port", type=int, default=8888, help="Monitor UDP port.")
    parser.add_argument("--device-id", default="ESP32_HEALTH_001", help="deviceId to report.")
    parser.add_argument(
        "--duration",
        type=int,
        default=0,
        help="Maximum runtime in seconds (0 = run until Ctrl+C).",
    )
    parser.add_argument("--data-interval", type=float, default=1.0, help="Seconds between full readings.")
    parser.add_argument("--ecg-rate", type=float, default=50.0, help="ECG samples per second (0 = none).")
    parser.add_argument("--heartbeat-interval", type=float, default=10.0, help="Seconds between heartbeats.")
    parser.add_argument("--garbage", action="store_true", help="Interleave malformed datagrams.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    return parser.parse_args()


def _ecg_value(t: float) -> int:
    # Crude PQRST shape around the 12-bit ADC midpoint.
    phase = t % 0.8
    spike = 1200 * math.exp(-((phase - 0.2) ** 2) / 0.0004)
    wave = 150 * math.sin(2 * math.pi * phase / 0.8)
    return int(2048 + spike + wave + random.uniform(-20, 20))


def _data_packet(device_id: str, packet_number: int, t: float) -> dict[str, Any]:
    bpm = 72 + 5 * math.sin(t / 30)
    return {
        "deviceId": device_id,
        "packetType": "data",
        "packetNumber": packet_number,
        "temperatures": {
            "t0": round(36.5 + random.uniform(-0.3, 0.3), 2),
            "t1": round(36.1 + random.uniform(-0.3, 0.3), 2),
            "t2": round(24.0 + random.uniform(-0.5, 0.5), 2),
        },
        "heartRate": {"currentBPM": round(bpm, 1), "averageBPM": 72.0},
        "ecg": {"value": _ecg_value(t), "contact": True},
    }


def _main() -> int:
    args = _parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    stats = SimulatorStats(started_at=time.time())
    should_stop = False

    def stop_handler(_signum: int, _frame: Any) -> None:
        nonlocal should_stop
        should_stop = True

    signal.signal(signal.SIGINT, stop_handler)
    signal.signal(signal.SIGTERM, stop_handler)

    target = (args.host, args.port)
    packet_number = 0
    next_data = next_ecg = next_heartbeat = stats.started_at
    ecg_period = 1.0 / args.ecg_rate if args.ecg_rate > 0 else 0.0

    _LOG.info("Sending to %s:%s as %s", args.host, args.port, args.device_id)
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:

        def send(packet: dict[str, Any] | bytes) -> None:
            payload = packet if isinstance(packet, bytes) else json.dumps(packet).encode("utf-8")
            sock.sendto(payload, target)
            _LOG.debug("sent %d bytes", len(payload))

        while not should_stop:
            now = time.time()
            elapsed = now - stats.started_at
            if args.duration > 0 and elapsed >= args.duration:
                _LOG.info("Reached --duration=%ss, stopping.", args.duration)
                break

            if now >= next_data:
                packet_number += 1
                send(_data_packet(args.device_id, packet_number, elapsed))
                stats.data_sent += 1
                if args.garbage:
                    send(b"{not json")
                next_data += args.data_interval

            if ecg_period and now >= next_ecg:
                send(
                    {
                        "deviceId": args.device_id,
                        "packetType": "ecg",
                        "timestamp": int(elapsed * 1000),
                        "ecgValue": _ecg_value(elapsed),
                        "ecgContact": True,
                    }
                )
                stats.ecg_sent += 1
                next_ecg += ecg_period

            if now >= next_heartbeat:
                send({"deviceId": args.device_id, "packetType": "heartbeat", "uptime": int(elapsed * 1000)})
                stats.heartbeats_sent += 1
                next_heartbeat += args.heartbeat_interval

            deadlines = [next_data, next_heartbeat] + ([next_ecg] if ecg_period else [])
            time.sleep(max(0.0, min(deadlines) - time.time()))

    _LOG.info(
        "Sent data=%d ecg=%d heartbeat=%d in %.1fs",
        stats.data_sent,
        stats.ecg_sent,
        stats.heartbeats_sent,
        time.time() - stats.started_at,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(_main())
