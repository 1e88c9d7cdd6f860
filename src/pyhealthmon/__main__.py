"""Command-line entry point: ``python -m pyhealthmon``."""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
from pathlib import Path
from typing import Any

from pyhealthmon.config import MonitorConfig
from pyhealthmon.exceptions import HealthConfigError, HealthTransportError
from pyhealthmon.monitor import HealthMonitor

_logger = logging.getLogger("pyhealthmon")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="pyhealthmon",
        description="Receive health telemetry over UDP and serve it over HTTP.",
    )
    parser.add_argument("--udp-host", default=None, help="UDP bind address (default: 0.0.0.0).")
    parser.add_argument("--udp-port", type=int, default=None, help="UDP listen port (default: 8888).")
    parser.add_argument("--http-host", default=None, help="HTTP bind address (default: 0.0.0.0).")
    parser.add_argument("--http-port", type=int, default=None, help="HTTP listen port (default: 3000).")
    parser.add_argument("--log-dir", type=Path, default=None, help="Directory for daily NDJSON logs (default: logs).")
    parser.add_argument(
        "--log-queue-size",
        type=int,
        default=None,
        help="Write logs from a background thread with this queue size (0 = write inline).",
    )
    parser.add_argument("--no-http", action="store_true", help="Run ingestion only, without the HTTP server.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    return parser.parse_args(argv)


def _build_config(args: argparse.Namespace) -> MonitorConfig:
    overrides: dict[str, Any] = {}
    for field_name in ("udp_host", "udp_port", "http_host", "http_port", "log_dir", "log_queue_size"):
        value = getattr(args, field_name)
        if value is not None:
            overrides[field_name] = value
    if args.no_http:
        overrides["http_enabled"] = False
    return MonitorConfig.from_env(**overrides)


async def _serve(config: MonitorConfig) -> None:
    monitor = HealthMonitor(config)
    loop = asyncio.get_running_loop()

    async with monitor:
        for signum in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(signum, monitor.request_stop)
            except NotImplementedError:  # pragma: no cover - Windows event loops
                signal.signal(signum, lambda _signum, _frame: loop.call_soon_threadsafe(monitor.request_stop))
        _logger.info("Health monitor running, press Ctrl+C to stop")
        await monitor.serve_forever()
        _logger.info("Shutting down servers...")


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = _build_config(args)
        asyncio.run(_serve(config))
    except (HealthConfigError, HealthTransportError) as exc:
        print(f"pyhealthmon: {exc}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
