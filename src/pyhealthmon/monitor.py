"""Service lifecycle: wires the listener, the store, the log and the HTTP API."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from aiohttp import web

from pyhealthmon._udp import UdpListener
from pyhealthmon.api import create_app
from pyhealthmon.config import MonitorConfig
from pyhealthmon.exceptions import HealthTransportError
from pyhealthmon.ingestion.pipeline import IngestionPipeline, IngestStats
from pyhealthmon.persistence.daily_log import BackgroundLogWriter, DailyLogWriter, LogWriter
from pyhealthmon.state.registry import DeviceRegistry
from pyhealthmon.state.store import RetentionStore

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class HealthMonitor:
    """UDP health telemetry monitor.

    Usage::

        async with HealthMonitor(MonitorConfig.from_env()) as monitor:
            await monitor.serve_forever()

    Parameters
    ----------
    config
        Listener addresses, retention capacities and log location.
    clock
        Source of server-side timestamps. Injected by tests.
    """

    def __init__(
        self,
        config: MonitorConfig | None = None,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._config = config or MonitorConfig.from_env()
        self._store = RetentionStore(
            history_capacity=self._config.history_capacity,
            hf_capacity=self._config.hf_capacity,
            default_history_limit=self._config.default_history_limit,
        )
        self._registry = DeviceRegistry()
        daily = DailyLogWriter(self._config.log_dir, clock=clock)
        self._log_writer: LogWriter = (
            BackgroundLogWriter(daily, max_queue=self._config.log_queue_size, clock=clock)
            if self._config.log_queue_size > 0
            else daily
        )
        self._pipeline = IngestionPipeline(
            registry=self._registry,
            store=self._store,
            log_writer=self._log_writer,
            clock=clock,
        )
        self._listener = UdpListener(
            host=self._config.udp_host,
            port=self._config.udp_port,
            on_datagram=self._pipeline.handle_datagram,
        )
        self._runner: web.AppRunner | None = None
        self._site: web.TCPSite | None = None
        self._stop_event: asyncio.Event | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> HealthMonitor:
        await self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def start(self) -> None:
        """Bind the UDP listener, then the HTTP server when enabled.

        Raises
        ------
        HealthTransportError
            If either socket cannot be bound. Whatever was already started
            is closed again before the error propagates.
        """
        self._stop_event = asyncio.Event()
        await self._listener.start()
        if not self._config.http_enabled:
            return
        try:
            await self._start_http()
        except BaseException:
            await self.close()
            raise

    async def _start_http(self) -> None:
        app = create_app(store=self._store, registry=self._registry, stats=self._pipeline.stats)
        runner = web.AppRunner(app, access_log=None)
        await runner.setup()
        self._runner = runner
        site = web.TCPSite(runner, self._config.http_host, self._config.http_port)
        try:
            await site.start()
        except OSError as exc:
            raise HealthTransportError(
                f"Failed to bind HTTP {self._config.http_host}:{self._config.http_port}: {exc}",
                host=self._config.http_host,
                port=self._config.http_port,
            ) from exc
        self._site = site
        host, port = self.http_address or (self._config.http_host, self._config.http_port)
        _logger.info("HTTP Server running on http://%s:%s", host, port)

    async def close(self) -> None:
        """Stop accepting datagrams, shut the HTTP server and flush the log."""
        await self._listener.stop()
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None
            self._site = None
        self._log_writer.close()
        _logger.info("Health monitor stopped")

    async def serve_forever(self) -> None:
        """Run until :meth:`request_stop` is called or the UDP socket closes."""
        if self._stop_event is None:
            raise HealthTransportError("Health monitor is not started")
        stop_waiter = asyncio.ensure_future(self._stop_event.wait())
        closed_waiter = asyncio.ensure_future(self._listener.wait_closed())
        try:
            await asyncio.wait({stop_waiter, closed_waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for waiter in (stop_waiter, closed_waiter):
                waiter.cancel()

    def request_stop(self) -> None:
        """Ask :meth:`serve_forever` to return.  Safe to call more than once."""
        if self._stop_event is not None:
            self._stop_event.set()

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def config(self) -> MonitorConfig:
        return self._config

    @property
    def store(self) -> RetentionStore:
        return self._store

    @property
    def registry(self) -> DeviceRegistry:
        return self._registry

    @property
    def pipeline(self) -> IngestionPipeline:
        return self._pipeline

    @property
    def stats(self) -> IngestStats:
        return self._pipeline.stats

    @property
    def udp_address(self) -> tuple[str, int]:
        """Bound UDP ``(host, port)``."""
        return self._listener.local_address

    @property
    def http_address(self) -> tuple[str, int] | None:
        """Bound HTTP ``(host, port)``, or ``None`` when HTTP is not serving."""
        if self._runner is None or not self._runner.addresses:
            return None
        address = self._runner.addresses[0]
        return str(address[0]), int(address[1])
