"""Internal UDP listener runtime."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from pyhealthmon.exceptions import HealthTransportError

DatagramHandler = Callable[[bytes, tuple[str, int]], Any]


class _DatagramProtocol(asyncio.DatagramProtocol):
    def __init__(self, runtime: UdpListener) -> None:
        self._runtime = runtime

    def datagram_received(self, data: bytes, addr: tuple[str | Any, int]) -> None:
        # IPv6 addresses arrive as 4-tuples; keep host and port only.
        self._runtime._dispatch(data, (str(addr[0]), int(addr[1])))

    def error_received(self, exc: Exception) -> None:
        self._runtime._logger.error("UDP socket error: %s", exc)

    def connection_lost(self, exc: Exception | None) -> None:
        self._runtime._on_connection_lost(exc)


class UdpListener:
    """asyncio datagram endpoint that hands every datagram to *on_datagram*.

    Datagrams are dispatched synchronously on the event loop, one at a
    time, in the order the transport delivers them.
    """

    def __init__(
        self,
        *,
        host: str,
        port: int,
        on_datagram: DatagramHandler,
        logger: logging.Logger | None = None,
    ) -> None:
        self._host = host
        self._port = port
        self._on_datagram = on_datagram
        self._logger = logger or logging.getLogger(__name__)
        self._transport: asyncio.DatagramTransport | None = None
        self._closed: asyncio.Future[None] | None = None

    @property
    def is_running(self) -> bool:
        """Whether the socket is bound and receiving."""
        return self._transport is not None and not self._transport.is_closing()

    @property
    def local_address(self) -> tuple[str, int]:
        """Bound ``(host, port)``; useful when started with port ``0``."""
        if self._transport is None:
            raise HealthTransportError("UDP listener is not running", host=self._host, port=self._port)
        sockname = self._transport.get_extra_info("sockname")
        return str(sockname[0]), int(sockname[1])

    async def start(self) -> None:
        """Bind the socket.

        Raises
        ------
        HealthTransportError
            If the address cannot be bound (port in use, permission denied).
        """
        await self.stop()
        loop = asyncio.get_running_loop()
        self._closed = loop.create_future()
        try:
            transport, _protocol = await loop.create_datagram_endpoint(
                lambda: _DatagramProtocol(self),
                local_addr=(self._host, self._port),
            )
        except OSError as exc:
            self._closed = None
            raise HealthTransportError(
                f"Failed to bind UDP {self._host}:{self._port}: {exc}",
                host=self._host,
                port=self._port,
            ) from exc

        self._transport = transport
        host, port = self.local_address
        self._logger.info("UDP Server listening on %s:%s", host, port)

    async def stop(self) -> None:
        """Close the socket and wait until the transport has released it."""
        transport = self._transport
        closed = self._closed
        self._transport = None
        if transport is None:
            return
        transport.close()
        if closed is not None:
            await closed
        self._closed = None
        self._logger.debug("UDP listener stopped")

    async def wait_closed(self) -> None:
        """Wait until the socket is closed by :meth:`stop` or by a socket error."""
        if self._closed is not None:
            await asyncio.shield(self._closed)

    def _dispatch(self, data: bytes, addr: tuple[str, int]) -> None:
        try:
            self._on_datagram(data, addr)
        except Exception:
            self._logger.exception("Datagram handler failed for %s:%s", addr[0], addr[1])

    def _on_connection_lost(self, exc: Exception | None) -> None:
        if exc is not None:
            self._logger.error("UDP listener closed with error: %s", exc)
        closed = self._closed
        if closed is not None and not closed.done():
            closed.set_result(None)
