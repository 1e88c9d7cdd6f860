"""Read-only HTTP query interface and dashboard.

Every handler answers with a well-formed JSON body, even before the first
packet arrives and when query parameters are garbage.
"""

from __future__ import annotations

from importlib import resources

from aiohttp import web

from pyhealthmon._constants import NO_DATA_MESSAGE
from pyhealthmon.ingestion.pipeline import IngestStats
from pyhealthmon.state.registry import DeviceRegistry
from pyhealthmon.state.store import RetentionStore

STORE_KEY = web.AppKey("store", RetentionStore)
REGISTRY_KEY = web.AppKey("registry", DeviceRegistry)
STATS_KEY = web.AppKey("stats", IngestStats)

_DASHBOARD_RESOURCE = "dashboard.html"


async def latest_reading(request: web.Request) -> web.Response:
    reading = request.app[STORE_KEY].latest()
    if reading is None:
        return web.json_response({"message": NO_DATA_MESSAGE})
    return web.json_response(reading.to_record())


async def reading_history(request: web.Request) -> web.Response:
    limit = request.query.get("limit")
    readings = request.app[STORE_KEY].history(limit)
    return web.json_response([reading.to_record() for reading in readings])


async def ecg_samples(request: web.Request) -> web.Response:
    points = request.app[STORE_KEY].high_frequency_samples()
    return web.json_response([point.to_record() for point in points])


async def device_status(request: web.Request) -> web.Response:
    devices = request.app[REGISTRY_KEY].snapshot()
    return web.json_response({device_id: record.to_record() for device_id, record in devices.items()})


async def ingest_stats(request: web.Request) -> web.Response:
    body = request.app[STATS_KEY].to_dict()
    body.update(request.app[STORE_KEY].stats())
    body["devices"] = len(request.app[REGISTRY_KEY])
    return web.json_response(body)


async def health(_request: web.Request) -> web.Response:
    return web.json_response({"status": "ok"})


async def dashboard(_request: web.Request) -> web.Response:
    html = resources.files("pyhealthmon").joinpath("static").joinpath(_DASHBOARD_RESOURCE).read_text(encoding="utf-8")
    return web.Response(text=html, content_type="text/html")


def create_app(
    *,
    store: RetentionStore,
    registry: DeviceRegistry,
    stats: IngestStats | None = None,
) -> web.Application:
    """Build the aiohttp application serving snapshots of *store* and *registry*."""
    app = web.Application()
    app[STORE_KEY] = store
    app[REGISTRY_KEY] = registry
    app[STATS_KEY] = stats if stats is not None else IngestStats()
    app.router.add_get("/", dashboard)
    app.router.add_get("/health", health)
    app.router.add_get("/api/health-data/latest", latest_reading)
    app.router.add_get("/api/health-data", reading_history)
    app.router.add_get("/api/ecg-data", ecg_samples)
    app.router.add_get("/api/device-status", device_status)
    app.router.add_get("/api/stats", ingest_stats)
    return app
