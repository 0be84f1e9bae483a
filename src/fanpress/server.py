# /src/fanpress/server.py
# Application factory, lifecycle hooks and the process entry point

import logging
from typing import Optional

from aiohttp import web

from .api import DataAPI, error_middleware
from .config import Settings
from .hub import BroadcastHub
from .storage.log_store import LogStore


STORE_KEY = web.AppKey("store", LogStore)
HUB_KEY = web.AppKey("hub", BroadcastHub)
SETTINGS_KEY = web.AppKey("settings", Settings)

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> web.Application:
    """Build the aiohttp application.

    The store, hub and API objects are created here, once per app, and
    reachable through the app keys. The log file is loaded on startup and
    flushed on cleanup.
    """
    settings = settings or Settings()
    store = LogStore(settings.data_file)
    hub = BroadcastHub(store)
    api = DataAPI(store, hub, session_queue_size=settings.session_queue_size)

    app = web.Application(middlewares=[error_middleware])
    app[SETTINGS_KEY] = settings
    app[STORE_KEY] = store
    app[HUB_KEY] = hub

    api.add_routes(app, ws_path=settings.ws_path)
    if settings.static_dir is not None:
        app.router.add_static("/", settings.static_dir, show_index=False)

    app.on_startup.append(_load_store)
    app.on_shutdown.append(_close_sessions)
    app.on_cleanup.append(_flush_store)
    return app


async def _load_store(app: web.Application) -> None:
    await app[STORE_KEY].load()


async def _close_sessions(app: web.Application) -> None:
    logger.info("Shutting down gracefully...")
    await app[HUB_KEY].close_all()


async def _flush_store(app: web.Application) -> None:
    await app[STORE_KEY].flush()


def main() -> None:
    """Console entry point: ``fanpress`` or ``python -m fanpress``."""
    settings = Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = create_app(settings)
    logger.info(f"Fan Press Tracker Server running on port {settings.port}")
    logger.info(f"WebSocket endpoint: ws://{settings.host}:{settings.port}{settings.ws_path}")
    logger.info(f"Health check: http://localhost:{settings.port}/health")
    web.run_app(app, host=settings.host, port=settings.port, print=None)
