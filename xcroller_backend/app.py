"""
aiohttp application factory and command-line entry point.
"""
from __future__ import annotations

from aiohttp import web

from .config import BACKFILL_ON_STARTUP, SERVER_HOST, SERVER_PORT
from .deps import build_services, dispose_services
from .routes import SERVICES_ERROR_KEY, SERVICES_KEY, register_all_routes
from .shared import get_logger

logger = get_logger(__name__)


def create_app(db_path: str | None = None, *, start_backfill: bool = BACKFILL_ON_STARTUP) -> web.Application:
    """
    Build the web application.

    Services are created on startup and disposed on cleanup; handlers find
    them under `app[SERVICES_KEY]`.
    """
    app = web.Application()
    register_all_routes(app)

    async def _on_startup(app: web.Application) -> None:
        res = await build_services(db_path, start_backfill=start_backfill)
        if not res.ok:
            logger.error("Failed to initialize services: %s", res.error)
            app[SERVICES_ERROR_KEY] = res.error or "Initialization failed"
            return
        app[SERVICES_KEY] = res.unwrap()

    async def _on_cleanup(app: web.Application) -> None:
        await dispose_services(app.get(SERVICES_KEY))

    app.on_startup.append(_on_startup)
    app.on_cleanup.append(_on_cleanup)
    return app


def main() -> None:
    web.run_app(create_app(), host=SERVER_HOST, port=SERVER_PORT)


if __name__ == "__main__":
    main()
