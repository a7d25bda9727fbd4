"""Entry point for the Dev Events API.

Starts the FastAPI application with uvicorn.  Host and port come from
the ``API_HOST`` and ``API_PORT`` environment variables (see
``dev_events_api.app.core.config``).

Usage:
    python run.py
"""
import asyncio
import logging

from uvicorn import Config, Server

from dev_events_api.app.core.config import settings
from dev_events_api.app.main import app


async def run_api() -> None:
    """Serve the API until interrupted."""
    config = Config(
        app=app,
        host=settings.api_host,
        port=settings.api_port,
        reload=False,
        log_level=settings.log_level.lower(),
    )
    server = Server(config)
    await server.serve()


def main() -> None:
    try:
        asyncio.run(run_api())
    except (KeyboardInterrupt, SystemExit):
        logging.getLogger(__name__).info("API stopped")


if __name__ == "__main__":
    main()
