"""Entry point for serving the Content Share API.

Host and port are read from the ``HOST`` and ``PORT`` environment
variables.  Defaults are ``0.0.0.0`` and ``8000``.

Usage:
    python run.py
"""
import asyncio
import os

from uvicorn import Config, Server

from content_share_api.app.core.config import settings


async def main() -> None:
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    config = Config(
        app="content_share_api.app.main:app",
        host=host,
        port=port,
        reload=False,
        log_level=settings.log_level.lower(),
    )
    server = Server(config)
    await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass
