"""
Process runner: serves the bot's FastAPI app with uvicorn.
"""

import asyncio
from typing import Optional, Tuple

import uvicorn

from fxabot.config import Settings
from fxabot.main import create_app
from fxabot.utils.logging import get_logger

logger = get_logger(__name__)


class FxaBot:
    """The bot's HTTP server, bound to the configured address."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.app = create_app(settings)
        host, port = settings.server_addr
        self.server = uvicorn.Server(
            uvicorn.Config(
                self.app,
                host=host,
                port=port,
                log_config=None,  # keep the JSON handlers from setup_logging
                lifespan="on",
            )
        )

    @property
    def addr(self) -> Optional[Tuple[str, int]]:
        """Bound (host, port), or None until the server has started."""
        if not self.server.started:
            return None
        for server in self.server.servers:
            for sock in server.sockets:
                return sock.getsockname()[:2]
        return None

    async def serve(self) -> None:
        """Serve until the server is asked to exit."""
        await self.server.serve()
        logger.info("Server exited")

    def run(self) -> None:
        """Serve in a new event loop, blocking until shutdown (SIGINT/SIGTERM)."""
        asyncio.run(self.serve())

    def stop(self) -> None:
        self.server.should_exit = True
