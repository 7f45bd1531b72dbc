"""
FastAPI application factory.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from fxabot import __version__
from fxabot.api.webhooks import build_router
from fxabot.config import Settings
from fxabot.middleware.logging import RequestLoggingMiddleware
from fxabot.services.dispatch_queue import DispatchQueue
from fxabot.services.github_client import GithubClient
from fxabot.utils.logging import get_logger

logger = get_logger(__name__)

GREETING = "Beep boop."


def create_app(settings: Settings, client: Optional[GithubClient] = None) -> FastAPI:
    """
    Build the bot's HTTP application.

    The GitHub client and dispatch queue are created on startup and torn
    down on shutdown; they live on ``app.state``.

    Args:
        settings: Application settings
        client: GitHub client to use instead of one built from settings

    Returns:
        Configured FastAPI application
    """
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Start the GitHub client and dispatch queue; drain and close them on shutdown."""
        logger.info("Starting fxabot")
        github_client = client or GithubClient.from_settings(settings)
        queue = DispatchQueue(github_client)
        queue.start()
        app.state.github_client = github_client
        app.state.queue = queue
        try:
            yield
        finally:
            logger.info("Shutting down fxabot")
            await queue.close()
            await github_client.close()
            logger.info("fxabot stopped")

    app = FastAPI(
        lifespan=lifespan,
        title="fxabot",
        description="GitHub comment bot",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = settings

    app.add_middleware(RequestLoggingMiddleware)

    @app.exception_handler(StarletteHTTPException)
    async def not_found_for_wrong_method(request: Request, exc: StarletteHTTPException):
        # Only GET / and POST <webhook_path> exist; anything else is not found
        if exc.status_code == 405:
            exc = StarletteHTTPException(status_code=404)
        return await http_exception_handler(request, exc)

    @app.get("/", response_class=PlainTextResponse)
    async def root() -> str:
        """Root endpoint."""
        return GREETING

    if settings.bot_name:
        app.include_router(build_router(settings.webhook_path))
    else:
        logger.warning("No github username configured, webhook route disabled")

    return app
