"""
FastAPI dependencies exposing the objects created at startup.

Routes receive the settings and dispatch queue through these functions
rather than through module globals, so tests can swap them with
``app.dependency_overrides``.
"""

from fastapi import Request

from fxabot.config import Settings
from fxabot.services.dispatch_queue import DispatchQueue


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_queue(request: Request) -> DispatchQueue:
    return request.app.state.queue
