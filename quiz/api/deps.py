from __future__ import annotations

from fastapi import Request

from quiz.config import Settings
from quiz.core.context import AppContext


def get_context(request: Request) -> AppContext:
    ctx = getattr(request.app.state, "context", None)
    if ctx is None:
        raise RuntimeError("Application context not initialized. Is the startup hook registered?")
    return ctx


def get_settings(request: Request) -> Settings:
    settings = getattr(request.app.state, "settings", None)
    if settings is None:
        raise RuntimeError("Settings not initialized. Is the startup hook registered?")
    return settings
