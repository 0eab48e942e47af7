"""
FastAPI Dependency Providers.

    get_settings()      Settings loaded once per process
    get_memo_service()  The MemoService owned by the running app

The service lives on ``app.state.memo_service`` (set by create_app),
so each app instance, including those built in tests, has its own
store and provider.

Usage in Route Handlers:
    @router.get("/voices")
    def voices(service: MemoService = Depends(get_memo_service)):
        return {"voices": service.available_voices()}
"""
from __future__ import annotations

from functools import lru_cache

from fastapi import Request

from agent_memo.core.config import Settings, resolve_settings
from agent_memo.services.memo_service import MemoService


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Load and cache application settings.

    Reads the YAML file named by AGENT_MEMO_SETTINGS (default
    config/settings.yaml). A missing file is not an error: defaults
    plus environment overrides are used instead.
    """
    return resolve_settings()


def get_memo_service(request: Request) -> MemoService:
    """Return the MemoService attached to the application."""
    return request.app.state.memo_service
