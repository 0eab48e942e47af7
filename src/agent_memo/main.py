"""
FastAPI Application Entry Point.

Creates the agent-memo FastAPI application: routes, CORS, structured
error handlers, request id tagging, and the startup/shutdown lifespan.

Usage:
    # Run with uvicorn
    uvicorn agent_memo.main:app --host 0.0.0.0 --port 3000

    # Or through the CLI
    agent-memo --serve --port 3000
"""

from __future__ import annotations

import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from agent_memo import __version__
from agent_memo.api.dependencies import get_settings
from agent_memo.api.routes import router
from agent_memo.core.config import Settings
from agent_memo.core.errors import ErrorCode
from agent_memo.core.logging import configure_logging, get_logger, info, set_request_id
from agent_memo.services.memo_service import MemoService

_LOG = get_logger("agent-memo.main")


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"loc": [str(part) for part in err.get("loc", ())], "msg": str(err.get("msg", ""))}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={
            "ok": False,
            "error": ErrorCode.INVALID_INPUT,
            "message": "Invalid request: text and voice are required strings",
            "details": {"errors": errors},
        },
    )


async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        code, message = ErrorCode.NOT_FOUND, "Not found"
    elif exc.status_code >= 500:
        code, message = ErrorCode.INTERNAL_ERROR, str(exc.detail)
    else:
        code, message = ErrorCode.INVALID_INPUT, str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"ok": False, "error": code, "message": message},
        headers=getattr(exc, "headers", None),
    )


def create_app(settings: Optional[Settings] = None, service: Optional[MemoService] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Settings to build the service from. Defaults to
            get_settings() (settings file plus environment).
        service: A prebuilt MemoService, mainly for tests.

    Returns:
        FastAPI: Configured application instance.
    """
    configure_logging()

    if service is None:
        service = MemoService(settings or get_settings())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        cfg = service.config
        info(_LOG, "startup", version=__version__, mode=service.tts_mode,
             storage=service.store.name, base_url=cfg.server.base_url,
             voices=",".join(service.registry.keys()))
        yield
        await service.aclose()
        info(_LOG, "shutdown")

    app = FastAPI(title="agent-memo", version=__version__, lifespan=lifespan)
    app.state.memo_service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        expose_headers=["X-Request-Id"],
    )

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        rid = str(uuid.uuid4())[:12]
        set_request_id(rid)
        response = await call_next(request)
        response.headers["X-Request-Id"] = rid
        return response

    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)

    app.include_router(router)

    return app


# Global application instance for ASGI servers (uvicorn, gunicorn, etc.)
app = create_app()
