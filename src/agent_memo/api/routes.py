"""
Memo API Routes.

Endpoints:
    GET    /health           - Liveness and service info
    GET    /voices           - Available voices
    POST   /memo             - Create a memo (201)
    GET    /memo/{memo_id}   - Fetch a memo by id
    GET    /memos            - Newest-first listing (?limit=&offset=)
    DELETE /memo/{memo_id}   - Delete a memo and its audio
    GET    /audio/{filename} - Raw audio (audio/mpeg)
    GET    /metrics          - Prometheus metrics

Error Handling:
    Every failure is a JSON body of the form
    {
        "ok": false,
        "error": "<ERROR_CODE>",
        "message": "<human readable message>",
        "details": {...}
    }
    with the HTTP status taken from core.errors.HTTP_STATUS:
        INVALID_INPUT, UNKNOWN_VOICE -> 400
        NOT_FOUND -> 404
        UNSUPPORTED -> 501 (cache backend: get/list/delete memo)
        provider, store and config failures -> 500

Each request carries an X-Request-Id header (see main.py) that also
tags every log line written while handling it.

Example Usage:
    curl -X POST http://localhost:3000/memo \\
        -H "Content-Type: application/json" \\
        -d '{"text": "Build finished", "voice": "june"}'
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse

from agent_memo.api.dependencies import get_memo_service
from agent_memo.api.schemas import (
    DeleteResponse,
    ErrorResponse,
    HealthResponse,
    MemoListResponse,
    MemoOut,
    MemoRequest,
    VoicesResponse,
)
from agent_memo.core.errors import ErrorCode, MemoError
from agent_memo.core.logging import fail, get_logger, get_request_id
from agent_memo.core.metrics import metrics
from agent_memo.services.memo_service import MemoService

router = APIRouter()

_LOG = get_logger("agent-memo.api")

_ERRORS = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
    501: {"model": ErrorResponse},
}


def _error_response(error: MemoError) -> JSONResponse:
    return JSONResponse(status_code=error.http_status, content=error.to_dict())


def _internal_error(exc: Exception) -> JSONResponse:
    # Log the detail, do not expose it.
    fail(_LOG, "unhandled_error", error=str(exc), error_type=type(exc).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "ok": False,
            "error": ErrorCode.INTERNAL_ERROR,
            "message": "Internal server error",
            "details": {"requestId": get_request_id()},
        },
    )


@router.get("/health", response_model=HealthResponse)
def health(service: MemoService = Depends(get_memo_service)):
    """Service name, version, TTS mode and storage backend details."""
    return service.health_info()


@router.get("/voices", response_model=VoicesResponse)
def voices(service: MemoService = Depends(get_memo_service)):
    return {"voices": service.available_voices()}


@router.post("/memo", status_code=201, response_model=MemoOut, responses=_ERRORS)
async def create_memo(
    req: MemoRequest,
    service: MemoService = Depends(get_memo_service),
):
    """
    Convert text to speech and return the memo.

    Raises:
        400: Blank or oversized text, unknown voice
        500: Provider, credential, voice mapping, store or config failure
    """
    try:
        memo = await service.create_memo(req.text, req.voice)
        return memo.to_dict()
    except MemoError as e:
        return _error_response(e)
    except Exception as e:
        return _internal_error(e)


@router.get("/memo/{memo_id}", response_model=MemoOut, responses=_ERRORS)
def get_memo(memo_id: str, service: MemoService = Depends(get_memo_service)):
    try:
        return service.get_memo(memo_id).to_dict()
    except MemoError as e:
        return _error_response(e)
    except Exception as e:
        return _internal_error(e)


@router.get("/memos", response_model=MemoListResponse, responses=_ERRORS)
def list_memos(
    limit: Optional[str] = None,
    offset: Optional[str] = None,
    service: MemoService = Depends(get_memo_service),
):
    """
    Newest-first page of memos.

    ``limit`` defaults to 20 (max 100) and ``offset`` to 0. Values are
    parsed by the service so that bad input gets the usual error body.
    """
    try:
        return service.list_memos(limit, offset).to_dict()
    except MemoError as e:
        return _error_response(e)
    except Exception as e:
        return _internal_error(e)


@router.delete("/memo/{memo_id}", response_model=DeleteResponse, responses=_ERRORS)
async def delete_memo(memo_id: str, service: MemoService = Depends(get_memo_service)):
    try:
        await service.delete_memo(memo_id)
        return {"message": "Memo deleted", "memoId": memo_id}
    except MemoError as e:
        return _error_response(e)
    except Exception as e:
        return _internal_error(e)


@router.get("/audio/{filename}", response_class=Response, responses=_ERRORS)
async def get_audio(filename: str, service: MemoService = Depends(get_memo_service)):
    """
    Serve stored audio.

    Unknown, expired and malformed filenames are all 404.
    """
    try:
        artifact = await service.get_audio(filename)
        return Response(content=artifact.data, media_type=artifact.media_type, headers=artifact.headers)
    except MemoError as e:
        return _error_response(e)
    except Exception as e:
        return _internal_error(e)


@router.get("/metrics")
def prometheus_metrics():
    """Prometheus text exposition of the memo_* metrics."""
    content, content_type = metrics.get_metrics_response()
    return Response(content=content, media_type=content_type)
