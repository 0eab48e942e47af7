"""
API Request/Response Schemas.

Pydantic models for the memo API. Wire names are camelCase
(``createdAt``, ``ttsMode``, ``hasMore``); Python attributes are
snake_case with aliases.

Example Request:
    POST /memo
    {"text": "Deploy finished with 0 errors", "voice": "june"}

Example Response (201):
    {
        "id": "4f1c2d9e-...",
        "text": "Deploy finished with 0 errors",
        "voice": {"id": "june", "name": "June"},
        "audio": {
            "filename": "memo_4f1c2d9e-....mp3",
            "url": "http://localhost:3000/audio/memo_4f1c2d9e-....mp3",
            "length": 7818,
            "format": "mp3"
        },
        "createdAt": "2026-01-15T14:30:05.123Z"
    }
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class MemoRequest(BaseModel):
    """
    Memo creation request.

    Both fields must be JSON strings. Emptiness, length and voice
    validity are checked by the service so that every rejection uses
    the same error shape.
    """
    text: StrictStr = Field(..., description="Text to speak")
    voice: StrictStr = Field(..., description="Voice key, e.g. 'june' (case-insensitive)")


class VoiceOut(_WireModel):
    id: str
    name: str
    gender: str


class VoicesResponse(_WireModel):
    voices: List[VoiceOut]


class MemoVoiceOut(_WireModel):
    id: str
    name: str


class MemoAudioOut(_WireModel):
    filename: str
    url: str
    length: int = Field(..., description="Audio size in bytes")
    format: str = "mp3"


class MemoOut(_WireModel):
    id: str
    text: str
    voice: MemoVoiceOut
    audio: MemoAudioOut
    created_at: str = Field(..., alias="createdAt")


class PaginationOut(_WireModel):
    total: int
    limit: int
    offset: int
    has_more: bool = Field(..., alias="hasMore")


class MemoListResponse(_WireModel):
    memos: List[MemoOut]
    pagination: PaginationOut


class DeleteResponse(_WireModel):
    message: str
    memo_id: str = Field(..., alias="memoId")


class HealthResponse(_WireModel):
    status: str
    service: str
    version: str
    timestamp: str
    tts_mode: str = Field(..., alias="ttsMode")
    storage: Dict[str, Any]


class ErrorResponse(_WireModel):
    ok: bool = False
    error: str
    message: str
    details: Optional[Dict[str, Any]] = None
