"""
Input Validation for the memo service.

Validation runs before any provider call, so a rejected request never
touches the upstream provider or the artifact store.

Validation Rules:
    - text: Required string, not blank, at most memo.max_text_chars (5000)
    - voice: Required string (resolution against the registry happens
      in the service)
    - limit: Integer in [1, memo.max_page_size], default memo.default_page_size
    - offset: Integer >= 0, default 0

All functions raise InvalidInputError, which the API maps to 400.

Usage:
    from agent_memo.services.validators import validate_text, validate_voice_key

    text = validate_text(payload.get("text"), max_length=5000)
    voice = validate_voice_key(payload.get("voice"))
"""
from __future__ import annotations

from typing import Any, Tuple

from agent_memo.core.config import Defaults
from agent_memo.core.errors import InvalidInputError


def validate_text(text: Any, max_length: int = Defaults.MEMO_MAX_TEXT_CHARS) -> str:
    """
    Validate memo text.

    The text is returned unchanged; whitespace is only considered when
    deciding whether it is blank.

    Raises:
        InvalidInputError: If text is missing, not a string, blank, or too long.
    """
    if not isinstance(text, str):
        raise InvalidInputError("Text is required and must be a string", {"field": "text"})

    if not text.strip():
        raise InvalidInputError("Text must not be empty", {"field": "text"})

    if len(text) > max_length:
        raise InvalidInputError(
            f"Text exceeds maximum length ({len(text)} > {max_length})",
            {"field": "text", "length": len(text), "maxLength": max_length},
        )

    return text


def validate_voice_key(voice: Any) -> str:
    """
    Validate the voice parameter's type.

    Raises:
        InvalidInputError: If voice is missing or not a string.
    """
    if not isinstance(voice, str) or not voice:
        raise InvalidInputError("Voice is required and must be a string", {"field": "voice"})
    return voice


def _as_int(value: Any, name: str, default: int) -> int:
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        raise InvalidInputError(f"{name} must be an integer", {"field": name})
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise InvalidInputError(f"{name} must be an integer", {"field": name})


def validate_pagination(
    limit: Any,
    offset: Any,
    default_limit: int = Defaults.MEMO_DEFAULT_PAGE_SIZE,
    max_limit: int = Defaults.MEMO_MAX_PAGE_SIZE,
) -> Tuple[int, int]:
    """
    Validate listing parameters.

    Accepts ints or query-string values. Missing values fall back to
    default_limit and 0.

    Returns:
        (limit, offset) as ints.

    Raises:
        InvalidInputError: If either is not an integer or is out of range.
    """
    limit = _as_int(limit, "limit", default_limit)
    offset = _as_int(offset, "offset", 0)

    if not (1 <= limit <= max_limit):
        raise InvalidInputError(
            f"limit must be between 1 and {max_limit}, got {limit}",
            {"field": "limit"},
        )
    if offset < 0:
        raise InvalidInputError(f"offset must be >= 0, got {offset}", {"field": "offset"})

    return limit, offset
