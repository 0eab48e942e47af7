"""
Error taxonomy for agent-memo.

Every failure the service reports is a MemoError carrying a machine
readable code from ErrorCode. The API layer turns the code into an
HTTP status via HTTP_STATUS and the exception into a body via to_dict():

    {"ok": false, "error": "UNKNOWN_VOICE", "message": "Invalid voice",
     "details": {"requestedVoice": "zed", "availableVoices": [...]}}

Nothing in the service retries on these errors.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional


class ErrorCode:
    """Error codes returned in the ``error`` field of failure responses."""
    INVALID_INPUT = "INVALID_INPUT"                     # Malformed request
    UNKNOWN_VOICE = "UNKNOWN_VOICE"                     # Voice key not in registry
    MISSING_CREDENTIALS = "MISSING_CREDENTIALS"         # Paid provider without API key
    MISSING_VOICE_MAPPING = "MISSING_VOICE_MAPPING"     # Voice has no id for this provider
    PROVIDER_ERROR = "PROVIDER_ERROR"                   # Upstream TTS failure
    STORE_ERROR = "STORE_ERROR"                         # Artifact backend failure
    NOT_FOUND = "NOT_FOUND"                             # Unknown memo or audio key
    UNSUPPORTED = "UNSUPPORTED"                         # Not offered by this storage backend
    CONFIG_ERROR = "CONFIG_ERROR"                       # Unusable configuration
    INTERNAL_ERROR = "INTERNAL_ERROR"                   # Unexpected error


HTTP_STATUS: Dict[str, int] = {
    ErrorCode.INVALID_INPUT: 400,
    ErrorCode.UNKNOWN_VOICE: 400,
    ErrorCode.MISSING_CREDENTIALS: 500,
    ErrorCode.MISSING_VOICE_MAPPING: 500,
    ErrorCode.PROVIDER_ERROR: 500,
    ErrorCode.STORE_ERROR: 500,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.UNSUPPORTED: 501,
    ErrorCode.CONFIG_ERROR: 500,
    ErrorCode.INTERNAL_ERROR: 500,
}


class MemoError(Exception):
    """
    Base exception for memo service errors.

    Attributes:
        message: Human-readable error message.
        code: Error code from ErrorCode.
        details: Optional dictionary with additional context.
    """
    def __init__(self, message: str, code: str = ErrorCode.INTERNAL_ERROR, details: Optional[Dict] = None):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)

    @property
    def http_status(self) -> int:
        return HTTP_STATUS.get(self.code, 500)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the structured error body used by the API."""
        result: Dict[str, Any] = {
            "ok": False,
            "error": self.code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


class InvalidInputError(MemoError):
    """Raised when a request is malformed (bad text, non-string voice, bad paging)."""
    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, ErrorCode.INVALID_INPUT, details)


class UnknownVoiceError(MemoError):
    """
    Raised when a voice key does not resolve.

    ``available`` is the registry's ``describe()`` output, so the error
    lists the same voices as GET /voices.
    """
    def __init__(self, requested: str, available: List[Dict[str, str]]):
        super().__init__(
            "Invalid voice",
            ErrorCode.UNKNOWN_VOICE,
            {"requestedVoice": requested, "availableVoices": list(available)},
        )
        self.requested = requested
        self.available = list(available)


class MissingCredentialsError(MemoError):
    """Raised before any network call when the paid provider has no API key."""
    def __init__(self, message: str = "ElevenLabs API key not configured", details: Optional[Dict] = None):
        super().__init__(message, ErrorCode.MISSING_CREDENTIALS, details)


class MissingVoiceMappingError(MemoError):
    """Raised when the selected voice has no identifier for the active provider."""
    def __init__(self, voice_key: str, provider: str):
        super().__init__(
            f"Voice {voice_key!r} has no mapping for the {provider} provider",
            ErrorCode.MISSING_VOICE_MAPPING,
            {"voice": voice_key, "provider": provider},
        )


class ProviderError(MemoError):
    """
    Raised when the upstream TTS call fails.

    ``status`` is the upstream HTTP status, or None for transport
    failures (connection refused, timeout).
    """
    def __init__(self, provider: str, status: Optional[int], body: str, message: Optional[str] = None):
        if message is None:
            message = f"{provider} TTS failed with status {status}" if status is not None else f"{provider} TTS request failed"
        super().__init__(
            message,
            ErrorCode.PROVIDER_ERROR,
            {"provider": provider, "status": status, "body": body},
        )
        self.provider = provider
        self.status = status
        self.body = body


class StoreError(MemoError):
    """Raised when writing or reading an audio artifact fails."""
    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, ErrorCode.STORE_ERROR, details)


class NotFoundError(MemoError):
    """Raised for an unknown memo id or an absent/expired audio file."""
    def __init__(self, message: str = "Not found", details: Optional[Dict] = None):
        super().__init__(message, ErrorCode.NOT_FOUND, details)


class UnsupportedError(MemoError):
    """Raised by stores that cannot offer an operation in this deployment."""
    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message, ErrorCode.UNSUPPORTED, {"hint": hint} if hint else None)
        self.hint = hint


class ConfigurationError(MemoError):
    """Raised when configuration is unusable, e.g. an unrecognized TTS mode."""
    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, ErrorCode.CONFIG_ERROR, details)


__all__ = [
    "ErrorCode",
    "HTTP_STATUS",
    "MemoError",
    "InvalidInputError",
    "UnknownVoiceError",
    "MissingCredentialsError",
    "MissingVoiceMappingError",
    "ProviderError",
    "StoreError",
    "NotFoundError",
    "UnsupportedError",
    "ConfigurationError",
]
