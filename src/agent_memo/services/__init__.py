"""
agent-memo Services Layer.

Business logic between the API and the TTS/storage layers.

Components:
    - memo_service.py: MemoService (memo orchestrator) and Memo records
    - validators.py: Input validation functions

Errors are defined in agent_memo.core.errors and re-exported here.
"""
from agent_memo.core.errors import (
    ConfigurationError,
    ErrorCode,
    InvalidInputError,
    MemoError,
    MissingCredentialsError,
    MissingVoiceMappingError,
    NotFoundError,
    ProviderError,
    StoreError,
    UnknownVoiceError,
    UnsupportedError,
)
from .memo_service import Memo, MemoAudio, MemoPage, MemoService, MemoVoice

__all__ = [
    "MemoService",
    "Memo",
    "MemoAudio",
    "MemoVoice",
    "MemoPage",
    "ErrorCode",
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
