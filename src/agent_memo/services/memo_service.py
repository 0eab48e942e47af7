"""
Memo Service - Text-to-speech memo orchestration.

This module provides the MemoService class, which ties together:
    - VoiceRegistry: resolves the requested voice key
    - TTS provider: produces the audio (selected by tts.mode)
    - Artifact store: keeps the audio and hands out its URL

Memo Creation Flow:
    1. Validate text and voice type           -> InvalidInputError
    2. Resolve the voice key                  -> UnknownVoiceError
    3. Synthesize through the provider        -> provider errors, unchanged
    4. Store the audio as memo_<id>.mp3       -> StoreError
    5. Index the Memo (durable backend only) and return it

Nothing is written before step 3 succeeds, and the memo is indexed
only after its audio is stored, so a failed request leaves no trace.

Usage:
    from agent_memo.core.config import Settings
    from agent_memo.services.memo_service import MemoService

    service = MemoService(Settings(raw={}))
    memo = await service.create_memo("Build finished!", "june")
    print(memo.audio.url)

See Also:
    - tts/provider.py: Provider factory and TTS modes
    - tts/store.py: Artifact store interface
    - api/routes.py: HTTP endpoints calling into this service
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from agent_memo import __version__
from agent_memo.core.config import MemoServiceConfig, Settings
from agent_memo.core.errors import (
    ConfigurationError,
    ErrorCode,
    MemoError,
    NotFoundError,
    UnknownVoiceError,
)
from agent_memo.core.logging import debug, fail, get_logger, info, success, verbose
from agent_memo.core.metrics import metrics
from agent_memo.services.validators import validate_pagination, validate_text, validate_voice_key
from agent_memo.tts.provider import BaseTTSProvider, create_provider, resolve_tts_mode
from agent_memo.tts.store import AudioArtifact, BaseArtifactStore, audio_filename, create_store
from agent_memo.tts.voices import Voice, VoiceRegistry
from agent_memo.utils.text import preview
from agent_memo.utils.timeit import timeit

_LOG = get_logger("agent-memo.service")

SERVICE_NAME = "Agent Memo"
AUDIO_FORMAT = "mp3"


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# =============================================================================
# Memo Records
# =============================================================================

@dataclass(frozen=True)
class MemoVoice:
    """Snapshot of the voice a memo was created with."""
    key: str
    display_name: str

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.key, "name": self.display_name}


@dataclass(frozen=True)
class MemoAudio:
    """Where a memo's audio lives and how large it is."""
    filename: str
    url: str
    byte_length: int
    format: str = AUDIO_FORMAT

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filename": self.filename,
            "url": self.url,
            "length": self.byte_length,
            "format": self.format,
        }


@dataclass(frozen=True)
class Memo:
    """
    A single text-to-audio conversion result. Never mutated.

    Attributes:
        id: Random UUID, shared with the audio filename.
        text: The original input text.
        voice: Voice snapshot at creation time.
        audio: Audio location and size.
        created_at: ISO-8601 UTC timestamp.
    """
    id: str
    text: str
    voice: MemoVoice
    audio: MemoAudio
    created_at: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "voice": self.voice.to_dict(),
            "audio": self.audio.to_dict(),
            "createdAt": self.created_at,
        }


@dataclass
class MemoPage:
    """One page of the newest-first memo listing."""
    memos: List[Memo]
    total: int
    limit: int
    offset: int

    @property
    def has_more(self) -> bool:
        return self.offset + self.limit < self.total

    def to_dict(self) -> Dict[str, Any]:
        return {
            "memos": [m.to_dict() for m in self.memos],
            "pagination": {
                "total": self.total,
                "limit": self.limit,
                "offset": self.offset,
                "hasMore": self.has_more,
            },
        }


# =============================================================================
# Main Service Class
# =============================================================================

class MemoService:
    """
    Memo orchestrator.

    Collaborators are created from settings unless passed in; tests
    inject a provider built on a mock transport or a store pointed at a
    temporary directory.

    The provider is created on first use, so an unknown TTS mode does
    not prevent the service from starting: /health and /voices keep
    working and memo creation fails with CONFIG_ERROR.
    """

    def __init__(
        self,
        settings: Settings,
        registry: Optional[VoiceRegistry] = None,
        store: Optional[BaseArtifactStore] = None,
        provider: Optional[BaseTTSProvider] = None,
    ):
        self._settings = settings
        self._config: MemoServiceConfig = settings.get_service_config()
        self._registry = registry or VoiceRegistry.from_settings(settings)
        self._store = store or create_store(settings, self._config)
        self._provider = provider
        self._text_preview_chars = self._config.logging.text_preview_chars

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def config(self) -> MemoServiceConfig:
        return self._config

    @property
    def registry(self) -> VoiceRegistry:
        return self._registry

    @property
    def store(self) -> BaseArtifactStore:
        return self._store

    @property
    def tts_mode(self) -> str:
        """Canonical TTS mode, or the configured value if it is not recognized."""
        try:
            return resolve_tts_mode(self._config.tts.mode)
        except ConfigurationError:
            return self._config.tts.mode

    @property
    def provider(self) -> BaseTTSProvider:
        """
        The TTS provider, created on first access.

        Raises:
            ConfigurationError: If the configured TTS mode is unknown.
        """
        if self._provider is None:
            self._provider = create_provider(self._settings, self._config)
        return self._provider

    # =========================================================================
    # Voices
    # =========================================================================

    def available_voices(self) -> List[Dict[str, str]]:
        return self._registry.describe()

    def resolve_voice(self, voice_key: Any) -> Voice:
        """
        Raises:
            InvalidInputError: If voice_key is not a string.
            UnknownVoiceError: If it does not name a registered voice.
        """
        validate_voice_key(voice_key)
        voice = self._registry.resolve(voice_key)
        if voice is None:
            raise UnknownVoiceError(voice_key, self._registry.describe())
        return voice

    # =========================================================================
    # Public API: create_memo()
    # =========================================================================

    async def create_memo(self, text: Any, voice_key: Any) -> Memo:
        """
        Convert text to audio and record it as a Memo.

        Args:
            text: Memo text (non-blank string, bounded length).
            voice_key: Voice key, case-insensitive.

        Returns:
            The created Memo.

        Raises:
            InvalidInputError, UnknownVoiceError: Rejected request.
            MissingCredentialsError, MissingVoiceMappingError,
            ProviderError, ConfigurationError: Provider failures.
            StoreError: The audio could not be stored.
            MemoError: INTERNAL_ERROR for anything unexpected.
        """
        mode = self.tts_mode

        with timeit("request_total") as total_t:
            try:
                text = validate_text(text, self._config.memo.max_text_chars)
                voice = self.resolve_voice(voice_key)

                info(_LOG, "memo_requested", voice=voice.key, mode=mode, chars=len(text),
                     text_preview=preview(text, self._text_preview_chars))

                result = await self.provider.synthesize(text, voice)
                audio = result.audio_bytes
                verbose(_LOG, "stage", event="synthesize",
                        seconds=round(result.timings_s.get("synthesize", 0.0), 4))

                memo_id = str(uuid.uuid4())
                filename = audio_filename(memo_id)
                with timeit("store") as t_store:
                    url = await self._store.put(filename, audio)
                verbose(_LOG, "stage", event="store", seconds=round(t_store.timing.seconds, 4))

                memo = Memo(
                    id=memo_id,
                    text=text,
                    voice=MemoVoice(key=voice.key, display_name=voice.display_name),
                    audio=MemoAudio(filename=filename, url=url, byte_length=len(audio)),
                    created_at=_utc_now_iso(),
                )
                self._store.index(memo)
            except MemoError as e:
                self._record_failure(mode, e.code, total_t.seconds)
                if e.code not in (ErrorCode.INVALID_INPUT, ErrorCode.UNKNOWN_VOICE):
                    fail(_LOG, "memo_failed", mode=mode, error=e.code, message=e.message)
                raise
            except Exception as e:
                self._record_failure(mode, ErrorCode.INTERNAL_ERROR, total_t.seconds)
                fail(_LOG, "memo_failed", mode=mode, error=str(e), error_type=type(e).__name__)
                raise MemoError(
                    f"Unexpected error: {e}",
                    ErrorCode.INTERNAL_ERROR,
                    {"error_type": type(e).__name__},
                ) from e

        total_s = total_t.timing.seconds
        metrics.record_request(mode=mode, status="success", duration=total_s, audio_bytes=len(audio))
        metrics.set_index_size(self._store.size())
        success(_LOG, "memo_created", memo_id=memo.id, voice=voice.key, bytes=len(audio),
                seconds=round(total_s, 3))
        return memo

    def _record_failure(self, mode: str, code: str, duration: float) -> None:
        metrics.record_request(mode=mode, status="error", duration=duration)
        metrics.record_error(mode=mode, code=code)

    # =========================================================================
    # Public API: memo index
    # =========================================================================

    def get_memo(self, memo_id: str) -> Memo:
        """
        Raises:
            UnsupportedError: The store keeps no memo index.
            NotFoundError: Unknown memo id.
        """
        memo = self._store.get(memo_id)
        if memo is None:
            raise NotFoundError("Memo not found", {"memoId": memo_id})
        return memo

    def list_memos(self, limit: Any = None, offset: Any = None) -> MemoPage:
        """
        Newest-first page of memos.

        Raises:
            UnsupportedError: The store keeps no memo index.
            InvalidInputError: Bad limit or offset.
        """
        # Stores without an index report UNSUPPORTED whatever the paging input.
        if self._store.supports_index:
            limit, offset = validate_pagination(
                limit, offset,
                default_limit=self._config.memo.default_page_size,
                max_limit=self._config.memo.max_page_size,
            )
        memos, total = self._store.list(limit, offset)
        debug(_LOG, "listed", returned=len(memos), total=total, limit=limit, offset=offset)
        return MemoPage(memos=memos, total=total, limit=limit, offset=offset)

    async def delete_memo(self, memo_id: str) -> None:
        """
        Delete a memo and its audio file.

        Raises:
            UnsupportedError: The store keeps no memo index.
            NotFoundError: Unknown memo id (also on a repeated delete).
        """
        deleted = await self._store.delete(memo_id)
        if not deleted:
            raise NotFoundError("Memo not found", {"memoId": memo_id})
        metrics.set_index_size(self._store.size())
        info(_LOG, "memo_deleted", memo_id=memo_id)

    # =========================================================================
    # Public API: audio
    # =========================================================================

    async def get_audio(self, filename: str) -> AudioArtifact:
        """
        Raises:
            NotFoundError: Unknown, expired, or malformed filename.
            StoreError: The backend failed to read existing audio.
        """
        artifact = await self._store.get_audio(filename)
        if artifact is None:
            metrics.record_audio_fetch("miss")
            raise NotFoundError("Audio not found or expired", {"filename": filename})
        metrics.record_audio_fetch("hit")
        return artifact

    # =========================================================================
    # Health and lifecycle
    # =========================================================================

    def health_info(self) -> Dict[str, Any]:
        return {
            "status": "ok",
            "service": SERVICE_NAME,
            "version": __version__,
            "timestamp": _utc_now_iso(),
            "ttsMode": self.tts_mode,
            "storage": self._store.storage_info(),
        }

    async def aclose(self) -> None:
        if self._provider is not None:
            await self._provider.aclose()
