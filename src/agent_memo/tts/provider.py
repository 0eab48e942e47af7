"""
TTS Provider Base Class and Factory.

This module provides:
    - BaseTTSProvider: Capability interface shared by all providers
    - SynthResult: Synthesis result container
    - resolve_tts_mode(): Canonical mode name for a configured value
    - create_provider(): Factory selecting a provider from settings

TTS Modes:
    The mode is read from TTS_MODE or settings ``tts.mode``:
        - simulation: Silent mock audio after an artificial delay
        - free-streaming: Microsoft Edge read-aloud (alias: edge)
        - paid-api: ElevenLabs (alias: elevenlabs)

    Any other value raises ConfigurationError from create_provider(),
    which the memo service calls on first use rather than at startup.

Implementing a New Provider:
    1. Create providers/<name>.py
    2. Inherit from BaseTTSProvider
    3. Implement async synthesize()
    4. Register the mode in _create_provider()
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

import httpx

from agent_memo.core.config import MemoServiceConfig, Settings
from agent_memo.core.errors import ConfigurationError
from agent_memo.core.logging import get_logger, info
from agent_memo.tts.voices import Voice

_LOG = get_logger("agent-memo.provider")

SIMULATION = "simulation"
FREE_STREAMING = "free-streaming"
PAID_API = "paid-api"

TTS_MODES = (SIMULATION, FREE_STREAMING, PAID_API)

_MODE_ALIASES = {
    "simulation": SIMULATION,
    "mock": SIMULATION,
    "free-streaming": FREE_STREAMING,
    "edge": FREE_STREAMING,
    "paid-api": PAID_API,
    "elevenlabs": PAID_API,
}


@dataclass
class SynthResult:
    """
    Result of a synthesis call.

    Attributes:
        audio_bytes: Encoded audio, never validated as well-formed.
        media_type: Always "audio/mpeg" for the built-in providers.
        timings_s: Per-stage timing breakdown in seconds.
    """
    audio_bytes: bytes
    media_type: str = "audio/mpeg"
    timings_s: Dict[str, float] = field(default_factory=dict)


class BaseTTSProvider:
    """
    Base class for TTS providers.

    Subclasses implement ``synthesize(text, voice)``. A provider makes
    exactly one attempt per call: failures surface to the caller as
    MemoError subclasses and are never retried here.

    Attributes:
        name: Canonical TTS mode served by this provider.
    """
    name: str = "base"

    def __init__(self, config: MemoServiceConfig):
        self.config = config
        self.logger = get_logger(f"agent-memo.provider.{self.name}")

    async def synthesize(self, text: str, voice: Voice) -> SynthResult:
        """
        Produce audio for text in the given voice.

        Raises:
            MissingCredentialsError: Provider is not configured.
            MissingVoiceMappingError: Voice has no id for this provider.
            ProviderError: Upstream call failed.
        """
        raise NotImplementedError

    async def aclose(self) -> None:
        """Release network resources. Safe to call more than once."""
        return None


class HttpTTSProvider(BaseTTSProvider):
    """
    Base for providers that call an upstream HTTP API.

    An ``httpx.AsyncClient`` may be injected (tests pass one built on
    ``httpx.MockTransport``); otherwise one is created lazily and owned
    by the provider.
    """

    def __init__(self, config: MemoServiceConfig, client: Optional[httpx.AsyncClient] = None):
        super().__init__(config)
        self._client = client
        self._owns_client = client is None

    @property
    def timeout(self) -> Optional[float]:
        t = self.config.tts.request_timeout_s
        return t if t > 0 else None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None


def resolve_tts_mode(value: str) -> str:
    """
    Map a configured mode (or alias) to its canonical name.

    Raises:
        ConfigurationError: If the mode is not recognized.
    """
    mode = _MODE_ALIASES.get(str(value).strip().lower())
    if mode is None:
        raise ConfigurationError(
            f"Unknown TTS mode: {value}",
            details={"mode": value, "supported": list(TTS_MODES)},
        )
    return mode


def _create_provider(mode: str, config: MemoServiceConfig) -> BaseTTSProvider:
    if mode == SIMULATION:
        from agent_memo.tts.providers.simulation import SimulationProvider
        return SimulationProvider(config)

    if mode == FREE_STREAMING:
        from agent_memo.tts.providers.edge import EdgeProvider
        return EdgeProvider(config)

    if mode == PAID_API:
        from agent_memo.tts.providers.elevenlabs import ElevenLabsProvider
        return ElevenLabsProvider(config)

    raise ConfigurationError(f"Unknown TTS mode: {mode}")


def create_provider(settings: Settings, config: Optional[MemoServiceConfig] = None) -> BaseTTSProvider:
    """
    Create the provider for the configured TTS mode.

    Args:
        settings: Application settings.
        config: Pre-validated config, built from settings if omitted.

    Raises:
        ConfigurationError: If the TTS mode is not recognized.
    """
    config = config or settings.get_service_config()
    mode = resolve_tts_mode(config.tts.mode)
    provider = _create_provider(mode, config)
    info(_LOG, "provider_ready", mode=mode)
    return provider
