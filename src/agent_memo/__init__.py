"""
agent-memo: Text-to-Speech Memo Microservice.

Converts short agent messages into spoken audio by delegating to one of
several interchangeable text-to-speech providers, then stores the audio
and serves it back by URL.

Supported TTS Modes:
    - simulation: Mock audio with artificial latency, no network access
    - free-streaming: Microsoft Edge read-aloud service (no API key)
    - paid-api: ElevenLabs text-to-speech API (API key required)

Storage Backends:
    - directory: Audio files on disk plus an in-memory memo index
    - cache: Time-boxed in-memory cache (10 minutes), no memo index

Example Usage:
    >>> from agent_memo.core.config import Settings
    >>> from agent_memo.services import MemoService
    >>>
    >>> settings = Settings(raw={"tts": {"mode": "simulation"}})
    >>> service = MemoService(settings)
    >>> memo = await service.create_memo("Build finished!", "june")
    >>> print(memo.audio.url)
"""

__version__ = "1.1.0"
__all__ = ["__version__"]
