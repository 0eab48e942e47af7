"""
Artifact Store Base Class and Factory.

An artifact store owns generated audio bytes and the URLs they are
served from. Two backends exist, chosen once per deployment by
``storage.backend``:

    directory   DirectoryArtifactStore (storage.py)
                Files on disk plus an in-memory memo index. Supports
                get/list/delete of memo metadata.

    cache       CacheArtifactStore (cache.py)
                Audio held in a TTL cache keyed by its URL. There is
                no memo index: get/list/delete raise UnsupportedError.

Callers check ``supports_index`` (or catch UnsupportedError); the
orchestrator never branches on the concrete store type.

Audio filenames always have the form ``memo_<id>.mp3``. Anything
else is treated as not found by get_audio().
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

from agent_memo.core.config import MemoServiceConfig, Settings
from agent_memo.core.errors import UnsupportedError
from agent_memo.core.logging import get_logger, info

if TYPE_CHECKING:
    from agent_memo.services.memo_service import Memo

_LOG = get_logger("agent-memo.store")

AUDIO_MEDIA_TYPE = "audio/mpeg"

_FILENAME_RE = re.compile(r"^memo_[A-Za-z0-9-]{1,64}\.mp3$")

HINT_GET = "Use the audio URL from the memo creation response"
HINT_LIST = "Audio files are cached for 10 minutes, not persisted"
HINT_DELETE = "Audio files expire automatically after 10 minutes"


def audio_filename(memo_id: str) -> str:
    return f"memo_{memo_id}.mp3"


def is_audio_filename(filename: str) -> bool:
    """True for ``memo_<id>.mp3`` names; rejects paths and other files."""
    return bool(_FILENAME_RE.match(filename or ""))


@dataclass
class AudioArtifact:
    """
    Stored audio ready to be served.

    Attributes:
        filename: ``memo_<id>.mp3``.
        data: Raw audio bytes.
        headers: Extra response headers (Content-Disposition, and for
            cached artifacts Cache-Control/Expires).
        media_type: Content type of the audio.
    """
    filename: str
    data: bytes
    headers: Dict[str, str] = field(default_factory=dict)
    media_type: str = AUDIO_MEDIA_TYPE


class BaseArtifactStore:
    """
    Base class for artifact stores.

    Subclasses implement put() and get_audio(). Index operations default
    to UnsupportedError so a store without a memo index reports that
    explicitly instead of failing with a missing method.

    Attributes:
        name: Backend name as configured ("directory" or "cache").
        supports_index: Whether get/list/delete of memo metadata work.
    """
    name: str = "base"
    supports_index: bool = False

    def __init__(self, config: MemoServiceConfig):
        self.config = config
        self.base_url = config.server.base_url.rstrip("/")
        self.logger = get_logger(f"agent-memo.store.{self.name}")

    def url_for(self, filename: str) -> str:
        """Public URL an artifact is served from."""
        return f"{self.base_url}/audio/{filename}"

    async def put(self, filename: str, data: bytes) -> str:
        """
        Persist audio bytes under filename.

        Returns:
            The retrieval URL.

        Raises:
            StoreError: If the backend write fails.
        """
        raise NotImplementedError

    async def get_audio(self, filename: str) -> Optional[AudioArtifact]:
        """Return the artifact, or None if unknown, expired or malformed."""
        raise NotImplementedError

    def index(self, memo: "Memo") -> None:
        """Record memo metadata. A no-op for stores without an index."""
        return None

    def get(self, memo_id: str) -> Optional["Memo"]:
        raise UnsupportedError("Memo retrieval not supported in this deployment mode", hint=HINT_GET)

    def list(self, limit: int, offset: int) -> Tuple[List["Memo"], int]:
        """Return (page newest-first, total)."""
        raise UnsupportedError("Memo listing not supported in this deployment mode", hint=HINT_LIST)

    async def delete(self, memo_id: str) -> bool:
        """Remove a memo and its audio. Returns False if the id is unknown."""
        raise UnsupportedError("Memo deletion not supported in this deployment mode", hint=HINT_DELETE)

    def size(self) -> int:
        """Number of indexed memos (0 for stores without an index)."""
        return 0

    def storage_info(self) -> Dict[str, Any]:
        """Backend details for the health endpoint."""
        return {"backend": self.name, "supportsIndex": self.supports_index}


def create_store(settings: Settings, config: Optional[MemoServiceConfig] = None) -> BaseArtifactStore:
    """
    Create the artifact store for ``storage.backend``.

    Args:
        settings: Application settings.
        config: Pre-validated config, built from settings if omitted.
    """
    config = config or settings.get_service_config()
    backend = config.storage.backend

    if backend == "cache":
        from agent_memo.tts.cache import CacheArtifactStore
        store: BaseArtifactStore = CacheArtifactStore(config)
    else:
        from agent_memo.tts.storage import DirectoryArtifactStore
        store = DirectoryArtifactStore(config)

    info(_LOG, "store_ready", backend=store.name)
    return store
