"""
Ephemeral, cache-backed artifact store.

Audio is kept in an in-process TTL cache keyed by the artifact's
public URL (``{base_url}/audio/memo_<id>.mp3``), mirroring a platform
response cache: each entry is stored together with the response
headers it will be served with, including ``Cache-Control:
max-age=600`` and an ``Expires`` date.

Expiry:
    An entry is served while its age is strictly less than the TTL.
    At or after the TTL it is dropped and reported as not found, which
    is indistinguishable from an entry that never existed.

    The cache also holds at most ``storage.cache_max_items`` entries.
    Past that bound the oldest entry is evicted even if its TTL has not
    run out, and the eviction is logged with warn.

No memo metadata is kept, so get/list/delete of memos raise
UnsupportedError from the base class.

Example:
    >>> cache = TTLAudioCache(max_items=100, ttl_seconds=600)
    >>> cache.set(url, CacheItem(data=audio, headers={...}))
    >>> item = cache.get(url)   # None once 600 s have passed
"""
from __future__ import annotations

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from email.utils import formatdate
from typing import Any, Dict, Optional

from agent_memo.core.config import Defaults, MemoServiceConfig
from agent_memo.core.logging import debug, get_logger, verbose, warn
from agent_memo.tts.store import AudioArtifact, BaseArtifactStore, is_audio_filename

_LOG = get_logger("agent-memo.cache")


@dataclass
class CacheItem:
    """
    A cached audio response.

    Attributes:
        data: Audio bytes.
        headers: Response headers stored with the audio.
        created_at: Unix timestamp when the item was cached.
    """
    data: bytes
    headers: Dict[str, str] = field(default_factory=dict)
    created_at: float = field(default_factory=time.time)


class TTLAudioCache:
    """
    Thread-safe bounded cache with a fixed time-to-live.

    When more than ``max_items`` entries are held, the oldest are
    evicted first. Expired entries are dropped on access and by
    cleanup_expired().

    Attributes:
        max_items: Maximum number of items to store.
        ttl_seconds: Item lifetime in seconds.
    """

    def __init__(
        self,
        max_items: int = Defaults.CACHE_MAX_ITEMS,
        ttl_seconds: int = Defaults.CACHE_TTL_SECONDS,
    ):
        self.max_items = int(max_items)
        self.ttl_seconds = int(ttl_seconds)

        self._d: "OrderedDict[str, CacheItem]" = OrderedDict()
        self._lock = threading.Lock()

        self._hits = 0
        self._misses = 0
        self._expirations = 0

    def _expired(self, item: CacheItem, now: float) -> bool:
        return now - item.created_at >= self.ttl_seconds

    def get(self, key: str) -> Optional[CacheItem]:
        """Return the live item for key, or None if absent or expired."""
        with self._lock:
            item = self._d.get(key)
            if item is None:
                self._misses += 1
                return None
            if self._expired(item, time.time()):
                del self._d[key]
                self._expirations += 1
                self._misses += 1
                verbose(_LOG, "expired", key=key.rsplit("/", 1)[-1])
                return None
            self._hits += 1
            return item

    def set(self, key: str, item: CacheItem) -> None:
        with self._lock:
            self._d[key] = item
            self._d.move_to_end(key)
            now = time.time()
            while len(self._d) > self.max_items:
                evicted, old = self._d.popitem(last=False)
                if self._expired(old, now):
                    debug(_LOG, "evicted", key=evicted.rsplit("/", 1)[-1])
                else:
                    # Still inside its TTL window: the URL stops working early.
                    warn(_LOG, "evicted_before_expiry", key=evicted.rsplit("/", 1)[-1],
                         max_items=self.max_items)

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._d.pop(key, None) is not None

    def cleanup_expired(self) -> int:
        """Drop every expired entry. Returns the number removed."""
        now = time.time()
        with self._lock:
            expired_keys = [k for k, item in self._d.items() if self._expired(item, now)]
            for k in expired_keys:
                del self._d[k]
            self._expirations += len(expired_keys)

        if expired_keys:
            verbose(_LOG, "cleanup", removed=len(expired_keys))
        return len(expired_keys)

    def stats(self) -> Dict[str, int]:
        with self._lock:
            return {
                "hits": self._hits,
                "misses": self._misses,
                "size": len(self._d),
                "max_items": self.max_items,
                "ttl_seconds": self.ttl_seconds,
                "expirations": self._expirations,
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._d)

    def __contains__(self, key: str) -> bool:
        """Membership without a TTL check; use get() for live lookups."""
        with self._lock:
            return key in self._d


class CacheArtifactStore(BaseArtifactStore):
    """Audio in a TTL cache keyed by URL, no memo index."""
    name = "cache"
    supports_index = False

    def __init__(self, config: MemoServiceConfig, cache: Optional[TTLAudioCache] = None):
        super().__init__(config)
        self.cache = cache or TTLAudioCache(
            max_items=config.storage.cache_max_items,
            ttl_seconds=config.storage.cache_ttl_seconds,
        )

    def response_headers(self, filename: str, created_at: float) -> Dict[str, str]:
        ttl = self.cache.ttl_seconds
        return {
            "Cache-Control": f"max-age={ttl}",
            "Expires": formatdate(created_at + ttl, usegmt=True),
            "Content-Disposition": f'inline; filename="{filename}"',
        }

    async def put(self, filename: str, data: bytes) -> str:
        self.cache.cleanup_expired()
        url = self.url_for(filename)
        now = time.time()
        self.cache.set(url, CacheItem(data=data, headers=self.response_headers(filename, now), created_at=now))
        verbose(self.logger, "cached", filename=filename, bytes=len(data), ttl=self.cache.ttl_seconds)
        return url

    async def get_audio(self, filename: str) -> Optional[AudioArtifact]:
        if not is_audio_filename(filename):
            return None
        item = self.cache.get(self.url_for(filename))
        if item is None:
            return None
        return AudioArtifact(filename=filename, data=item.data, headers=dict(item.headers))

    def storage_info(self) -> Dict[str, Any]:
        data = super().storage_info()
        stats = self.cache.stats()
        data.update({
            "ttlSeconds": stats["ttl_seconds"],
            "cached": stats["size"],
            "maxItems": stats["max_items"],
        })
        return data
