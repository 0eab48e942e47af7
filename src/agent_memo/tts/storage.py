"""
Directory-backed artifact store.

Audio is written as a flat directory of ``memo_<id>.mp3`` files under
``storage.base_dir``; memo metadata lives only in an in-memory index.
The files survive a restart, the index does not.

    {base_dir}/
        memo_4f1c...e2.mp3
        memo_a97d...03.mp3

Writes:
    The directory is created on demand (idempotent). Bytes go to a
    ``.tmp`` sibling that is then renamed over the final name, so a
    crash mid-write never leaves a truncated mp3 behind. File I/O runs
    in a worker thread to keep the event loop free.

Deletes:
    The index entry is removed first and the delete always succeeds
    once the id was known. A file that is already gone is fine. Any
    other unlink failure is logged and the path is remembered as an
    orphan; orphans are retried on every later write and by
    sweep_orphans(), and their count is reported in storage_info().

Listing:
    Newest first, ``offset``/``limit`` pagination over the index.
"""
from __future__ import annotations

import asyncio
import threading
from collections import OrderedDict
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Set, Tuple

from agent_memo.core.config import MemoServiceConfig
from agent_memo.core.errors import StoreError
from agent_memo.core.logging import debug, info, verbose, warn
from agent_memo.tts.store import AudioArtifact, BaseArtifactStore, audio_filename, is_audio_filename
from agent_memo.utils.timeit import timeit

if TYPE_CHECKING:
    from agent_memo.services.memo_service import Memo


def _write_atomic(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(".tmp")
    try:
        tmp.write_bytes(data)
        tmp.replace(path)
    except OSError:
        tmp.unlink(missing_ok=True)
        raise


class DirectoryArtifactStore(BaseArtifactStore):
    """
    Durable audio files with an in-memory memo index.

    Thread Safety:
        The index and the orphan set are guarded by one lock; file I/O
        happens outside it.
    """
    name = "directory"
    supports_index = True

    def __init__(self, config: MemoServiceConfig):
        super().__init__(config)
        self._base_dir = Path(config.storage.base_dir)
        # Insertion order == creation order; newest is last.
        self._index: "OrderedDict[str, Memo]" = OrderedDict()
        self._orphans: Set[Path] = set()
        self._lock = threading.Lock()

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def path_for(self, filename: str) -> Path:
        return self._base_dir / filename

    async def put(self, filename: str, data: bytes) -> str:
        if not is_audio_filename(filename):
            raise StoreError(f"Invalid audio filename: {filename}")

        await asyncio.to_thread(self.sweep_orphans)

        path = self.path_for(filename)
        with timeit("storage_write") as t:
            try:
                await asyncio.to_thread(_write_atomic, path, data)
            except OSError as e:
                warn(self.logger, "storage_write_error", filename=filename, error=str(e))
                raise StoreError(f"Failed to write audio file: {e}", details={"filename": filename}) from e

        verbose(self.logger, "saved", filename=filename, bytes=len(data), seconds=t.timing.seconds)
        return self.url_for(filename)

    async def get_audio(self, filename: str) -> Optional[AudioArtifact]:
        if not is_audio_filename(filename):
            return None
        path = self.path_for(filename)
        try:
            data = await asyncio.to_thread(path.read_bytes)
        except FileNotFoundError:
            return None
        except OSError as e:
            warn(self.logger, "storage_read_error", filename=filename, error=str(e))
            raise StoreError(f"Failed to read audio file: {e}", details={"filename": filename}) from e

        return AudioArtifact(
            filename=filename,
            data=data,
            headers={"Content-Disposition": f'inline; filename="{filename}"'},
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Memo index
    # ─────────────────────────────────────────────────────────────────────────

    def index(self, memo: "Memo") -> None:
        with self._lock:
            self._index[memo.id] = memo
            size = len(self._index)
        debug(self.logger, "indexed", memo_id=memo.id, size=size)

    def get(self, memo_id: str) -> Optional["Memo"]:
        with self._lock:
            return self._index.get(memo_id)

    def list(self, limit: int, offset: int) -> Tuple[List["Memo"], int]:
        with self._lock:
            newest_first = list(reversed(self._index.values()))
        total = len(newest_first)
        return newest_first[offset:offset + limit], total

    async def delete(self, memo_id: str) -> bool:
        with self._lock:
            memo = self._index.pop(memo_id, None)
        if memo is None:
            return False

        path = self.path_for(audio_filename(memo_id))
        try:
            await asyncio.to_thread(path.unlink)
        except FileNotFoundError:
            pass
        except OSError as e:
            warn(self.logger, "orphaned_file", memo_id=memo_id, path=str(path), error=str(e))
            with self._lock:
                self._orphans.add(path)
        else:
            verbose(self.logger, "file_deleted", memo_id=memo_id)
        return True

    def size(self) -> int:
        with self._lock:
            return len(self._index)

    # ─────────────────────────────────────────────────────────────────────────
    # Orphans
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def orphans(self) -> Set[Path]:
        with self._lock:
            return set(self._orphans)

    def sweep_orphans(self) -> int:
        """
        Retry unlinking files whose delete failed earlier.

        Returns:
            Number of orphans resolved (removed, or found already gone).
        """
        with self._lock:
            pending = list(self._orphans)
        if not pending:
            return 0

        resolved = 0
        for path in pending:
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                debug(self.logger, "orphan_still_present", path=str(path), error=str(e))
                continue
            with self._lock:
                self._orphans.discard(path)
            resolved += 1

        if resolved:
            info(self.logger, "orphans_swept", resolved=resolved, remaining=len(pending) - resolved)
        return resolved

    def storage_info(self) -> Dict[str, Any]:
        data = super().storage_info()
        with self._lock:
            data.update({
                "directory": str(self._base_dir),
                "memos": len(self._index),
                "orphans": len(self._orphans),
            })
        return data
