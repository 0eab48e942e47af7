"""
Tests for the directory-backed artifact store.

Tests cover:
- put() writes memo_<id>.mp3 and returns the public URL
- Directory created on demand
- get_audio() for present, missing and malformed names
- Memo index: get/list (newest first, paging)/delete
- Failed unlink leaves an orphan that later writes sweep
- Write failures surface as StoreError
"""
from pathlib import Path
from unittest.mock import patch

import pytest

from agent_memo.core.errors import ErrorCode, StoreError
from agent_memo.services.memo_service import Memo, MemoAudio, MemoVoice
from agent_memo.tts.storage import DirectoryArtifactStore
from agent_memo.tts.store import audio_filename, create_store, is_audio_filename


@pytest.fixture
def store(settings):
    return DirectoryArtifactStore(settings.get_service_config())


def _memo(store, memo_id: str) -> Memo:
    filename = audio_filename(memo_id)
    return Memo(
        id=memo_id,
        text=f"memo {memo_id}",
        voice=MemoVoice(key="june", display_name="June"),
        audio=MemoAudio(filename=filename, url=store.url_for(filename), byte_length=3),
        created_at="2026-01-15T14:30:05.123Z",
    )


class TestFilenames:
    """Tests for audio filename handling."""

    def test_audio_filename(self):
        assert audio_filename("abc-123") == "memo_abc-123.mp3"

    @pytest.mark.parametrize("name", ["memo_abc.mp3", "memo_4f1c2d9e-0000-4000-8000-000000000000.mp3"])
    def test_valid_names(self, name):
        assert is_audio_filename(name)

    @pytest.mark.parametrize(
        "name",
        ["", "abc.mp3", "memo_.mp3", "memo_abc.wav", "../memo_abc.mp3", "memo_a/b.mp3", "memo_abc.mp3.tmp"],
    )
    def test_invalid_names(self, name):
        assert not is_audio_filename(name)


class TestPutAndGet:
    """Tests for writing and reading audio."""

    @pytest.mark.asyncio
    async def test_put_writes_file(self, store):
        assert not store.base_dir.exists()
        url = await store.put("memo_a1.mp3", b"abc")

        assert url == "http://testserver/audio/memo_a1.mp3"
        assert (store.base_dir / "memo_a1.mp3").read_bytes() == b"abc"
        assert not (store.base_dir / "memo_a1.tmp").exists()

    @pytest.mark.asyncio
    async def test_get_audio(self, store):
        await store.put("memo_a1.mp3", b"abc")
        artifact = await store.get_audio("memo_a1.mp3")

        assert artifact.data == b"abc"
        assert artifact.media_type == "audio/mpeg"
        assert artifact.headers["Content-Disposition"] == 'inline; filename="memo_a1.mp3"'

    @pytest.mark.asyncio
    async def test_get_missing(self, store):
        assert await store.get_audio("memo_missing.mp3") is None

    @pytest.mark.asyncio
    async def test_get_malformed_name(self, store, tmp_path):
        (tmp_path / "secret.txt").write_text("nope")
        assert await store.get_audio("../secret.txt") is None

    @pytest.mark.asyncio
    async def test_put_rejects_bad_name(self, store):
        with pytest.raises(StoreError):
            await store.put("../evil.mp3", b"x")

    @pytest.mark.asyncio
    async def test_write_failure(self, store):
        with patch("agent_memo.tts.storage._write_atomic", side_effect=OSError("disk full")):
            with pytest.raises(StoreError) as exc_info:
                await store.put("memo_a1.mp3", b"abc")
        assert exc_info.value.code == ErrorCode.STORE_ERROR
        assert "disk full" in exc_info.value.message


class TestIndex:
    """Tests for the in-memory memo index."""

    def test_get(self, store):
        memo = _memo(store, "one")
        store.index(memo)
        assert store.get("one") is memo
        assert store.get("two") is None

    def test_list_newest_first(self, store):
        for memo_id in ("a", "b", "c"):
            store.index(_memo(store, memo_id))

        memos, total = store.list(limit=20, offset=0)
        assert [m.id for m in memos] == ["c", "b", "a"]
        assert total == 3

    def test_list_paging(self, store):
        for i in range(5):
            store.index(_memo(store, f"m{i}"))

        memos, total = store.list(limit=2, offset=1)
        assert [m.id for m in memos] == ["m3", "m2"]
        assert total == 5

        memos, total = store.list(limit=2, offset=10)
        assert memos == []
        assert total == 5

    @pytest.mark.asyncio
    async def test_delete(self, store):
        await store.put("memo_one.mp3", b"abc")
        store.index(_memo(store, "one"))

        assert await store.delete("one") is True
        assert store.get("one") is None
        assert not (store.base_dir / "memo_one.mp3").exists()
        assert await store.delete("one") is False

    @pytest.mark.asyncio
    async def test_delete_with_file_already_gone(self, store):
        store.index(_memo(store, "one"))
        assert await store.delete("one") is True
        assert store.orphans == set()

    def test_size_and_info(self, store):
        store.index(_memo(store, "one"))
        info = store.storage_info()
        assert store.size() == 1
        assert info["backend"] == "directory"
        assert info["supportsIndex"] is True
        assert info["memos"] == 1
        assert info["orphans"] == 0


class TestOrphans:
    """A failed unlink never fails the delete."""

    @pytest.mark.asyncio
    async def test_failed_unlink_becomes_orphan(self, store):
        await store.put("memo_one.mp3", b"abc")
        store.index(_memo(store, "one"))

        with patch.object(Path, "unlink", side_effect=PermissionError("file busy")):
            assert await store.delete("one") is True

        path = store.base_dir / "memo_one.mp3"
        assert store.get("one") is None
        assert path.exists()
        assert store.orphans == {path}
        assert store.storage_info()["orphans"] == 1

    @pytest.mark.asyncio
    async def test_next_write_sweeps_orphans(self, store):
        await store.put("memo_one.mp3", b"abc")
        store.index(_memo(store, "one"))
        with patch.object(Path, "unlink", side_effect=PermissionError("file busy")):
            await store.delete("one")

        await store.put("memo_two.mp3", b"def")

        assert store.orphans == set()
        assert not (store.base_dir / "memo_one.mp3").exists()

    @pytest.mark.asyncio
    async def test_sweep_keeps_stubborn_orphans(self, store):
        await store.put("memo_one.mp3", b"abc")
        store.index(_memo(store, "one"))
        with patch.object(Path, "unlink", side_effect=PermissionError("file busy")):
            await store.delete("one")
            assert store.sweep_orphans() == 0
        assert len(store.orphans) == 1
        assert store.sweep_orphans() == 1


class TestFactory:
    """Tests for create_store()."""

    def test_directory(self, settings):
        assert create_store(settings).name == "directory"

    def test_cache(self, cache_settings):
        store = create_store(cache_settings)
        assert store.name == "cache"
        assert store.supports_index is False
