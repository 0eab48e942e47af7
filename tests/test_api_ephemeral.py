"""
HTTP tests for the cache (ephemeral) backend.

Audio is served from a ten minute TTL cache; memo metadata endpoints
answer 501 with a hint.
"""
import pytest

from agent_memo.tts.store import HINT_DELETE, HINT_GET, HINT_LIST


def _create(client):
    r = client.post("/memo", json={"text": "Cache me", "voice": "sally"})
    assert r.status_code == 201
    return r.json()


class TestEphemeralBackend:
    """Cache backend behavior."""

    def test_create_and_fetch_audio(self, cache_client):
        memo = _create(cache_client)
        r = cache_client.get(memo["audio"]["url"])
        assert r.status_code == 200
        assert r.headers["cache-control"] == "max-age=600"
        assert "expires" in r.headers
        assert len(r.content) == memo["audio"]["length"]

    def test_expired_audio_is_404(self, cache_client):
        memo = _create(cache_client)
        store = cache_client.app.state.memo_service.store
        store.cache._d[store.url_for(memo["audio"]["filename"])].created_at -= 600

        r = cache_client.get(memo["audio"]["url"])
        assert r.status_code == 404
        assert r.json()["error"] == "NOT_FOUND"

    @pytest.mark.parametrize(
        "method,path,hint",
        [
            ("get", "/memo/abc", HINT_GET),
            ("get", "/memos", HINT_LIST),
            ("get", "/memos?limit=abc", HINT_LIST),
            ("delete", "/memo/abc", HINT_DELETE),
        ],
    )
    def test_index_endpoints_unsupported(self, cache_client, method, path, hint):
        r = getattr(cache_client, method)(path)
        assert r.status_code == 501
        body = r.json()
        assert body["error"] == "UNSUPPORTED"
        assert body["details"] == {"hint": hint}

    def test_health_reports_cache(self, cache_client):
        storage = cache_client.get("/health").json()["storage"]
        assert storage["backend"] == "cache"
        assert storage["supportsIndex"] is False
        assert storage["ttlSeconds"] == 600
