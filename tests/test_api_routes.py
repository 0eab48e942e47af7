"""
HTTP tests for the memo API on the directory backend.

Tests cover:
- POST /memo happy path, validation and unknown voices
- GET /memo/{id}, GET /memos paging, DELETE /memo/{id}
- GET /audio/{filename} for stored, unknown and malformed names
- GET /voices
- Error body shape, unknown routes, X-Request-Id and CORS
"""
import re

import pytest

from agent_memo.core.errors import ProviderError
from agent_memo.tts.provider import BaseTTSProvider


def _create(client, text="Deploy finished", voice="june"):
    r = client.post("/memo", json={"text": text, "voice": voice})
    assert r.status_code == 201, r.text
    return r.json()


class TestCreateMemo:
    """POST /memo."""

    def test_created(self, client):
        r = client.post("/memo", json={"text": "Deploy finished with 0 errors", "voice": "june"})
        assert r.status_code == 201

        body = r.json()
        assert body["text"] == "Deploy finished with 0 errors"
        assert body["voice"] == {"id": "june", "name": "June"}
        assert body["audio"]["filename"] == f"memo_{body['id']}.mp3"
        assert body["audio"]["url"] == f"http://testserver/audio/memo_{body['id']}.mp3"
        assert body["audio"]["format"] == "mp3"
        assert body["createdAt"].endswith("Z")

    def test_audio_url_serves_bytes(self, client):
        memo = _create(client)
        r = client.get(memo["audio"]["url"])
        assert r.status_code == 200
        assert r.headers["content-type"] == "audio/mpeg"
        assert len(r.content) == memo["audio"]["length"]
        assert r.content[:2] == b"\xff\xfb"

    def test_voice_case_insensitive(self, client):
        assert _create(client, voice="FRED")["voice"]["id"] == "fred"

    @pytest.mark.parametrize(
        "payload",
        [
            {},
            {"text": "hi"},
            {"voice": "june"},
            {"text": 123, "voice": "june"},
            {"text": "hi", "voice": ["june"]},
        ],
    )
    def test_missing_or_mistyped_fields(self, client, payload):
        r = client.post("/memo", json=payload)
        assert r.status_code == 400
        body = r.json()
        assert body["ok"] is False
        assert body["error"] == "INVALID_INPUT"
        assert body["details"]["errors"]

    def test_malformed_json(self, client):
        r = client.post("/memo", content=b"{not json", headers={"Content-Type": "application/json"})
        assert r.status_code == 400
        assert r.json()["error"] == "INVALID_INPUT"

    @pytest.mark.parametrize("text", ["", "    ", "a" * 5001])
    def test_bad_text(self, client, text):
        r = client.post("/memo", json={"text": text, "voice": "june"})
        assert r.status_code == 400
        assert r.json()["error"] == "INVALID_INPUT"

    def test_unknown_voice(self, client):
        r = client.post("/memo", json={"text": "hi", "voice": "nonexistent"})
        assert r.status_code == 400
        body = r.json()
        assert body["error"] == "UNKNOWN_VOICE"
        assert body["message"] == "Invalid voice"
        assert body["details"]["requestedVoice"] == "nonexistent"
        assert body["details"]["availableVoices"] == client.get("/voices").json()["voices"]

    def test_provider_failure(self, client):
        class DownProvider(BaseTTSProvider):
            name = "simulation"

            async def synthesize(self, text, voice):
                raise ProviderError("elevenlabs", 503, "upstream down")

        service = client.app.state.memo_service
        service._provider = DownProvider(service.config)

        r = client.post("/memo", json={"text": "hi", "voice": "june"})
        assert r.status_code == 500
        body = r.json()
        assert body["error"] == "PROVIDER_ERROR"
        assert body["details"] == {"provider": "elevenlabs", "status": 503, "body": "upstream down"}
        assert client.get("/memos").json()["pagination"]["total"] == 0


class TestMemoIndex:
    """GET /memo/{id}, GET /memos, DELETE /memo/{id}."""

    def test_get(self, client):
        memo = _create(client)
        r = client.get(f"/memo/{memo['id']}")
        assert r.status_code == 200
        assert r.json() == memo

    def test_get_unknown(self, client):
        r = client.get("/memo/does-not-exist")
        assert r.status_code == 404
        assert r.json()["error"] == "NOT_FOUND"
        assert r.json()["message"] == "Memo not found"

    def test_list(self, client):
        ids = [_create(client, text=f"memo {i}")["id"] for i in range(3)]
        body = client.get("/memos").json()
        assert [m["id"] for m in body["memos"]] == list(reversed(ids))
        assert body["pagination"] == {"total": 3, "limit": 20, "offset": 0, "hasMore": False}

    def test_list_paging(self, client):
        for i in range(5):
            _create(client, text=f"memo {i}")
        body = client.get("/memos", params={"limit": 2, "offset": 1}).json()
        assert len(body["memos"]) == 2
        assert body["pagination"]["hasMore"] is True

    def test_list_empty(self, client):
        body = client.get("/memos").json()
        assert body["memos"] == []
        assert body["pagination"]["hasMore"] is False

    @pytest.mark.parametrize("query", ["limit=0", "limit=101", "limit=abc", "offset=-1"])
    def test_list_bad_params(self, client, query):
        r = client.get(f"/memos?{query}")
        assert r.status_code == 400
        assert r.json()["error"] == "INVALID_INPUT"

    def test_delete(self, client):
        memo = _create(client)

        r = client.delete(f"/memo/{memo['id']}")
        assert r.status_code == 200
        assert r.json() == {"message": "Memo deleted", "memoId": memo["id"]}

        assert client.get(f"/memo/{memo['id']}").status_code == 404
        assert client.get(memo["audio"]["url"]).status_code == 404
        assert client.delete(f"/memo/{memo['id']}").status_code == 404


class TestAudio:
    """GET /audio/{filename}."""

    def test_unknown(self, client):
        r = client.get("/audio/memo_00000000-0000-4000-8000-000000000000.mp3")
        assert r.status_code == 404
        body = r.json()
        assert body["error"] == "NOT_FOUND"
        assert body["message"] == "Audio not found or expired"

    @pytest.mark.parametrize("name", ["notes.txt", "memo_x.wav", "memo_%2E%2E.mp3"])
    def test_malformed(self, client, name):
        assert client.get(f"/audio/{name}").status_code == 404

    def test_content_disposition(self, client):
        memo = _create(client)
        r = client.get(memo["audio"]["url"])
        assert r.headers["content-disposition"] == f'inline; filename="{memo["audio"]["filename"]}"'


class TestVoices:
    """GET /voices."""

    def test_voices(self, client):
        r = client.get("/voices")
        assert r.status_code == 200
        voices = r.json()["voices"]
        assert len(voices) == 9
        assert voices[0] == {"id": "june", "name": "June", "gender": "female"}


class TestCrossCutting:
    """Error shape, request ids and CORS."""

    def test_unknown_route(self, client):
        r = client.get("/nope")
        assert r.status_code == 404
        assert r.json() == {"ok": False, "error": "NOT_FOUND", "message": "Not found"}

    def test_request_id_header(self, client):
        r = client.get("/voices")
        assert re.match(r"^[0-9a-f-]{12}$", r.headers["x-request-id"])
        assert r.headers["x-request-id"] != client.get("/voices").headers["x-request-id"]

    def test_cors_preflight(self, client):
        r = client.options(
            "/memo",
            headers={
                "Origin": "http://example.com",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "Content-Type",
            },
        )
        assert r.status_code == 200
        assert r.headers["access-control-allow-origin"] == "*"
        assert "POST" in r.headers["access-control-allow-methods"]

    def test_unexpected_error_is_500(self, client):
        service = client.app.state.memo_service

        def broken(memo_id):
            raise RuntimeError("index corrupted")

        service.get_memo = broken
        r = client.get("/memo/abc")
        assert r.status_code == 500
        body = r.json()
        assert body["error"] == "INTERNAL_ERROR"
        assert body["message"] == "Internal server error"
        assert "index corrupted" not in r.text
        assert "requestId" in body["details"]
