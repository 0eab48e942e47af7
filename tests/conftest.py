"""Shared fixtures: zero-latency settings, services and app clients."""
from __future__ import annotations

import io
import logging
from typing import Any, Dict

import pytest
from fastapi.testclient import TestClient

from agent_memo.core.config import Settings
from agent_memo.core.logging import get_level, set_level
from agent_memo.core.logging.formatters import JsonlFormatter
from agent_memo.services.memo_service import MemoService

_ENV_VARS = (
    "TTS_MODE",
    "ELEVENLABS_API_KEY",
    "ELEVENLABS_API_BASE_URL",
    "BASE_URL",
    "PORT",
    "AGENT_MEMO_STORAGE",
    "AGENT_MEMO_STORAGE_DIR",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep the developer's shell environment out of every test."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def make_raw(tmp_path, **overrides: Dict[str, Any]) -> Dict[str, Any]:
    raw: Dict[str, Any] = {
        "tts": {
            "mode": "simulation",
            "simulation": {"min_delay_s": 0.0, "max_delay_s": 0.0},
        },
        "server": {"base_url": "http://testserver"},
        "storage": {"backend": "directory", "base_dir": str(tmp_path / "storage")},
    }
    for section, values in overrides.items():
        raw.setdefault(section, {}).update(values)
    return raw


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(raw=make_raw(tmp_path))


@pytest.fixture
def cache_settings(tmp_path) -> Settings:
    return Settings(raw=make_raw(tmp_path, storage={"backend": "cache"}))


@pytest.fixture
def service(settings) -> MemoService:
    return MemoService(settings)


@pytest.fixture
def client(settings):
    from agent_memo.main import create_app

    with TestClient(create_app(settings=settings)) as c:
        yield c


@pytest.fixture
def cache_client(cache_settings):
    from agent_memo.main import create_app

    with TestClient(create_app(settings=cache_settings)) as c:
        yield c


@pytest.fixture
def log_records():
    """
    Capture JSONL lines written to the ``agent-memo`` logger tree.

    The tree does not propagate to the root logger, so caplog never
    sees these records.
    """
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    handler.setLevel(1)
    handler.setFormatter(JsonlFormatter())
    root = logging.getLogger("agent-memo")
    root.addHandler(handler)
    previous = get_level()
    try:
        yield stream
    finally:
        root.removeHandler(handler)
        set_level(previous)
