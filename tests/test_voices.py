"""
Tests for the voice registry.

Tests cover:
- Built-in voice table contents and order
- Case-insensitive resolution
- describe() wire shape
- Building the registry from settings
- Duplicate and malformed entries rejected
"""
import pytest

from agent_memo.core.config import ConfigValidationError, Settings
from agent_memo.tts.voices import DEFAULT_VOICES, Gender, Voice, VoiceRegistry


class TestDefaultVoices:
    """Tests for the built-in voice table."""

    def test_nine_voices(self):
        assert len(VoiceRegistry()) == 9

    def test_keys_in_order(self):
        assert VoiceRegistry().keys() == [
            "june", "april", "sally", "fred", "bill", "charlie", "dora", "marcus", "bella",
        ]

    def test_every_voice_has_primary_id(self):
        assert all(v.primary_provider_id for v in DEFAULT_VOICES)

    def test_genders(self):
        registry = VoiceRegistry()
        assert registry.resolve("fred").gender is Gender.MALE
        assert registry.resolve("june").gender is Gender.FEMALE


class TestResolve:
    """Tests for VoiceRegistry.resolve()."""

    def test_case_insensitive(self):
        registry = VoiceRegistry()
        assert registry.resolve("JUNE") is registry.resolve("june")
        assert registry.resolve("Fred").key == "fred"

    def test_padded_key_is_unknown(self):
        """Only case is folded; surrounding whitespace is not."""
        registry = VoiceRegistry()
        assert registry.resolve(" june ") is None
        assert not registry.is_valid("june ")

    @pytest.mark.parametrize("key", ["june", "JUNE", "Fred", " june ", "bella\t", "\nmarcus", "zed", ""])
    def test_is_valid_matches_listed_keys(self, key):
        registry = VoiceRegistry()
        assert registry.is_valid(key) == (key.lower() in registry.keys())

    def test_unknown_returns_none(self):
        assert VoiceRegistry().resolve("nonexistent") is None

    def test_non_string_returns_none(self):
        registry = VoiceRegistry()
        assert registry.resolve(None) is None
        assert registry.resolve(42) is None

    def test_contains(self):
        registry = VoiceRegistry()
        assert "Bella" in registry
        assert "zed" not in registry


class TestDescribe:
    """describe() feeds GET /voices."""

    def test_shape(self):
        first = VoiceRegistry().describe()[0]
        assert first == {"id": "june", "name": "June", "gender": "female"}

    def test_no_provider_ids_exposed(self):
        for entry in VoiceRegistry().describe():
            assert set(entry) == {"id", "name", "gender"}


class TestConstruction:
    """Tests for registry construction and settings."""

    def test_duplicate_keys_rejected(self):
        voice = Voice("june", "June", Gender.FEMALE, "abc")
        with pytest.raises(ConfigValidationError, match="duplicate"):
            VoiceRegistry([voice, Voice("JUNE", "June 2", Gender.FEMALE, "def")])

    def test_empty_rejected(self):
        with pytest.raises(ConfigValidationError):
            VoiceRegistry([])

    def test_from_settings_without_table(self):
        assert len(VoiceRegistry.from_settings(Settings(raw={}))) == 9

    def test_from_settings_table(self):
        raw = {
            "voices": {
                "Nova": {"name": "Nova", "gender": "Female", "primary_provider_id": "p1"},
                "rex": {"gender": "male", "primary_provider_id": "p2",
                        "alternate_provider_id": "en-GB-RyanNeural"},
            }
        }
        registry = VoiceRegistry.from_settings(Settings(raw=raw))
        assert registry.keys() == ["nova", "rex"]
        assert registry.resolve("nova").alternate_provider_id is None
        assert registry.resolve("rex").display_name == "Rex"
        assert registry.resolve("rex").alternate_provider_id == "en-GB-RyanNeural"

    def test_missing_primary_id_rejected(self):
        raw = {"voices": {"nova": {"gender": "female"}}}
        with pytest.raises(ConfigValidationError, match="primary_provider_id"):
            VoiceRegistry.from_settings(Settings(raw=raw))

    def test_bad_gender_rejected(self):
        raw = {"voices": {"nova": {"gender": "robot", "primary_provider_id": "x"}}}
        with pytest.raises(ConfigValidationError, match="gender"):
            VoiceRegistry.from_settings(Settings(raw=raw))

    def test_registry_is_read_only(self):
        registry = VoiceRegistry()
        with pytest.raises(TypeError):
            registry._voices["new"] = DEFAULT_VOICES[0]
