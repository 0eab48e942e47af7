"""
Voice Registry.

Maps short voice keys ("june", "fred", ...) to the identifiers each
TTS provider needs:

    primary_provider_id     ElevenLabs voice id (paid API)
    alternate_provider_id   Edge neural voice name (free streaming),
                            None when the free provider cannot serve
                            the voice

The registry is built once at startup and never mutated. Provider ids
differ between deployments, so the built-in table can be replaced from
settings.yaml:

    voices:
      june:
        name: June
        gender: female
        primary_provider_id: 21m00Tcm4TlvDq8ikWAM
        alternate_provider_id: en-US-JennyNeural

Usage:
    registry = VoiceRegistry.from_settings(settings)
    voice = registry.resolve("JUNE")     # case-insensitive, None if unknown
    registry.describe()                  # [{"id", "name", "gender"}, ...]
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from agent_memo.core.config import ConfigValidationError, Settings


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"


@dataclass(frozen=True)
class Voice:
    """
    A speaking persona.

    Attributes:
        key: Lowercase identifier used as the API ``voice`` parameter.
        display_name: Human-readable name.
        gender: Gender.MALE or Gender.FEMALE.
        primary_provider_id: Voice id for the paid provider.
        alternate_provider_id: Voice name for the free streaming
            provider, or None.
    """
    key: str
    display_name: str
    gender: Gender
    primary_provider_id: str
    alternate_provider_id: Optional[str] = None

    def describe(self) -> Dict[str, str]:
        return {"id": self.key, "name": self.display_name, "gender": self.gender.value}


DEFAULT_VOICES: Tuple[Voice, ...] = (
    Voice("june", "June", Gender.FEMALE, "21m00Tcm4TlvDq8ikWAM", "en-US-JennyNeural"),
    Voice("april", "April", Gender.FEMALE, "AZnzlk1XvdvUeBnXmlld", "en-US-EmmaNeural"),
    Voice("sally", "Sally", Gender.FEMALE, "EXAVITQu4vr4xnSDxMaL", "en-US-AriaNeural"),
    Voice("fred", "Fred", Gender.MALE, "TxGEqnHWrfWFTfGW9XjX", "en-US-GuyNeural"),
    Voice("bill", "Bill", Gender.MALE, "flq6f7yk4E4fJM5XTYuZ", "en-US-EricNeural"),
    Voice("charlie", "Charlie", Gender.MALE, "IKne3meq5aSn9XLyUdCD", "en-US-TonyNeural"),
    Voice("dora", "Dora", Gender.FEMALE, "pNInz6obpgDQGcFmaJgB", "en-US-AnaNeural"),
    Voice("marcus", "Marcus", Gender.MALE, "wVAW6Ij4fQ3QmWYc4JyO", "en-US-BrianNeural"),
    Voice("bella", "Bella", Gender.FEMALE, "XB0fDKeXKc1Xb2dQw7Jc", "en-US-MichelleNeural"),
)


class VoiceRegistry:
    """
    Immutable, ordered, case-insensitive voice table.

    Iteration order is the order voices were given in, which is also
    the order of list() and describe().
    """

    def __init__(self, voices: Iterable[Voice] = DEFAULT_VOICES):
        table: Dict[str, Voice] = {}
        for voice in voices:
            key = voice.key.lower()
            if key in table:
                raise ConfigValidationError(f"duplicate voice key: {key!r}")
            table[key] = voice
        if not table:
            raise ConfigValidationError("voice registry must contain at least one voice")
        self._voices: Mapping[str, Voice] = MappingProxyType(table)

    @classmethod
    def from_settings(cls, settings: Optional[Settings]) -> "VoiceRegistry":
        """
        Build the registry from the ``voices`` settings table, or the
        built-in table when none is configured.

        Raises:
            ConfigValidationError: If an entry is missing a primary id
                or has an unknown gender.
        """
        raw = (settings.raw.get("voices") if settings is not None else None) or {}
        if not raw:
            return cls(DEFAULT_VOICES)
        if not isinstance(raw, dict):
            raise ConfigValidationError("voices must be a mapping of voice key to voice entry")
        return cls(_voice_from_raw(key, entry) for key, entry in raw.items())

    def resolve(self, key: Any) -> Optional[Voice]:
        """Look up a voice by key, ignoring case. Returns None if unknown."""
        if not isinstance(key, str):
            return None
        return self._voices.get(key.lower())

    def is_valid(self, key: Any) -> bool:
        return self.resolve(key) is not None

    def list(self) -> List[Voice]:
        return list(self._voices.values())

    def keys(self) -> List[str]:
        return list(self._voices.keys())

    def describe(self) -> List[Dict[str, str]]:
        """Voices as ``{"id", "name", "gender"}`` dicts for the API."""
        return [voice.describe() for voice in self._voices.values()]

    def __len__(self) -> int:
        return len(self._voices)

    def __contains__(self, key: object) -> bool:
        return self.is_valid(key)


def _voice_from_raw(key: Any, entry: Any) -> Voice:
    if not isinstance(entry, dict):
        raise ConfigValidationError(f"voices.{key} must be a mapping")
    primary = entry.get("primary_provider_id")
    if not primary:
        raise ConfigValidationError(f"voices.{key}.primary_provider_id is required")
    gender_raw = str(entry.get("gender", "")).strip().lower()
    try:
        gender = Gender(gender_raw)
    except ValueError:
        raise ConfigValidationError(f"voices.{key}.gender must be male or female, got {gender_raw!r}") from None
    key_str = str(key).lower()
    return Voice(
        key=key_str,
        display_name=str(entry.get("name") or key_str.title()),
        gender=gender,
        primary_provider_id=str(primary),
        alternate_provider_id=entry.get("alternate_provider_id") or None,
    )
