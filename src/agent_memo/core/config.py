"""
Configuration Management for agent-memo.

This module provides centralized configuration handling with:
    - Default values (Defaults class)
    - Dataclass-based configuration objects
    - YAML file loading with environment variable overrides
    - Validation with meaningful error messages

Configuration Hierarchy (highest priority first):
    1. Environment variables (TTS_MODE, ELEVENLABS_API_KEY, BASE_URL, ...)
    2. YAML config file (config/settings.yaml)
    3. Defaults class values

Example settings.yaml:
    tts:
      mode: free-streaming

    server:
      base_url: https://memo.example.com

    storage:
      backend: directory
      base_dir: ./storage

    logging:
      level: 2  # NORMAL
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional
import os
import yaml


class ConfigValidationError(Exception):
    """
    Raised when configuration validation fails.

    This exception is thrown when a configuration value is outside
    acceptable bounds or of the wrong type.
    """
    pass


class Defaults:
    """
    Centralized default configuration values.

    All default values are defined here to ensure consistency across
    the codebase. These values are used when no override is provided
    via YAML config or environment variables.
    """

    # ─────────────────────────────────────────────────────────────────────────
    # TTS Provider Settings
    # ─────────────────────────────────────────────────────────────────────────
    TTS_MODE = "simulation"
    TTS_REQUEST_TIMEOUT_S = 0.0         # 0 = wait on the upstream indefinitely
    SIMULATION_MIN_DELAY_S = 1.0
    SIMULATION_MAX_DELAY_S = 2.0
    EDGE_ENDPOINT = "https://speech.platform.bing.com/consumer/speech/synthesize/readaloud/edge/v1"
    EDGE_MARKET = "en-US"
    ELEVENLABS_BASE_URL = "https://api.elevenlabs.io/v1"
    ELEVENLABS_MODEL_ID = "eleven_monolingual_v1"

    # ─────────────────────────────────────────────────────────────────────────
    # Server
    # ─────────────────────────────────────────────────────────────────────────
    SERVER_BASE_URL = "http://localhost:3000"
    SERVER_PORT = 3000

    # ─────────────────────────────────────────────────────────────────────────
    # Artifact Storage
    # ─────────────────────────────────────────────────────────────────────────
    STORAGE_BACKEND = "directory"       # directory | cache
    STORAGE_BASE_DIR = "./storage"      # Directory for memo_<id>.mp3 files
    CACHE_TTL_SECONDS = 600             # Ephemeral artifact lifetime (10 minutes)
    CACHE_MAX_ITEMS = 1024              # Memory bound for the ephemeral cache

    # ─────────────────────────────────────────────────────────────────────────
    # Memo Requests
    # ─────────────────────────────────────────────────────────────────────────
    MEMO_MAX_TEXT_CHARS = 5000
    MEMO_DEFAULT_PAGE_SIZE = 20
    MEMO_MAX_PAGE_SIZE = 100

    # ─────────────────────────────────────────────────────────────────────────
    # Logging
    # ─────────────────────────────────────────────────────────────────────────
    LOGGING_TEXT_PREVIEW_CHARS = 80     # Characters to show in text preview
    LOGGING_LEVEL = 2                   # 1=MINIMAL, 2=NORMAL, 3=VERBOSE, 4=DEBUG


STORAGE_BACKENDS = ("directory", "cache")


@dataclass
class SimulationConfig:
    """Latency window for the simulation provider."""
    min_delay_s: float = Defaults.SIMULATION_MIN_DELAY_S
    max_delay_s: float = Defaults.SIMULATION_MAX_DELAY_S


@dataclass
class EdgeConfig:
    """Free streaming (Edge read-aloud) provider settings."""
    endpoint: str = Defaults.EDGE_ENDPOINT
    market: str = Defaults.EDGE_MARKET


@dataclass
class ElevenLabsConfig:
    """
    Paid API (ElevenLabs) provider settings.

    A missing api_key is not a configuration error: it only fails
    synthesis requests once the paid provider is actually used.
    """
    api_key: Optional[str] = None
    base_url: str = Defaults.ELEVENLABS_BASE_URL
    model_id: str = Defaults.ELEVENLABS_MODEL_ID


@dataclass
class TTSConfig:
    """Provider selection plus per-provider settings."""
    mode: str = Defaults.TTS_MODE
    request_timeout_s: float = Defaults.TTS_REQUEST_TIMEOUT_S
    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    edge: EdgeConfig = field(default_factory=EdgeConfig)
    elevenlabs: ElevenLabsConfig = field(default_factory=ElevenLabsConfig)


@dataclass
class ServerConfig:
    """Externally visible base URL and listening port."""
    base_url: str = Defaults.SERVER_BASE_URL
    port: int = Defaults.SERVER_PORT


@dataclass
class StorageConfig:
    """
    Artifact storage configuration.

    The backend is chosen once per deployment: "directory" keeps audio
    on disk with an in-memory memo index, "cache" keeps audio in a
    time-boxed cache and offers no memo index.
    """
    backend: str = Defaults.STORAGE_BACKEND
    base_dir: str = Defaults.STORAGE_BASE_DIR
    cache_ttl_seconds: int = Defaults.CACHE_TTL_SECONDS
    cache_max_items: int = Defaults.CACHE_MAX_ITEMS


@dataclass
class MemoConfig:
    """Request bounds for memo creation and listing."""
    max_text_chars: int = Defaults.MEMO_MAX_TEXT_CHARS
    default_page_size: int = Defaults.MEMO_DEFAULT_PAGE_SIZE
    max_page_size: int = Defaults.MEMO_MAX_PAGE_SIZE


@dataclass
class LoggingConfig:
    """
    Logging configuration.

    Log levels:
        1 = MINIMAL: Startup, shutdown, critical errors only
        2 = NORMAL: Request lifecycle (default)
        3 = VERBOSE: Per-stage timing, detailed flow
        4 = DEBUG: Internal state, full tracing
    """
    text_preview_chars: int = Defaults.LOGGING_TEXT_PREVIEW_CHARS
    level: int = Defaults.LOGGING_LEVEL


@dataclass
class MemoServiceConfig:
    """
    Validated configuration for MemoService.

    This is the main configuration object created from Settings.
    It validates all values and provides typed access to configuration.

    Usage:
        settings = load_settings("config/settings.yaml")
        config = MemoServiceConfig.from_settings(settings)
        print(config.storage.backend)  # Typed access
    """
    tts: TTSConfig = field(default_factory=TTSConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    memo: MemoConfig = field(default_factory=MemoConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_settings(cls, settings: "Settings") -> "MemoServiceConfig":
        """
        Create MemoServiceConfig from Settings with validation.

        The TTS mode is copied as-is; an unrecognized mode is reported
        by the provider factory when a provider is first needed.

        Raises:
            ConfigValidationError: If any value fails validation.
        """
        raw = settings.raw

        # ─────────────────────────────────────────────────────────────────────
        # TTS configuration
        # ─────────────────────────────────────────────────────────────────────
        tts_raw = raw.get("tts", {}) or {}
        sim_raw = tts_raw.get("simulation", {}) or {}
        edge_raw = tts_raw.get("edge", {}) or {}
        eleven_raw = tts_raw.get("elevenlabs", {}) or {}

        tts = TTSConfig(
            mode=str(tts_raw.get("mode", Defaults.TTS_MODE)),
            request_timeout_s=float(tts_raw.get("request_timeout_s", Defaults.TTS_REQUEST_TIMEOUT_S)),
            simulation=SimulationConfig(
                min_delay_s=float(sim_raw.get("min_delay_s", Defaults.SIMULATION_MIN_DELAY_S)),
                max_delay_s=float(sim_raw.get("max_delay_s", Defaults.SIMULATION_MAX_DELAY_S)),
            ),
            edge=EdgeConfig(
                endpoint=str(edge_raw.get("endpoint", Defaults.EDGE_ENDPOINT)),
                market=str(edge_raw.get("market", Defaults.EDGE_MARKET)),
            ),
            elevenlabs=ElevenLabsConfig(
                api_key=eleven_raw.get("api_key") or None,
                base_url=str(eleven_raw.get("base_url", Defaults.ELEVENLABS_BASE_URL)).rstrip("/"),
                model_id=str(eleven_raw.get("model_id", Defaults.ELEVENLABS_MODEL_ID)),
            ),
        )
        cls._validate_non_negative("tts.request_timeout_s", tts.request_timeout_s)
        cls._validate_non_negative("tts.simulation.min_delay_s", tts.simulation.min_delay_s)
        if tts.simulation.max_delay_s < tts.simulation.min_delay_s:
            raise ConfigValidationError(
                "tts.simulation.max_delay_s must be >= min_delay_s, "
                f"got {tts.simulation.max_delay_s} < {tts.simulation.min_delay_s}"
            )

        # ─────────────────────────────────────────────────────────────────────
        # Server configuration
        # ─────────────────────────────────────────────────────────────────────
        server_raw = raw.get("server", {}) or {}
        server = ServerConfig(
            base_url=str(server_raw.get("base_url", Defaults.SERVER_BASE_URL)).rstrip("/"),
            port=int(server_raw.get("port", Defaults.SERVER_PORT)),
        )
        cls._validate_range("server.port", server.port, 1, 65535)

        # ─────────────────────────────────────────────────────────────────────
        # Storage configuration
        # ─────────────────────────────────────────────────────────────────────
        storage_raw = raw.get("storage", {}) or {}
        storage = StorageConfig(
            backend=str(storage_raw.get("backend", Defaults.STORAGE_BACKEND)).strip().lower(),
            base_dir=str(storage_raw.get("base_dir", Defaults.STORAGE_BASE_DIR)),
            cache_ttl_seconds=int(storage_raw.get("cache_ttl_seconds", Defaults.CACHE_TTL_SECONDS)),
            cache_max_items=int(storage_raw.get("cache_max_items", Defaults.CACHE_MAX_ITEMS)),
        )
        if storage.backend not in STORAGE_BACKENDS:
            raise ConfigValidationError(
                f"storage.backend must be one of {', '.join(STORAGE_BACKENDS)}, got {storage.backend!r}"
            )
        cls._validate_positive("storage.cache_ttl_seconds", storage.cache_ttl_seconds)
        cls._validate_positive("storage.cache_max_items", storage.cache_max_items)

        # ─────────────────────────────────────────────────────────────────────
        # Memo request bounds
        # ─────────────────────────────────────────────────────────────────────
        memo_raw = raw.get("memo", {}) or {}
        memo = MemoConfig(
            max_text_chars=int(memo_raw.get("max_text_chars", Defaults.MEMO_MAX_TEXT_CHARS)),
            default_page_size=int(memo_raw.get("default_page_size", Defaults.MEMO_DEFAULT_PAGE_SIZE)),
            max_page_size=int(memo_raw.get("max_page_size", Defaults.MEMO_MAX_PAGE_SIZE)),
        )
        cls._validate_positive("memo.max_text_chars", memo.max_text_chars)
        cls._validate_positive("memo.max_page_size", memo.max_page_size)
        cls._validate_range("memo.default_page_size", memo.default_page_size, 1, memo.max_page_size)

        # ─────────────────────────────────────────────────────────────────────
        # Logging configuration
        # ─────────────────────────────────────────────────────────────────────
        logging_raw = raw.get("logging", {}) or {}
        log_level_raw = logging_raw.get("level", Defaults.LOGGING_LEVEL)

        # Handle string log levels (e.g., "INFO", "DEBUG")
        if isinstance(log_level_raw, str):
            level_map = {
                "MINIMAL": 1, "1": 1,
                "NORMAL": 2, "INFO": 2, "2": 2,
                "VERBOSE": 3, "3": 3,
                "DEBUG": 4, "TRACE": 4, "4": 4,
            }
            log_level = level_map.get(log_level_raw.upper(), Defaults.LOGGING_LEVEL)
        else:
            log_level = int(log_level_raw)

        logging_cfg = LoggingConfig(
            text_preview_chars=int(logging_raw.get("text_preview_chars", Defaults.LOGGING_TEXT_PREVIEW_CHARS)),
            level=log_level,
        )
        cls._validate_non_negative("logging.text_preview_chars", logging_cfg.text_preview_chars)
        cls._validate_range("logging.level", logging_cfg.level, 1, 4)

        return cls(
            tts=tts,
            server=server,
            storage=storage,
            memo=memo,
            logging=logging_cfg,
        )

    @staticmethod
    def _validate_positive(name: str, value: int | float) -> None:
        """Validate that a value is positive (> 0)."""
        if value <= 0:
            raise ConfigValidationError(f"{name} must be positive, got {value}")

    @staticmethod
    def _validate_non_negative(name: str, value: int | float) -> None:
        """Validate that a value is non-negative (>= 0)."""
        if value < 0:
            raise ConfigValidationError(f"{name} must be non-negative, got {value}")

    @staticmethod
    def _validate_range(name: str, value: int | float, min_val: int | float, max_val: int | float) -> None:
        """Validate that a value is within a range [min_val, max_val]."""
        if not (min_val <= value <= max_val):
            raise ConfigValidationError(f"{name} must be between {min_val} and {max_val}, got {value}")


@dataclass(frozen=True)
class Settings:
    """
    Immutable settings container loaded from YAML.

    This is the raw settings object before validation. Use
    get_service_config() to get validated MemoServiceConfig.

    Attributes:
        raw: Dictionary of raw configuration values.
    """
    raw: Dict[str, Any]

    @property
    def tts_mode(self) -> str:
        """Get the configured TTS mode as written (not normalized)."""
        return str(self.raw.get("tts", {}).get("mode", Defaults.TTS_MODE))

    @property
    def storage_backend(self) -> str:
        """Get the artifact storage backend (directory/cache)."""
        return str(self.raw.get("storage", {}).get("backend", Defaults.STORAGE_BACKEND)).strip().lower()

    @property
    def base_url(self) -> str:
        """Get the externally visible base URL used for audio links."""
        return str(self.raw.get("server", {}).get("base_url", Defaults.SERVER_BASE_URL)).rstrip("/")

    @property
    def port(self) -> int:
        """Get the network port."""
        return int(self.raw.get("server", {}).get("port", Defaults.SERVER_PORT))

    def get_service_config(self) -> MemoServiceConfig:
        """
        Get validated MemoServiceConfig from these settings.

        Raises:
            ConfigValidationError: If validation fails.
        """
        return MemoServiceConfig.from_settings(self)


def apply_env_overrides(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Apply environment variable overrides to a raw settings dict.

    Environment variables:
        - TTS_MODE: tts.mode
        - ELEVENLABS_API_KEY: tts.elevenlabs.api_key
        - ELEVENLABS_API_BASE_URL: tts.elevenlabs.base_url
        - BASE_URL: server.base_url
        - PORT: server.port
        - AGENT_MEMO_STORAGE: storage.backend
        - AGENT_MEMO_STORAGE_DIR: storage.base_dir

    Returns:
        The same dict, updated in place.
    """
    overrides = [
        ("TTS_MODE", ("tts", "mode")),
        ("ELEVENLABS_API_KEY", ("tts", "elevenlabs", "api_key")),
        ("ELEVENLABS_API_BASE_URL", ("tts", "elevenlabs", "base_url")),
        ("BASE_URL", ("server", "base_url")),
        ("PORT", ("server", "port")),
        ("AGENT_MEMO_STORAGE", ("storage", "backend")),
        ("AGENT_MEMO_STORAGE_DIR", ("storage", "base_dir")),
    ]
    for env_name, path in overrides:
        value = os.getenv(env_name)
        if not value:
            continue
        node = raw
        for part in path[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[path[-1]] = value
    return raw


def load_settings(path: str = "config/settings.yaml") -> Settings:
    """
    Load settings from a YAML configuration file.

    Environment variable overrides are applied on top of the file
    (see apply_env_overrides).

    Args:
        path: Path to the YAML configuration file.

    Returns:
        Settings object with loaded configuration.

    Raises:
        FileNotFoundError: If the settings file doesn't exist.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"settings file not found: {p.resolve()}")

    with p.open("r", encoding="utf-8") as f:
        raw: Dict[str, Any] = yaml.safe_load(f) or {}

    return Settings(raw=apply_env_overrides(raw))


def settings_from_env() -> Settings:
    """Build settings from defaults and environment variables only."""
    return Settings(raw=apply_env_overrides({}))


def resolve_settings(path: Optional[str] = None) -> Settings:
    """
    Load the service settings file, tolerating its absence.

    Args:
        path: Settings file. Defaults to AGENT_MEMO_SETTINGS, then
            config/settings.yaml.

    Returns:
        Settings from the file, or from defaults plus environment
        overrides when the file does not exist.
    """
    path = path or os.getenv("AGENT_MEMO_SETTINGS", "config/settings.yaml")
    try:
        return load_settings(path)
    except FileNotFoundError:
        return settings_from_env()
