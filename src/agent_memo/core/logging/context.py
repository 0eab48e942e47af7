"""
Request Context and Logging Configuration State.

The request id lives in a ContextVar so that concurrent memo requests
running on the same event loop each log under their own id. Level and
file settings are process-wide module state.

Environment Variables:
    - AGENT_MEMO_SETTINGS: Settings file to read the logging section from
    - AGENT_MEMO_LOG_LEVEL: Override log level (1-4 or name)
    - AGENT_MEMO_LOG_DIR: Directory for the JSONL log file
    - AGENT_MEMO_JSONL_FILE: JSONL filename (default agent-memo.jsonl)
"""
from __future__ import annotations

import os
from contextvars import ContextVar
from typing import Any, Dict

import yaml

from .levels import LEVEL_NAMES, LogLevel

# "-" outside of any request
_request_id: ContextVar[str] = ContextVar("request_id", default="-")

_configured: bool = False
_log_config: Dict[str, Any] = {}
_current_level: LogLevel = LogLevel.NORMAL


def get_request_id() -> str:
    """Return the request id bound to the current context, or "-"."""
    return _request_id.get()


def set_request_id(rid: str) -> None:
    """Bind a request id to the current context for log correlation."""
    _request_id.set(rid)


def get_level() -> LogLevel:
    return _current_level


def set_level(level: LogLevel) -> None:
    global _current_level
    _current_level = level


def get_level_name() -> str:
    """Current level as "MINIMAL", "NORMAL", "VERBOSE" or "DEBUG"."""
    return LEVEL_NAMES.get(_current_level, "NORMAL")


def is_configured() -> bool:
    return _configured


def set_configured(value: bool) -> None:
    global _configured
    _configured = value


def get_log_config() -> Dict[str, Any]:
    return _log_config


def set_log_config(config: Dict[str, Any]) -> None:
    global _log_config
    _log_config = config


def read_logging_config() -> Dict[str, Any]:
    """
    Resolve logging configuration from the settings file and environment.

    Priority (highest first):
        1. AGENT_MEMO_LOG_* environment variables
        2. The ``logging`` section of the settings file
        3. Defaults applied by configure_logging()

    A missing or unreadable settings file is not an error here; the
    service reports settings problems itself when it loads them.
    """
    cfg: Dict[str, Any] = {}

    settings_path = os.getenv("AGENT_MEMO_SETTINGS", "config/settings.yaml")
    try:
        with open(settings_path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
        if isinstance(raw, dict):
            cfg.update(raw.get("logging", {}) or {})
    except (OSError, yaml.YAMLError):
        pass

    if os.getenv("AGENT_MEMO_LOG_LEVEL"):
        cfg["level"] = os.environ["AGENT_MEMO_LOG_LEVEL"]
    if os.getenv("AGENT_MEMO_LOG_DIR"):
        cfg["log_dir"] = os.environ["AGENT_MEMO_LOG_DIR"]
    if os.getenv("AGENT_MEMO_JSONL_FILE"):
        cfg["jsonl_file"] = os.environ["AGENT_MEMO_JSONL_FILE"]

    return cfg
