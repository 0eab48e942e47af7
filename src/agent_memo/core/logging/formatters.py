"""
Log Formatters for JSON and Console Output.

    JsonlFormatter: one JSON object per line, for the log file
    ColoredConsoleFormatter: compact colored lines, for the terminal

Output Examples:
    JSONL (file):
        {"ts":"2026-01-15T14:30:05+00:00","level":2,"tag":"SUCCESS","message":"memo_created","request_id":"1f0c9a2b7d4e","seconds":1.42,"extra":{"voice":"june","bytes":7818}}

    Console (colored):
        14:30:05 [SUCCESS] (1f0c9a2b7d4e) memo_created 1.420s voice=june bytes=7818

Value Coloring:
    seconds: green < 0.1s <= yellow < 1.0s <= red
    status:  green for 2xx, yellow for 4xx, red for 5xx or missing
    bytes:   red when zero, cyan otherwise
"""
from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Dict

from . import colors
from .colors import Colors, get_tag_color


def _paint(text: str, color: str) -> str:
    # Read the flag at call time so configure_logging() and tests can flip it.
    if not colors.USE_COLORS:
        return text
    return f"{color}{text}{Colors.RESET}"


class JsonlFormatter(logging.Formatter):
    """
    Format log records as JSON Lines.

    Keys: ts, level, tag, message, request_id, and optionally event,
    seconds and extra (the keyword fields passed to info()/warn()/...).
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created).astimezone().isoformat(),
            "level": getattr(record, "numeric_level", 2),
            "tag": getattr(record, "tag", record.levelname),
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", "-"),
        }

        event = getattr(record, "event", None)
        if event:
            payload["event"] = event

        seconds = getattr(record, "seconds", None)
        if seconds is not None:
            payload["seconds"] = seconds

        extra_data = getattr(record, "extra_data", None)
        if extra_data:
            payload["extra"] = extra_data

        return json.dumps(payload, ensure_ascii=False, default=str)


class ColoredConsoleFormatter(logging.Formatter):
    """
    Format log records for the console.

    Output Format:
        HH:MM:SS [  TAG  ] (rid) message [event=...] [1.234s] key=value ...
    """

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        tag = getattr(record, "tag", record.levelname)
        rid = getattr(record, "request_id", "-")

        parts = [
            _paint(ts, Colors.DIM),
            _paint(f"[{tag:^7}]", get_tag_color(tag)),
        ]
        if rid != "-":
            parts.append(_paint(f"({rid})", Colors.DIM + Colors.CYAN))
        parts.append(record.getMessage())

        event = getattr(record, "event", None)
        if event:
            parts.append(_paint(f"event={event}", Colors.BLUE))

        seconds = getattr(record, "seconds", None)
        if seconds is not None:
            if seconds < 0.1:
                time_color = Colors.GREEN
            elif seconds < 1.0:
                time_color = Colors.YELLOW
            else:
                time_color = Colors.RED
            parts.append(_paint(f"{seconds:.3f}s", time_color))

        extra_data = getattr(record, "extra_data", None)
        if extra_data:
            for k, v in extra_data.items():
                parts.append(_paint(f"{k}={v}", self._value_color(k, v)))

        return " ".join(parts)

    def _value_color(self, key: str, value: Any) -> str:
        """Pick a color for well-known fields, DIM for everything else."""
        if key == "status":
            if not isinstance(value, int):
                return Colors.RED
            if value < 300:
                return Colors.GREEN
            if value < 500:
                return Colors.YELLOW
            return Colors.RED

        if key == "bytes" and isinstance(value, int):
            return Colors.RED if value == 0 else Colors.CYAN

        if key in ("mode", "voice"):
            return Colors.MAGENTA

        return Colors.DIM
