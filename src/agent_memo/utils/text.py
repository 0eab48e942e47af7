"""
Text helpers for logging and speech markup.

Memo text is passed to providers unchanged. The only transformations
here are a single-line preview for log output and XML escaping for
the SSML document sent to the free streaming provider.

Example:
    >>> preview("Deploy  finished\\nwith 0 errors", 14)
    'Deploy finish…'
    >>> escape_xml("Tom & Jerry's <show>")
    'Tom &amp; Jerry&apos;s &lt;show&gt;'
"""
from __future__ import annotations

import re

_WS_RE = re.compile(r"\s+")

# The five XML metacharacters. "&" must be replaced first.
_XML_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&apos;"),
)


def preview(text: str, max_chars: int = 80) -> str:
    """
    Collapse whitespace and truncate text for a log line.

    Args:
        text: Memo text.
        max_chars: Maximum length of the result including the ellipsis.
            0 disables previews.

    Returns:
        Single-line text of at most max_chars characters.
    """
    if max_chars <= 0:
        return ""
    flat = _WS_RE.sub(" ", text).strip()
    if len(flat) <= max_chars:
        return flat
    return flat[: max_chars - 1].rstrip() + "…"


def escape_xml(text: str) -> str:
    """Escape & < > " ' for embedding in an XML document."""
    for raw, escaped in _XML_ESCAPES:
        text = text.replace(raw, escaped)
    return text


def build_ssml(text: str, lang: str = "en-US") -> str:
    """
    Build the minimal SSML document accepted by the read-aloud endpoint.

    The voice itself is selected by query parameter, so the ``voice``
    element carries no name.
    """
    return (
        f"<speak version='1.0' xml:lang='{lang}'>"
        f"<voice><speak>{escape_xml(text)}</speak></voice>"
        "</speak>"
    )
