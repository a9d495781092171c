"""Reduce HTML item bodies to plain text."""

import re

from .entities import decode_entities

_SCRIPT_STYLE_RE = re.compile(
    r"<(script|style)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL
)
_TAG_RE = re.compile(r"<[^<>]+>")
_WHITESPACE_RE = re.compile(r"\s+")


def sanitize_html(html: str) -> str:
    """Strip markup from ``html`` and return collapsed plain text.

    Script and style blocks are dropped with their bodies. Tags that only
    appear once entities are decoded (``&lt;b&gt;``) are stripped as well.
    An unmatched ``<`` never raises; it simply stays in the text.
    """
    text = _SCRIPT_STYLE_RE.sub("", html)
    text = _TAG_RE.sub("", text)
    text = decode_entities(text)
    text = _TAG_RE.sub("", text)
    return _WHITESPACE_RE.sub(" ", text.strip())
