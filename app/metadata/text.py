"""Markup and control-character stripping for user supplied text.

One pass unescapes entities, drops script/style blocks, tags and script URL
schemes, removes control and format characters and collapses whitespace.
Unescaping can expose new markup (``&lt;script&gt;``), so passes repeat until
the value stops changing; the result is therefore a fixpoint and normalizing
it again is a no-op.
"""

import html
import re
import unicodedata

_BLOCK_RE = re.compile(
    r"<\s*(script|style|iframe|object)\b[^>]*>.*?(<\s*/\s*\1\s*>|$)",
    re.IGNORECASE | re.DOTALL,
)
_TAG_RE = re.compile(r"<[/!?]?[a-zA-Z][^<>]*>")
_COMMENT_RE = re.compile(r"<!--.*?(-->|$)", re.DOTALL)
# Scheme followed directly by a payload; "Big data: a primer" is prose.
_SCHEME_RE = re.compile(r"\b(?:javascript|vbscript|data):(?=\S)", re.IGNORECASE)
_INLINE_SPACE_RE = re.compile(r"[ \t\u00a0\u2000-\u200a\u3000]+")
_BLANK_LINES_RE = re.compile(r"\n{3,}")
_KEPT_CONTROLS = frozenset("\n")
_DROPPED_CATEGORIES = frozenset({"Cc", "Cf", "Co", "Cs"})


def normalize_text(value: str, multiline: bool = False) -> str:
    """Return the markup-free, normalized form of *value*."""
    current = value
    while True:
        updated = _normalize_once(current, multiline)
        if updated == current:
            return current
        current = updated


def _normalize_once(value: str, multiline: bool) -> str:
    text = unicodedata.normalize("NFC", value)
    text = text.replace("\r\n", "\n").replace("\r", "\n").replace("\t", " ")
    text = "".join(
        ch
        for ch in text
        if ch in _KEPT_CONTROLS or unicodedata.category(ch) not in _DROPPED_CATEGORIES
    )
    text = html.unescape(text)
    text = _COMMENT_RE.sub(" ", text)
    text = _BLOCK_RE.sub(" ", text)
    text = _TAG_RE.sub(" ", text)
    text = _SCHEME_RE.sub("", text)
    return _collapse_whitespace(text, multiline)


def _collapse_whitespace(text: str, multiline: bool) -> str:
    if not multiline:
        return " ".join(text.split())
    lines = [_INLINE_SPACE_RE.sub(" ", line).strip() for line in text.split("\n")]
    return _BLANK_LINES_RE.sub("\n\n", "\n".join(lines)).strip()
