from __future__ import annotations

import re

_SENTENCE_RE = re.compile(r"[^.!?]+[.!?]+")

ELLIPSIS = "…"
EXEC_FALLBACK_CHARS = 180
DETAIL_SHORT_CHARS = 50
DETAIL_MAX_CHARS = 700


def exec_summary(text: str) -> str:
    """First two sentences of already-normalized text, or a 180-char prefix plus an ellipsis."""
    if not text:
        return ""
    sentences = [s.strip() for s in _SENTENCE_RE.findall(text)]
    teaser = " ".join(s for s in sentences[:2] if s).strip()
    if teaser:
        return teaser
    return text[:EXEC_FALLBACK_CHARS] + ELLIPSIS


def detail_summary(text: str) -> str:
    if len(text) < DETAIL_SHORT_CHARS:
        return text
    if len(text) > DETAIL_MAX_CHARS:
        return text[:DETAIL_MAX_CHARS] + ELLIPSIS
    return text
