"""Utility helpers shared across modules."""

from __future__ import annotations

import re

_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*\n(?P<body>.*?)\n?```$", re.DOTALL)


def or_sentinel(value: str | None, sentinel: str) -> str:
    """Return the stripped value, or the sentinel when it is blank."""
    stripped = (value or "").strip()
    return stripped or sentinel


def truncate(text: str, limit: int) -> str:
    if limit <= 0 or len(text) <= limit:
        return text
    return text[:limit] + "\n... [content truncated]"


def strip_code_fence(text: str) -> str:
    """Unwrap a single Markdown code fence such as ```json ... ```."""
    stripped = text.strip()
    match = _FENCE_RE.match(stripped)
    if match:
        return match.group("body").strip()
    return stripped
