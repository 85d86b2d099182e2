from __future__ import annotations

import re

_WS_RE = re.compile(r"\s+")


def normalize_text(value: str | None) -> str:
    if not value:
        return ""
    value = value.strip().lower()
    value = _WS_RE.sub(" ", value)
    return value


def normalize_locality(value: str | None) -> str:
    # Postal codes compare verbatim apart from surrounding whitespace.
    return (value or "").strip()


def contains_term(text: str | None, term: str | None) -> bool:
    needle = normalize_text(term)
    if not needle:
        return False
    return needle in normalize_text(text)
