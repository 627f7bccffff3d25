from __future__ import annotations

import re

_WHITESPACE = re.compile(r"\s+")
ELLIPSIS = "..."


def normalize_space(value: str) -> str:
    return _WHITESPACE.sub(" ", value.replace("\xa0", " ")).strip()


def truncate(value: str, limit: int) -> str:
    if len(value) <= limit:
        return value
    return value[: limit - len(ELLIPSIS)].rstrip() + ELLIPSIS


def contains_any(text: str, terms: list[str]) -> bool:
    lower = text.lower()
    return any(term in lower for term in terms)
