"""Heuristics turning raw OCR text into a single ticket number."""
from __future__ import annotations

import re
from typing import Callable, Optional

_WHITESPACE = re.compile(r"\s+")


def longest_token(text: str) -> Optional[str]:
    """Longest whitespace-separated token; the first one wins a tie.

    Tolerates stray noise characters recognised next to the number.
    """

    best = ""
    for token in _WHITESPACE.split(text or ""):
        if len(token) > len(best):
            best = token
    return best or None


def strip_whitespace(text: str) -> Optional[str]:
    """All recognised characters with whitespace removed.

    Only correct when the region holds nothing but the ticket number.
    """

    joined = _WHITESPACE.sub("", text or "")
    return joined or None


STRATEGIES: dict[str, Callable[[str], Optional[str]]] = {
    "longest_token": longest_token,
    "strip_whitespace": strip_whitespace,
}


def extract_identifier(text: str, strategy: str = "longest_token") -> Optional[str]:
    try:
        heuristic = STRATEGIES[strategy]
    except KeyError:
        raise ValueError(f"Unsupported identifier strategy: {strategy}") from None
    return heuristic(text)
