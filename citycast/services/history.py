"""
Pure rules for the recent-searches list.

History is ordered most-recent-first, holds no two entries that differ
only by case, and is never longer than MAX_HISTORY.
"""
from __future__ import annotations
from typing import Any, List, Sequence, Tuple

from citycast.services.validators import same_city

MAX_HISTORY = 5
HISTORY_KEY = "recent_searches"


def promote(history: Sequence[str], query: str) -> Tuple[str, ...]:
    """Put query first, drop any case-insensitive duplicate, then truncate."""
    rest = [item for item in history if not same_city(item, query)]
    return tuple([query] + rest)[:MAX_HISTORY]

def without(history: Sequence[str], query: str) -> Tuple[str, ...]:
    return tuple(item for item in history if not same_city(item, query))

def sanitize(raw: Any) -> Tuple[str, ...]:
    """
    Coerce whatever the store handed back into a valid history.
    Anything that is not a list of strings yields an empty history.
    """
    if not isinstance(raw, list):
        return ()
    out: List[str] = []
    for item in raw:
        if not isinstance(item, str):
            continue
        text = item.strip()
        if not text or any(same_city(text, seen) for seen in out):
            continue
        out.append(text)
        if len(out) == MAX_HISTORY:
            break
    return tuple(out)
