from __future__ import annotations
from typing import Optional

from citycast.errors import ValidationError


def normalize_query(raw: Optional[str]) -> str:
    """
    Returns the trimmed query text.
    Raises ValidationError if nothing but whitespace is left.
    """
    text = (raw or "").strip()
    if not text:
        raise ValidationError("empty query")
    return text

def same_city(a: str, b: str) -> bool:
    # Display case is kept, matching ignores it.
    return a.casefold() == b.casefold()
