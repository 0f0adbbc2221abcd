from __future__ import annotations

"""
Text normalisation helpers shared across scoring, ranking and query building.

Public helpers:

* norm(text) -> str
    Case-fold + trim, tolerant of None. Used for dedup keys and enrichment.

* build_museum_text(request, artwork) -> str
    Museum name/city/country, request values winning over stored ones.

* build_query_text(museum_text, signals_text) -> str
    Free-text query sent to the catalogs; never empty.
"""

from typing import Any, List, Optional

from . import config
from .utils.text_clean import clean_query_text


def norm(text: Optional[str]) -> str:
    return (text or "").lower().strip()


def blank_to_none(value: Any) -> Optional[str]:
    """
    Map a source field to Optional[str]: missing or blank -> None.
    """
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def first_present(*values: Any) -> Optional[str]:
    for v in values:
        text = blank_to_none(v)
        if text is not None:
            return text
    return None


def query_tokens(text: str, min_len: int = config.MIN_TOKEN_LEN) -> List[str]:
    """
    Lowercased whitespace tokens of `text`, dropping short ones.
    Order and duplicates are preserved.
    """
    return [t for t in (text or "").lower().split() if len(t) >= min_len]


def build_museum_text(request: Any, artwork: Any) -> str:
    # per field: a blank request value counts as absent and the stored value is used
    parts = [
        first_present(getattr(request, field, None), getattr(artwork, field, None)) or ""
        for field in ("museum_name", "museum_city", "museum_country")
    ]
    return " ".join(parts).strip()


def build_signals_text(signals: Any) -> str:
    if signals is None:
        return ""
    caption = getattr(signals, "caption", None) or ""
    ocr_text = getattr(signals, "ocrText", None) or ""
    keywords = getattr(signals, "keywords", None) or []
    return f"{caption}\n{ocr_text}\n{' '.join(keywords)}".strip()


def build_query_text(museum_text: str, signals_text: str) -> str:
    text = f"{museum_text} {signals_text}".strip()
    return text or museum_text.strip() or config.DEFAULT_QUERY


def shorten_query(text: str, max_tokens: int = config.QUERY_MAX_TOKENS) -> str:
    short = clean_query_text(text, max_tokens=max_tokens)
    return short or config.DEFAULT_QUERY
