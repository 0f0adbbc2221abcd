# art_identify/utils/text_clean.py
from __future__ import annotations
import re

def clean_query_text(q: str, max_tokens: int = 12) -> str:
    """
    Minimal, safe query normaliser applied before dispatch to the sources:
    - collapse whitespace/newlines
    - trim
    - keep only the first `max_tokens` whitespace tokens
    """
    q = "" if q is None else str(q)
    q = re.sub(r"\s+", " ", q).strip()
    if max_tokens > 0:
        q = " ".join(q.split(" ")[:max_tokens])
    return q
