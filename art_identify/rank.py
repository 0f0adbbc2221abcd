# art_identify/rank.py
from __future__ import annotations

from dataclasses import replace
from typing import Iterable, List, Set, Tuple

from loguru import logger

from . import config
from .normalize import norm
from .pipeline_types import Candidate
from .scoring import confidence_from_score, score_candidate


def dedup_key(candidate: Candidate) -> Tuple[str, str, str]:
    return (candidate.source, norm(candidate.title), norm(candidate.artist))


def score_candidates(
    candidates: Iterable[Candidate],
    query_text: str,
    museum_text: str,
) -> List[Candidate]:
    """Return new candidates carrying their normalised confidence."""
    return [
        replace(c, confidence=confidence_from_score(score_candidate(c, query_text, museum_text)))
        for c in candidates
    ]


def rank_candidates(
    candidates: Iterable[Candidate],
    query_text: str,
    museum_text: str,
    top_k: int = config.RESULT_TOP_K,
) -> List[Candidate]:
    """
    Score, sort (stable, confidence desc), dedup by (source, title, artist)
    and keep the top_k. Position in the returned list + 1 is the rank.
    """
    scored = score_candidates(candidates, query_text, museum_text)
    # sorted() is stable: equal confidences keep source order
    scored = sorted(scored, key=lambda c: c.confidence, reverse=True)

    unique: List[Candidate] = []
    seen: Set[Tuple[str, str, str]] = set()
    for c in scored:
        key = dedup_key(c)
        if key in seen:
            continue
        seen.add(key)
        unique.append(c)
        if len(unique) >= top_k:
            break

    logger.info("Ranked {} candidates -> {} unique", len(scored), len(unique))
    return unique
