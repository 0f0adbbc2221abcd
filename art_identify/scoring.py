# art_identify/scoring.py
from __future__ import annotations

from typing import Dict, Tuple

from . import config
from .normalize import norm, query_tokens
from .pipeline_types import Candidate


def candidate_haystack(candidate: Candidate) -> str:
    bits = [candidate.title, candidate.artist, candidate.style, candidate.medium]
    return " ".join(b or "" for b in bits).lower()


def museum_bonus(
    source: str,
    museum_text: str,
    bonuses: Dict[str, Tuple[Tuple[str, ...], int]] = config.MUSEUM_BONUSES,
) -> int:
    """
    Bonus for `source` when one of its trigger substrings occurs in the
    museum text. The museum text is case-folded first, so
    "Art Institute of Chicago" matches the "chicago" trigger.
    """
    rule = bonuses.get(source)
    if rule is None:
        return 0
    triggers, bonus = rule
    museum = norm(museum_text)
    return bonus if any(t in museum for t in triggers) else 0


def score_candidate(
    candidate: Candidate,
    query_text: str,
    museum_text: str,
    bonuses: Dict[str, Tuple[Tuple[str, ...], int]] = config.MUSEUM_BONUSES,
) -> int:
    """
    Lexical overlap score plus a fixed museum affinity bonus.

    Every query token (>= 3 chars) found as a substring of
    title/artist/style/medium adds 1; repeated tokens count each time.
    """
    hay = candidate_haystack(candidate)
    score = sum(1 for t in query_tokens(query_text) if t in hay)
    return score + museum_bonus(candidate.source, museum_text, bonuses)


def confidence_from_score(score: float) -> float:
    return max(0.0, min(1.0, score / config.SCORE_NORMALIZER))
