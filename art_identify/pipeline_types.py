"""Typed containers shared across pipeline modules."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class ArtworkStatus(str, Enum):
    PENDING = "pending_identification"
    CANDIDATES_READY = "candidates_ready"
    ERROR = "error"
    CONFIRMED = "confirmed"


@dataclass(frozen=True)
class Candidate:
    """
    One proposed identification from one catalog.

    Frozen: scoring and enrichment build new values with dataclasses.replace.
    """

    source: str
    confidence: float = 0.0
    artist: Optional[str] = None
    title: Optional[str] = None
    date_created: Optional[str] = None
    location_painted: Optional[str] = None
    style: Optional[str] = None
    medium: Optional[str] = None
    raw_json: Any = None


@dataclass(frozen=True)
class Enrichment:
    """Secondary attributes looked up for a (title, artist) pair."""

    inception: Optional[str] = None
    location_label: Optional[str] = None
    style_label: Optional[str] = None
    material_label: Optional[str] = None


@dataclass
class ArtworkRecord:
    id: str
    user_id: str
    museum_name: Optional[str] = None
    museum_city: Optional[str] = None
    museum_country: Optional[str] = None
    status: str = ArtworkStatus.PENDING.value
    selected_candidate_id: Optional[str] = None
