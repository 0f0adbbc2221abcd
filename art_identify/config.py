from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator


# ---------------------------
# Paths
# ---------------------------

PROJECT_ROOT = Path(__file__).resolve().parents[1]

DATA_DIR = PROJECT_ROOT / "data"
DB_PATH = Path(os.getenv("ART_IDENTIFY_DB_PATH", str(DATA_DIR / "art_identify.sqlite3")))


# ---------------------------
# Public art datasets
# ---------------------------

AIC_SEARCH_URL = "https://api.artic.edu/api/v1/artworks/search"
AIC_FIELDS = [
    "id",
    "title",
    "artist_title",
    "date_display",
    "style_title",
    "medium_display",
    "place_of_origin",
    "image_id",
]

MET_API_BASE = "https://collectionapi.metmuseum.org/public/collection/v1"
MET_SEARCH_URL = f"{MET_API_BASE}/search"
MET_OBJECT_URL = f"{MET_API_BASE}/objects/{{object_id}}"

WIKIDATA_SPARQL_URL = "https://query.wikidata.org/sparql"

SOURCE_RESULT_CAP = 10    # per source call (AIC limit / Met detail lookups)


# ---------------------------
# Query & ranking policy
# ---------------------------

DEFAULT_QUERY = "painting"
QUERY_MAX_TOKENS = 12     # tokens dispatched to the sources

MIN_TOKEN_LEN = 3
SCORE_NORMALIZER = 10.0   # confidence = clamp(score / 10)
RESULT_TOP_K = 3

# source id -> (trigger substrings in museum text, bonus)
MUSEUM_BONUSES: Dict[str, Tuple[Tuple[str, ...], int]] = {
    "aic": (("chicago",), 2),
    "met": (("met", "metropolitan"), 2),
}


# ---------------------------
# HTTP hardening
# ---------------------------

HTTP_CONNECT_TIMEOUT = 3.0
HTTP_READ_TIMEOUT = 7.0

# Whole-call budgets; a timeout counts as an empty result / no enrichment.
SOURCE_TIMEOUT = float(os.getenv("SOURCE_TIMEOUT", "8.0"))
ENRICH_TIMEOUT = float(os.getenv("ENRICH_TIMEOUT", "5.0"))

HTTP_USER_AGENT = "art-identify/0.1 (painting identification; free public datasets)"


# ---------------------------
# Logging / observability
# ---------------------------

LOG_DIR = PROJECT_ROOT / "logs"
LOG_FILE_ENABLED = os.getenv("ART_IDENTIFY_LOG_FILE", "0") == "1"


# ---------------------------
# Pydantic models shared around the app
# ---------------------------

class TextSignals(BaseModel):
    """
    Text derived from the uploaded photo upstream (caption model, OCR).
    """

    caption: Optional[str] = None
    ocrText: Optional[str] = None
    keywords: List[str] = Field(default_factory=list)

    @field_validator("keywords", mode="before")
    @classmethod
    def _null_keywords(cls, v):
        # null means no keywords
        return [] if v is None else v


class IdentifyRequest(BaseModel):
    """
    Request body for POST /identify.
    """

    artworkId: str = Field(..., min_length=1)
    imageUrl: Optional[str] = None
    museum_name: Optional[str] = None
    museum_city: Optional[str] = None
    museum_country: Optional[str] = None
    textSignals: Optional[TextSignals] = None


class CandidateOut(BaseModel):
    """
    One stored, ranked candidate as exposed by the API.
    """

    id: str
    rank: int = Field(ge=1)
    confidence: Optional[float] = None
    artist: Optional[str] = None
    title: Optional[str] = None
    date_created: Optional[str] = None
    location_painted: Optional[str] = None
    style: Optional[str] = None
    medium: Optional[str] = None
    source: Optional[str] = None


class IdentifyResponse(BaseModel):
    """
    Response body for POST /identify.
    """

    artworkId: str
    candidates: List[CandidateOut]


class SelectRequest(BaseModel):
    candidateId: str = Field(..., min_length=1)


class ArtworkOut(BaseModel):
    id: str
    museum_name: Optional[str] = None
    museum_city: Optional[str] = None
    museum_country: Optional[str] = None
    status: str
    selected_candidate_id: Optional[str] = None


class HealthResponse(BaseModel):
    """
    Response body for GET /health.
    """

    status: str
