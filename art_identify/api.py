from __future__ import annotations

"""
FastAPI application for painting identification.

- POST /identify runs the identification pipeline for one artwork
- only the artwork's owner may identify, list or select its candidates
- adapter failures never surface here; they only thin out the candidate list
"""

from typing import Any, List, Optional

from fastapi import FastAPI, Header, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import ValidationError

from . import config
from .config import (
    ArtworkOut,
    CandidateOut,
    HealthResponse,
    IdentifyRequest,
    IdentifyResponse,
    SelectRequest,
)
from .errors import IdentifyError, InvalidCandidate
from .identify import IdentifyPipeline, authorize, stored_candidates
from .storage import ArtworkStore


# -----------------------
# Store / auth helpers
# -----------------------

_store: Optional[ArtworkStore] = None


def get_store() -> ArtworkStore:
    global _store
    if _store is None:
        try:
            _store = ArtworkStore(config.DB_PATH)
        except Exception as e:
            logger.error("Could not open store at {}: {}", config.DB_PATH, e)
            raise HTTPException(status_code=500, detail="Store not configured")
    return _store


def build_pipeline(store: ArtworkStore) -> IdentifyPipeline:
    return IdentifyPipeline(store)


def require_user(store: ArtworkStore, authorization: Optional[str]) -> str:
    token = (authorization or "").strip()
    if token.lower().startswith("bearer "):
        token = token[7:].strip()
    user_id = store.resolve_user(token) if token else None
    if not user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user_id


async def _read_json(request: Request) -> Any:
    try:
        return await request.json()
    except Exception:
        raise HTTPException(status_code=400, detail="Invalid JSON")


# -----------------------
# FastAPI app + startup
# -----------------------

app = FastAPI(title="art-identify")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["POST", "GET", "OPTIONS"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)


@app.exception_handler(IdentifyError)
async def identify_error_handler(request: Request, exc: IdentifyError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})


@app.on_event("startup")
def startup_event() -> None:
    if config.LOG_FILE_ENABLED:
        config.LOG_DIR.mkdir(exist_ok=True)
        logger.add(config.LOG_DIR / "art_identify.log", rotation="10 MB", retention=5)
    logger.info("Starting art-identify; store at {}", config.DB_PATH)


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="healthy")


@app.options("/identify")
def identify_preflight() -> dict:
    return {"ok": True}


@app.post("/identify", response_model=IdentifyResponse)
async def identify(request: Request, authorization: Optional[str] = Header(None)) -> IdentifyResponse:
    store = get_store()
    user_id = require_user(store, authorization)

    body = await _read_json(request)
    if not isinstance(body, dict) or not str(body.get("artworkId") or "").strip():
        raise HTTPException(status_code=400, detail="artworkId is required")
    try:
        req = IdentifyRequest.model_validate(body)
    except ValidationError as e:
        logger.warning("Rejected identify body: {}", e.errors())
        raise HTTPException(status_code=400, detail="Invalid request body")

    return await build_pipeline(store).run(req, user_id)


@app.get("/artworks/{artwork_id}/candidates", response_model=List[CandidateOut])
def list_artwork_candidates(artwork_id: str, authorization: Optional[str] = Header(None)) -> List[CandidateOut]:
    store = get_store()
    user_id = require_user(store, authorization)
    authorize(store, artwork_id, user_id)
    return stored_candidates(store, artwork_id)


@app.post("/artworks/{artwork_id}/select", response_model=ArtworkOut)
async def select_candidate(
    artwork_id: str,
    request: Request,
    authorization: Optional[str] = Header(None),
) -> ArtworkOut:
    store = get_store()
    user_id = require_user(store, authorization)

    body = await _read_json(request)
    try:
        req = SelectRequest.model_validate(body)
    except ValidationError:
        raise HTTPException(status_code=400, detail="candidateId is required")

    authorize(store, artwork_id, user_id)
    candidate = store.get_candidate(req.candidateId)
    if candidate is None or candidate["artwork_id"] != artwork_id:
        raise InvalidCandidate("Invalid candidateId")

    store.select_candidate(artwork_id, req.candidateId)
    logger.info("Artwork {} confirmed as candidate {}", artwork_id, req.candidateId)
    updated = store.get_artwork(artwork_id)
    return ArtworkOut(
        id=updated.id,
        museum_name=updated.museum_name,
        museum_city=updated.museum_city,
        museum_country=updated.museum_country,
        status=updated.status,
        selected_candidate_id=updated.selected_candidate_id,
    )
