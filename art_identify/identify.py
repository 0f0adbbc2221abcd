"""
Identification pipeline.

received -> fetching -> ranking -> enriching -> persisting -> done | failed

- all sources are queried concurrently; a failed or timed-out source
  contributes nothing instead of failing the run
- enrichment runs one candidate at a time
- the stored candidate set is replaced (delete then insert), then the
  artwork status is set; persistence errors end in status 'error'
- the response is re-read from the store
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, List, Optional, Sequence

import httpx
from loguru import logger

from . import config
from .config import CandidateOut, IdentifyRequest, IdentifyResponse
from .enrich import apply_enrichment, enrich_from_wikidata
from .errors import ArtworkNotFound, NotArtworkOwner
from .normalize import build_museum_text, build_query_text, build_signals_text, shorten_query
from .pipeline_types import ArtworkRecord, ArtworkStatus, Candidate, Enrichment
from .rank import rank_candidates
from .sources import DEFAULT_SOURCES, SourceAdapter, make_client
from .storage import ArtworkStore

EnrichFn = Callable[[Optional[str], Optional[str], httpx.AsyncClient], Awaitable[Optional[Enrichment]]]


def authorize(store: ArtworkStore, artwork_id: str, user_id: str) -> ArtworkRecord:
    artwork = store.get_artwork(artwork_id)
    if artwork is None:
        raise ArtworkNotFound("Artwork not found")
    if artwork.user_id != user_id:
        raise NotArtworkOwner("Forbidden")
    return artwork


def stored_candidates(store: ArtworkStore, artwork_id: str) -> List[CandidateOut]:
    return [CandidateOut(**row) for row in store.list_candidates(artwork_id)]


async def gather_candidates(
    sources: Sequence[SourceAdapter],
    query: str,
    client: httpx.AsyncClient,
    timeout: float = config.SOURCE_TIMEOUT,
) -> List[Candidate]:
    """
    Fan out to every source and concatenate results in source order.
    """
    tasks = [asyncio.wait_for(src.fetch_candidates(query, client), timeout) for src in sources]
    outcomes = await asyncio.gather(*tasks, return_exceptions=True)

    merged: List[Candidate] = []
    for src, outcome in zip(sources, outcomes):
        if isinstance(outcome, BaseException):
            logger.warning("Source {} dropped: {!r}", src.name, outcome)
            continue
        merged.extend(outcome)
    return merged


async def enrich_candidates(
    ranked: Sequence[Candidate],
    client: httpx.AsyncClient,
    enrich: EnrichFn = enrich_from_wikidata,
    timeout: float = config.ENRICH_TIMEOUT,
) -> List[Candidate]:
    out: List[Candidate] = []
    for c in ranked:
        try:
            extra = await asyncio.wait_for(enrich(c.title, c.artist, client), timeout)
        except Exception as e:
            logger.warning("Enrichment skipped for '{}': {!r}", c.title, e)
            extra = None
        out.append(apply_enrichment(c, extra))
    return out


class IdentifyPipeline:
    def __init__(
        self,
        store: ArtworkStore,
        sources: Optional[Sequence[SourceAdapter]] = None,
        enrich: EnrichFn = enrich_from_wikidata,
        client_factory: Callable[[], httpx.AsyncClient] = make_client,
        source_timeout: float = config.SOURCE_TIMEOUT,
        enrich_timeout: float = config.ENRICH_TIMEOUT,
    ) -> None:
        self.store = store
        self.sources = list(DEFAULT_SOURCES if sources is None else sources)
        self.enrich = enrich
        self.client_factory = client_factory
        self.source_timeout = source_timeout
        self.enrich_timeout = enrich_timeout

    async def search(self, query: str, museum_text: str, client: httpx.AsyncClient) -> List[Candidate]:
        """Fetch + rank + enrich, no persistence."""
        logger.info("State fetching: query='{}'", query)
        raw = await gather_candidates(self.sources, query, client, self.source_timeout)

        logger.info("State ranking: {} raw candidates", len(raw))
        ranked = rank_candidates(raw, query, museum_text)

        logger.info("State enriching: {} candidates", len(ranked))
        return await enrich_candidates(ranked, client, self.enrich, self.enrich_timeout)

    def persist(self, artwork_id: str, ranked: Sequence[Candidate]) -> None:
        logger.info("State persisting: {} rows for artwork {}", len(ranked), artwork_id)
        try:
            written = self.store.replace_candidates(artwork_id, ranked)
            status = ArtworkStatus.CANDIDATES_READY if written > 0 else ArtworkStatus.ERROR
            self.store.set_status(artwork_id, status)
        except Exception:
            logger.exception("Persisting candidates failed for artwork {}", artwork_id)
            try:
                self.store.set_status(artwork_id, ArtworkStatus.ERROR)
            except Exception:
                logger.exception("Could not mark artwork {} as error", artwork_id)
            logger.info("State failed: artwork {}", artwork_id)
            return
        logger.info("State done: artwork {} -> {}", artwork_id, status.value)

    async def run(self, request: IdentifyRequest, user_id: str) -> IdentifyResponse:
        logger.info("State received: artwork {}", request.artworkId)
        artwork = authorize(self.store, request.artworkId, user_id)

        museum_text = build_museum_text(request, artwork)
        signals_text = build_signals_text(request.textSignals)
        query = shorten_query(build_query_text(museum_text, signals_text))

        async with self.client_factory() as client:
            ranked = await self.search(query, museum_text, client)

        self.persist(artwork.id, ranked)
        return IdentifyResponse(
            artworkId=artwork.id,
            candidates=stored_candidates(self.store, artwork.id),
        )
