from __future__ import annotations

"""
Public art catalog adapters.

Each adapter maps a free-text query to a list of unscored Candidates and
never raises: HTTP errors, timeouts and malformed payloads are logged and
turn into an empty list.
"""

from typing import Any, Dict, List, Optional

import httpx
from loguru import logger

from .config import (
    AIC_FIELDS,
    AIC_SEARCH_URL,
    HTTP_CONNECT_TIMEOUT,
    HTTP_READ_TIMEOUT,
    HTTP_USER_AGENT,
    MET_OBJECT_URL,
    MET_SEARCH_URL,
    SOURCE_RESULT_CAP,
)
from .normalize import blank_to_none, first_present
from .pipeline_types import Candidate


def make_client(**kwargs: Any) -> httpx.AsyncClient:
    """Shared outbound client settings for catalog and enrichment calls."""
    kwargs.setdefault("timeout", httpx.Timeout(HTTP_READ_TIMEOUT, connect=HTTP_CONNECT_TIMEOUT))
    kwargs.setdefault("follow_redirects", True)
    headers = {"User-Agent": HTTP_USER_AGENT, "Accept": "application/json"}
    headers.update(kwargs.pop("headers", {}) or {})
    return httpx.AsyncClient(headers=headers, **kwargs)


class SourceAdapter:
    """Base class: one external catalog behind `fetch_candidates`."""

    name: str = ""

    async def search(self, query: str, client: httpx.AsyncClient) -> List[Candidate]:
        raise NotImplementedError

    async def fetch_candidates(self, query: str, client: httpx.AsyncClient) -> List[Candidate]:
        try:
            candidates = await self.search(query, client)
        except httpx.TimeoutException:
            logger.warning("{} search timeout for query '{}'", self.name, query)
            return []
        except Exception as e:
            logger.warning("{} search failed for query '{}': {}", self.name, query, e)
            return []
        logger.info("{} returned {} candidates", self.name, len(candidates))
        return candidates


class AicSource(SourceAdapter):
    """Art Institute of Chicago public API (single search call)."""

    name = "aic"

    def __init__(self, limit: int = SOURCE_RESULT_CAP) -> None:
        self.limit = limit

    def to_candidate(self, item: Dict[str, Any]) -> Candidate:
        return Candidate(
            source=self.name,
            artist=blank_to_none(item.get("artist_title")),
            title=blank_to_none(item.get("title")),
            date_created=blank_to_none(item.get("date_display")),
            location_painted=blank_to_none(item.get("place_of_origin")),
            style=blank_to_none(item.get("style_title")),
            medium=blank_to_none(item.get("medium_display")),
            raw_json=item,
        )

    async def search(self, query: str, client: httpx.AsyncClient) -> List[Candidate]:
        params = {"q": query, "fields": ",".join(AIC_FIELDS), "limit": str(self.limit)}
        r = await client.get(AIC_SEARCH_URL, params=params)
        if r.status_code >= 400:
            logger.warning("AIC search: HTTP {} for '{}'", r.status_code, query)
            return []
        data = r.json().get("data")
        if not isinstance(data, list):
            return []
        return [self.to_candidate(it) for it in data[: self.limit] if isinstance(it, dict)]


class MetSource(SourceAdapter):
    """
    Metropolitan Museum Collection API.

    The search endpoint only returns object IDs, so each of the first
    `limit` IDs needs a detail call. Detail calls run one after another;
    a failed one skips that object.
    """

    name = "met"

    def __init__(self, limit: int = SOURCE_RESULT_CAP) -> None:
        self.limit = limit

    def to_candidate(self, obj: Dict[str, Any]) -> Candidate:
        return Candidate(
            source=self.name,
            artist=blank_to_none(obj.get("artistDisplayName")),
            title=blank_to_none(obj.get("title")),
            date_created=blank_to_none(obj.get("objectDate")),
            location_painted=first_present(obj.get("city"), obj.get("country"), obj.get("region")),
            style=first_present(obj.get("period"), obj.get("style"), obj.get("culture")),
            medium=blank_to_none(obj.get("medium")),
            raw_json=obj,
        )

    async def fetch_object(self, object_id: Any, client: httpx.AsyncClient) -> Optional[Candidate]:
        try:
            r = await client.get(MET_OBJECT_URL.format(object_id=object_id))
            if r.status_code >= 400:
                logger.warning("Met object {}: HTTP {}", object_id, r.status_code)
                return None
            obj = r.json()
        except httpx.TimeoutException:
            logger.warning("Met object {} timeout", object_id)
            return None
        except Exception as e:
            logger.warning("Met object {} failed: {}", object_id, e)
            return None
        if not isinstance(obj, dict):
            return None
        return self.to_candidate(obj)

    async def search(self, query: str, client: httpx.AsyncClient) -> List[Candidate]:
        r = await client.get(MET_SEARCH_URL, params={"q": query, "hasImages": "true"})
        if r.status_code >= 400:
            logger.warning("Met search: HTTP {} for '{}'", r.status_code, query)
            return []
        object_ids = r.json().get("objectIDs")
        if not isinstance(object_ids, list):
            return []

        out: List[Candidate] = []
        for oid in object_ids[: self.limit]:
            cand = await self.fetch_object(oid, client)
            if cand is not None:
                out.append(cand)
        return out


DEFAULT_SOURCES: List[SourceAdapter] = [AicSource(), MetSource()]
