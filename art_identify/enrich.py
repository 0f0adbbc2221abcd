from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, Optional

import httpx
from loguru import logger

from .config import WIKIDATA_SPARQL_URL
from .normalize import norm
from .pipeline_types import Candidate, Enrichment

SPARQL_TEMPLATE = """
SELECT ?inception ?locationLabel ?styleLabel ?materialLabel WHERE {{
  ?item rdfs:label ?titleLabel .
  FILTER(LANG(?titleLabel) = "en") .
  FILTER(CONTAINS(LCASE(STR(?titleLabel)), "{title}")) .
  ?item wdt:P170 ?creator .
  ?creator rdfs:label ?creatorLabel .
  FILTER(LANG(?creatorLabel) = "en") .
  FILTER(CONTAINS(LCASE(STR(?creatorLabel)), "{artist}")) .
  OPTIONAL {{ ?item wdt:P571 ?inception . }}
  OPTIONAL {{ ?item wdt:P1071 ?location . }}
  OPTIONAL {{ ?item wdt:P136 ?style . }}
  OPTIONAL {{ ?item wdt:P186 ?material . }}
  SERVICE wikibase:label {{ bd:serviceParam wikibase:language "en". }}
}}
LIMIT 1
"""


def _sparql_literal(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')


def build_sparql(title: str, artist: str) -> str:
    return SPARQL_TEMPLATE.format(title=_sparql_literal(title), artist=_sparql_literal(artist))


def _binding_value(binding: Dict[str, Any], key: str) -> Optional[str]:
    cell = binding.get(key)
    if not isinstance(cell, dict):
        return None
    return cell.get("value") or None


async def enrich_from_wikidata(
    title: Optional[str],
    artist: Optional[str],
    client: httpx.AsyncClient,
) -> Optional[Enrichment]:
    """
    Best-effort Wikidata lookup for a (title, artist) pair.

    Returns None when either value is blank, when nothing matches, or on
    any transport / parse failure.
    """
    t = norm(title)
    a = norm(artist)
    if not t or not a:
        return None

    try:
        r = await client.get(
            WIKIDATA_SPARQL_URL,
            params={"format": "json", "query": build_sparql(t, a)},
            headers={"Accept": "application/sparql-results+json"},
        )
        if r.status_code >= 400:
            logger.warning("Wikidata: HTTP {} for '{}' / '{}'", r.status_code, t, a)
            return None
        bindings = r.json().get("results", {}).get("bindings") or []
    except httpx.TimeoutException:
        logger.warning("Wikidata timeout for '{}' / '{}'", t, a)
        return None
    except Exception as e:
        logger.warning("Wikidata enrichment failed for '{}' / '{}': {}", t, a, e)
        return None

    if not bindings or not isinstance(bindings[0], dict):
        return None
    b = bindings[0]
    return Enrichment(
        inception=_binding_value(b, "inception"),
        location_label=_binding_value(b, "locationLabel"),
        style_label=_binding_value(b, "styleLabel"),
        material_label=_binding_value(b, "materialLabel"),
    )


def apply_enrichment(candidate: Candidate, enrichment: Optional[Enrichment]) -> Candidate:
    """Fill only the fields the source left empty."""
    if enrichment is None:
        return candidate
    return replace(
        candidate,
        date_created=candidate.date_created if candidate.date_created is not None else enrichment.inception,
        location_painted=(
            candidate.location_painted if candidate.location_painted is not None else enrichment.location_label
        ),
        style=candidate.style if candidate.style is not None else enrichment.style_label,
        medium=candidate.medium if candidate.medium is not None else enrichment.material_label,
    )
