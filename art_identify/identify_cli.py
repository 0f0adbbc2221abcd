# art_identify/identify_cli.py
"""
Run the catalog search + ranking for a free-text query, without a store.

    python -m art_identify.identify_cli "water lilies monet" --museum "Art Institute of Chicago"
"""
import argparse
import asyncio
import json
from dataclasses import asdict
from typing import List

from .identify import enrich_candidates, gather_candidates
from .normalize import build_query_text, shorten_query
from .pipeline_types import Candidate
from .rank import rank_candidates
from .sources import DEFAULT_SOURCES, make_client


async def identify_query(query: str, museum: str = "", enrich: bool = False) -> List[Candidate]:
    museum = (museum or "").strip()
    short = shorten_query(build_query_text(museum, query))
    async with make_client() as client:
        raw = await gather_candidates(DEFAULT_SOURCES, short, client)
        ranked = rank_candidates(raw, short, museum)
        if enrich:
            ranked = await enrich_candidates(ranked, client)
    return ranked


def main(args) -> None:
    ranked = asyncio.run(identify_query(args.query, args.museum, args.enrich))
    out = []
    for i, c in enumerate(ranked):
        row = asdict(c)
        if not args.raw:
            row.pop("raw_json", None)
        row["rank"] = i + 1
        out.append(row)
    print(json.dumps(out, indent=2, ensure_ascii=False, default=str))


if __name__ == "__main__":
    ap = argparse.ArgumentParser()
    ap.add_argument("query", help="caption / OCR / keywords text")
    ap.add_argument("--museum", default="", help="museum name, city, country")
    ap.add_argument("--enrich", action="store_true", help="back-fill fields from Wikidata")
    ap.add_argument("--raw", action="store_true", help="include raw source payloads")
    main(ap.parse_args())
