import asyncio

import httpx

from art_identify.sources import AicSource, MetSource


def _client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _run(source, query, handler):
    async def go():
        async with _client(handler) as client:
            return await source.fetch_candidates(query, client)

    return asyncio.run(go())


def test_aic_maps_fields_and_caps_results():
    seen = {}

    def handler(request):
        seen["params"] = dict(request.url.params)
        data = [
            {
                "id": 20684,
                "title": "Paris Street; Rainy Day",
                "artist_title": "Gustave Caillebotte",
                "date_display": "1877",
                "style_title": "",
                "medium_display": "Oil on canvas",
                "place_of_origin": "France",
            }
        ] + [{"id": i, "title": f"Item {i}"} for i in range(15)]
        return httpx.Response(200, json={"data": data})

    cands = _run(AicSource(), "caillebotte rainy", handler)

    assert seen["params"]["q"] == "caillebotte rainy"
    assert seen["params"]["limit"] == "10"
    assert "place_of_origin" in seen["params"]["fields"]
    assert len(cands) == 10

    first = cands[0]
    assert first.source == "aic"
    assert first.confidence == 0.0
    assert first.title == "Paris Street; Rainy Day"
    assert first.artist == "Gustave Caillebotte"
    assert first.date_created == "1877"
    assert first.location_painted == "France"
    assert first.medium == "Oil on canvas"
    # empty string from the source becomes None
    assert first.style is None
    assert first.raw_json["id"] == 20684
    assert cands[1].artist is None


def test_aic_http_error_returns_empty():
    assert _run(AicSource(), "x", lambda request: httpx.Response(503)) == []


def test_aic_network_error_returns_empty():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    assert _run(AicSource(), "x", handler) == []


def test_aic_bad_json_returns_empty():
    assert _run(AicSource(), "x", lambda request: httpx.Response(200, content=b"<html>")) == []


def test_met_search_then_sequential_details_skipping_failures():
    calls = []

    def handler(request):
        path = request.url.path
        calls.append(path)
        if path.endswith("/search"):
            assert request.url.params["hasImages"] == "true"
            return httpx.Response(200, json={"total": 12, "objectIDs": list(range(1, 13))})
        oid = int(path.rsplit("/", 1)[-1])
        if oid == 2:
            return httpx.Response(404)
        if oid == 3:
            raise httpx.ReadTimeout("slow", request=request)
        return httpx.Response(
            200,
            json={
                "objectID": oid,
                "title": f"Object {oid}",
                "artistDisplayName": "Vincent van Gogh" if oid == 1 else "",
                "objectDate": "1889",
                "city": "",
                "country": "Netherlands",
                "period": "",
                "culture": "Dutch",
                "medium": "Oil on canvas",
            },
        )

    cands = _run(MetSource(), "wheat field cypresses", handler)

    detail_calls = [c for c in calls if "/objects/" in c]
    assert len(detail_calls) == 10
    assert len(cands) == 8
    assert [c.raw_json["objectID"] for c in cands][:2] == [1, 4]

    first = cands[0]
    assert first.source == "met"
    assert first.artist == "Vincent van Gogh"
    assert first.location_painted == "Netherlands"
    assert first.style == "Dutch"
    assert cands[1].artist is None


def test_met_no_object_ids_returns_empty():
    handler = lambda request: httpx.Response(200, json={"total": 0, "objectIDs": None})
    assert _run(MetSource(), "nothing", handler) == []


def test_met_search_failure_returns_empty():
    def handler(request):
        raise httpx.ConnectError("down", request=request)

    assert _run(MetSource(), "x", handler) == []
