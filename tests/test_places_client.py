import asyncio
from typing import List

import httpx
import pytest

from app.tools.places import PlacesClient, place_type_for


class DummyResponse:
    def __init__(self, payload, status_code: int = 200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            request = httpx.Request("GET", "https://maps.example/test")
            raise httpx.HTTPStatusError("boom", request=request, response=httpx.Response(self.status_code, request=request))
        return None

    def json(self):
        return self._payload


class DummyAsyncClient:
    def __init__(self, response: DummyResponse, requests: List[tuple], *args, **kwargs):
        self.response = response
        self.requests = requests

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return None

    async def get(self, url, params):
        self.requests.append((url, params))
        return self.response


def _patch_client(monkeypatch, response: DummyResponse) -> List[tuple]:
    requests: List[tuple] = []
    monkeypatch.setattr(httpx, "AsyncClient", lambda *a, **kw: DummyAsyncClient(response, requests, *a, **kw))
    return requests


def test_search_returns_results_and_builds_query(monkeypatch):
    payload = {"status": "OK", "results": [{"place_id": "p1", "name": "Sea View"}, "garbage"]}
    requests = _patch_client(monkeypatch, DummyResponse(payload))

    result = asyncio.run(PlacesClient(api_key="k").search(15.49, 73.82, 5000, "restaurant", cuisine="Thai"))

    assert result.ok
    assert [r["place_id"] for r in result.items] == ["p1"]
    url, params = requests[0]
    assert url.endswith("/nearbysearch/json")
    assert params["location"] == "15.49,73.82"
    assert params["radius"] == 5000
    assert params["type"] == "thai_restaurant"


def test_zero_results_is_an_empty_success(monkeypatch):
    _patch_client(monkeypatch, DummyResponse({"status": "ZERO_RESULTS", "results": []}))

    result = asyncio.run(PlacesClient(api_key="k").search(15.49, 73.82, 5000, "hotel"))

    assert result.ok
    assert result.items == []


@pytest.mark.parametrize(
    "response",
    [
        DummyResponse({"status": "OVER_QUERY_LIMIT"}),
        DummyResponse({}, status_code=503),
    ],
)
def test_provider_errors_become_failed_results(monkeypatch, response):
    _patch_client(monkeypatch, response)

    result = asyncio.run(PlacesClient(api_key="k").search(15.49, 73.82, 5000, "hotel"))

    assert not result.ok
    assert result.items == []
    assert result.error.source == "places:hotel"


def test_missing_key_skips_the_request(monkeypatch):
    monkeypatch.delenv("GOOGLE_MAPS_API_KEY", raising=False)
    requests = _patch_client(monkeypatch, DummyResponse({"status": "OK", "results": []}))

    result = asyncio.run(PlacesClient().search(15.49, 73.82, 5000, "hotel"))

    assert not result.ok
    assert requests == []


def test_place_type_mapping():
    assert place_type_for("hotel") == "lodging"
    assert place_type_for("restaurant") == "restaurant"
    assert place_type_for("restaurant", "Goan") == "restaurant"
    assert place_type_for("restaurant", "Fast Food") == "fast_food_restaurant"
