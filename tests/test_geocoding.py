import pytest
import requests

import geocoding
from models import Coordinates


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error")

    def json(self):
        return self._payload


def patch_get(monkeypatch, response):
    calls = []

    def fake_get(url, params=None, timeout=None):
        calls.append(params)
        if isinstance(response, Exception):
            raise response
        return response

    monkeypatch.setattr(geocoding.requests, "get", fake_get)
    return calls


def test_geocodes_top_result(monkeypatch):
    calls = patch_get(monkeypatch, FakeResponse({"results": [
        {"name": "Pune", "latitude": 18.52, "longitude": 73.85},
        {"name": "Pune", "latitude": 1.0, "longitude": 1.0},
    ]}))

    assert geocoding.geocode_place(" Pune ") == Coordinates(latitude=18.52, longitude=73.85)
    assert calls[0]["name"] == "Pune"
    assert calls[0]["count"] == 1


@pytest.mark.parametrize("response", [
    FakeResponse({}),
    FakeResponse({"results": []}),
    FakeResponse({"results": [{"name": "Nowhere"}]}),
    FakeResponse({}, status_code=500),
    requests.exceptions.Timeout("slow"),
])
def test_misses_and_failures_return_none(monkeypatch, response):
    patch_get(monkeypatch, response)

    assert geocoding.geocode_place("Atlantis") is None
