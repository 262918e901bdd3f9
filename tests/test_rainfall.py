import time
from datetime import date

import pytest
import requests

import config
import rainfall
from models import Coordinates, FallbackRainfall, ResolvedRainfall


class FakeResponse:
    def __init__(self, payload=None, status_code=200, json_error=None):
        self._payload = payload
        self.status_code = status_code
        self._json_error = json_error

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Server Error")

    def json(self):
        if self._json_error:
            raise self._json_error
        return self._payload


@pytest.fixture(autouse=True)
def empty_cache():
    rainfall.clear_cache()
    yield
    rainfall.clear_cache()


@pytest.fixture
def archive(monkeypatch):
    """Patch the archive transport; returns the list of captured request params."""
    calls = []
    state = {"response": FakeResponse({"daily": {"precipitation_sum": [1.25, None, 3.25, 0.0]}})}

    def fake_get(url, params=None, timeout=None):
        calls.append({"url": url, "params": params, "timeout": timeout})
        response = state["response"]
        if isinstance(response, Exception):
            raise response
        return response

    monkeypatch.setattr(rainfall.requests, "get", fake_get)
    return calls, state


def test_sums_daily_series_and_rounds(archive):
    outcome = rainfall.resolve_rainfall(12.97, 77.59, today=date(2026, 3, 5))

    assert outcome == ResolvedRainfall(value_mm=5.0)
    assert outcome.kind == "resolved"


def test_requests_previous_calendar_year(archive):
    calls, _ = archive

    rainfall.resolve_rainfall(12.97, 77.59, today=date(2026, 3, 5))

    params = calls[0]["params"]
    assert calls[0]["url"] == config.RAINFALL_ARCHIVE_URL
    assert params["latitude"] == 12.97
    assert params["longitude"] == 77.59
    assert params["start_date"] == "2025-01-01"
    assert params["end_date"] == "2025-12-31"
    assert params["daily"] == "precipitation_sum"
    assert params["timezone"] == "GMT"


def test_previous_year_range_on_new_years_day():
    assert rainfall.previous_year_range(date(2026, 1, 1)) == (date(2025, 1, 1), date(2025, 12, 31))


@pytest.mark.parametrize("response", [
    requests.exceptions.ConnectionError("connection refused"),
    requests.exceptions.Timeout("timed out"),
    FakeResponse({"error": True}, status_code=500),
    FakeResponse({"daily": {}}),
    FakeResponse({"daily": {"precipitation_sum": []}}),
    FakeResponse({"daily": {"precipitation_sum": ["lots"]}}),
    FakeResponse(None),
    FakeResponse(json_error=ValueError("Expecting value")),
    FakeResponse({"daily": {"precipitation_sum": [float("nan"), 2.0]}}),
    FakeResponse({"daily": {"precipitation_sum": [float("inf")]}}),
    FakeResponse({"daily": {"precipitation_sum": [1e308, 1e308]}}),
    FakeResponse({"daily": {"precipitation_sum": [None, None]}}),
])
def test_any_failure_falls_back_to_800(archive, response):
    _, state = archive
    state["response"] = response

    outcome = rainfall.resolve_rainfall(12.97, 77.59)

    assert isinstance(outcome, FallbackRainfall)
    assert outcome.value_mm == 800
    assert outcome.reason


def test_numeric_contract_returns_fallback_value(archive):
    _, state = archive
    state["response"] = requests.exceptions.ConnectionError("down")

    assert rainfall.annual_rainfall_mm(0.0, 0.0) == 800


def test_failures_are_not_cached(archive):
    calls, state = archive
    state["response"] = FakeResponse({}, status_code=503)
    rainfall.resolve_rainfall(1.0, 2.0)

    state["response"] = FakeResponse({"daily": {"precipitation_sum": [10.0, 20.0]}})
    outcome = rainfall.resolve_rainfall(1.0, 2.0)

    assert outcome == ResolvedRainfall(value_mm=30.0)
    assert len(calls) == 2


def test_archive_cached_for_a_day(archive):
    calls, _ = archive

    rainfall.resolve_rainfall(1.0, 2.0, today=date(2026, 6, 1))
    rainfall.resolve_rainfall(1.0, 2.0, today=date(2026, 6, 1))
    assert len(calls) == 1

    # a different date range is a different key
    rainfall.resolve_rainfall(1.0, 2.0, today=date(2027, 6, 1))
    assert len(calls) == 2

    for entry in rainfall._archive_cache.values():
        entry["timestamp"] = time.time() - config.RAINFALL_CACHE_SECONDS - 1
    rainfall.resolve_rainfall(1.0, 2.0, today=date(2026, 6, 1))
    assert len(calls) == 3


@pytest.mark.parametrize("location,expected", [
    ("12.97, 77.59", Coordinates(latitude=12.97, longitude=77.59)),
    ("-33.86,151.21", Coordinates(latitude=-33.86, longitude=151.21)),
    ("Bengaluru", None),
    ("Pune, India", None),
    ("1, 2, 3", None),
    ("95, 10", None),
    ("", None),
    (None, None),
])
def test_parse_coordinates(location, expected):
    assert rainfall.parse_coordinates(location) == expected


def test_resolve_location_prefers_explicit_coordinates():
    coords = rainfall.resolve_location("12.97, 77.59", latitude=18.52, longitude=73.85)

    assert coords == Coordinates(latitude=18.52, longitude=73.85)


def test_resolve_location_parses_pair():
    assert rainfall.resolve_location("18.52, 73.85") == Coordinates(latitude=18.52, longitude=73.85)


def test_resolve_location_defaults_for_place_names():
    assert rainfall.resolve_location("Green Valley, Pune, India") == config.DEFAULT_COORDINATES


def test_resolve_location_uses_geocoder():
    seen = []

    def geocoder(name):
        seen.append(name)
        return Coordinates(latitude=18.52, longitude=73.85)

    coords = rainfall.resolve_location("Pune", geocoder=geocoder)

    assert coords == Coordinates(latitude=18.52, longitude=73.85)
    assert seen == ["Pune"]


def test_resolve_location_geocoder_miss_uses_default():
    coords = rainfall.resolve_location("Atlantis", geocoder=lambda name: None)

    assert coords == config.DEFAULT_COORDINATES


def test_expired_entries_evicted_on_write(archive):
    rainfall.resolve_rainfall(1.0, 2.0, today=date(2026, 6, 1))
    for entry in rainfall._archive_cache.values():
        entry["timestamp"] = time.time() - config.RAINFALL_CACHE_SECONDS - 1

    rainfall.resolve_rainfall(3.0, 4.0, today=date(2026, 6, 1))

    assert list(rainfall._archive_cache) == [(3.0, 4.0, "2025-01-01", "2025-12-31")]


def test_all_null_series_is_not_a_real_figure(archive):
    _, state = archive
    state["response"] = FakeResponse({"daily": {"precipitation_sum": [None, None, None]}})

    outcome = rainfall.resolve_rainfall(1.0, 2.0)

    assert outcome.kind == "fallback"
    assert "no precipitation values" in outcome.reason
    assert rainfall._archive_cache == {}
