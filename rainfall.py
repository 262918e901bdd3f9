# rainfall.py
import logging
import math
import time
from datetime import date
from typing import Callable, Dict, List, Optional, Tuple

import requests
from pydantic import ValidationError

import config
from calc_utils import round_half_up
from models import Coordinates, FallbackRainfall, RainfallOutcome, ResolvedRainfall

log = logging.getLogger(__name__)

# (lat, lon, start, end) -> {"timestamp": ..., "data": [...]}
_archive_cache: Dict[Tuple[float, float, str, str], dict] = {}


def clear_cache() -> None:
    _archive_cache.clear()


def _evict_expired() -> None:
    now = time.time()
    for key in [k for k, entry in _archive_cache.items() if now - entry["timestamp"] >= config.RAINFALL_CACHE_SECONDS]:
        del _archive_cache[key]


# ================================
# LOCATION
# ================================
def parse_coordinates(location: Optional[str]) -> Optional[Coordinates]:
    """Read a "lat, lon" pair. Anything else (place names, garbage) gives None."""
    if not location:
        return None
    parts = [p.strip() for p in location.split(",")]
    if len(parts) != 2:
        return None
    try:
        return Coordinates(latitude=float(parts[0]), longitude=float(parts[1]))
    except (ValueError, ValidationError):
        return None


def resolve_location(
    location: Optional[str],
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
    geocoder: Optional[Callable[[str], Optional[Coordinates]]] = None,
) -> Coordinates:
    """Pick the coordinates to query rainfall for.

    Order: explicit lat/lon, a "lat, lon" location string, the place-name
    geocoder (when one is given), and finally the default reference city.
    """
    if latitude is not None and longitude is not None:
        return Coordinates(latitude=latitude, longitude=longitude)

    coords = parse_coordinates(location)
    if coords is not None:
        return coords

    if geocoder is not None and location:
        coords = geocoder(location)
        if coords is not None:
            return coords

    log.info("Could not resolve location %r, using default coordinates", location)
    return config.DEFAULT_COORDINATES


# ================================
# ARCHIVE TRANSPORT
# ================================
def previous_year_range(today: Optional[date] = None) -> Tuple[date, date]:
    """Jan 1 to Dec 31 of the most recently completed calendar year."""
    today = today or date.today()
    year = today.year - 1
    return date(year, 1, 1), date(year, 12, 31)


def fetch_daily_precipitation(lat: float, lon: float, start: date, end: date) -> List[Optional[float]]:
    """Daily precipitation sums (mm) from the weather archive.

    Responses are cached in-process for 24 hours per coordinate/date range.
    Raises requests exceptions on transport errors and ValueError on a
    malformed payload.
    """
    cache_key = (round(lat, 4), round(lon, 4), start.isoformat(), end.isoformat())
    entry = _archive_cache.get(cache_key)
    if entry and (time.time() - entry["timestamp"]) < config.RAINFALL_CACHE_SECONDS:
        log.debug("Cache hit for precipitation at %s", cache_key)
        return entry["data"]

    params = {
        "latitude": lat,
        "longitude": lon,
        "start_date": start.isoformat(),
        "end_date": end.isoformat(),
        "daily": "precipitation_sum",
        "timezone": "GMT",
    }
    log.info("Fetching precipitation archive for %s", cache_key)
    response = requests.get(config.RAINFALL_ARCHIVE_URL, params=params, timeout=config.RAINFALL_TIMEOUT)
    response.raise_for_status()
    data = response.json()

    daily = (data or {}).get("daily") or {}
    values = daily.get("precipitation_sum")
    if not isinstance(values, list) or not values:
        raise ValueError("archive response has no daily precipitation_sum series")
    values = [None if v is None else float(v) for v in values]
    if all(v is None for v in values):
        raise ValueError("archive response has no precipitation values")
    if not all(math.isfinite(v) for v in values if v is not None):
        raise ValueError("archive response has non-finite precipitation values")

    _evict_expired()
    _archive_cache[cache_key] = {"timestamp": time.time(), "data": values}
    return values


# ================================
# RESOLVER
# ================================
def resolve_rainfall(lat: float, lon: float, today: Optional[date] = None) -> RainfallOutcome:
    """Annual rainfall for the last calendar year, or the fallback figure.

    Never raises: every failure becomes a FallbackRainfall carrying the reason.
    """
    start, end = previous_year_range(today)
    try:
        values = fetch_daily_precipitation(lat, lon, start, end)
        total = round_half_up(sum(v for v in values if v is not None))
    except requests.exceptions.RequestException as e:
        log.warning("Rainfall archive request failed for (%s, %s): %s", lat, lon, e)
        return FallbackRainfall(value_mm=config.FALLBACK_RAINFALL_MM, reason=f"archive request failed: {e}")
    except (ValueError, TypeError, AttributeError, OverflowError) as e:
        log.warning("Malformed rainfall archive response for (%s, %s): %s", lat, lon, e)
        return FallbackRainfall(value_mm=config.FALLBACK_RAINFALL_MM, reason=f"malformed archive response: {e}")

    return ResolvedRainfall(value_mm=float(total))


def annual_rainfall_mm(lat: float, lon: float) -> float:
    return resolve_rainfall(lat, lon).value_mm
