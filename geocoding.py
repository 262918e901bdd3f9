# geocoding.py
import logging
from typing import Optional

import requests
from pydantic import ValidationError

import config
from models import Coordinates

log = logging.getLogger(__name__)


def geocode_place(name: str) -> Optional[Coordinates]:
    """Resolve a free-text place name to coordinates with the Open-Meteo geocoder.

    Returns None when nothing matches or the service is unavailable.
    """
    params = {"name": name.strip(), "count": 1, "language": "en", "format": "json"}
    try:
        response = requests.get(config.GEOCODING_URL, params=params, timeout=config.GEOCODING_TIMEOUT)
        response.raise_for_status()
        results = (response.json() or {}).get("results") or []
        if not results:
            log.info("No geocoding results for %r", name)
            return None
        top = results[0]
        return Coordinates(latitude=top["latitude"], longitude=top["longitude"])
    except requests.exceptions.RequestException as e:
        log.warning("Geocoding request failed for %r: %s", name, e)
        return None
    except (KeyError, TypeError, ValueError, ValidationError) as e:
        log.warning("Unexpected geocoding response for %r: %s", name, e)
        return None
