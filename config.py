# config.py
import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from models import Coordinates, SizingPolicy

load_dotenv()

log = logging.getLogger(__name__)

# ================================
# CONFIG
# ================================
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
GEMINI_BASE_URL = os.getenv("GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta/models")
GEMINI_TIMEOUT = float(os.getenv("GEMINI_TIMEOUT", "30"))

RAINFALL_ARCHIVE_URL = os.getenv("RAINFALL_ARCHIVE_URL", "https://archive-api.open-meteo.com/v1/archive")
RAINFALL_TIMEOUT = float(os.getenv("RAINFALL_TIMEOUT", "15"))
RAINFALL_CACHE_SECONDS = 24 * 60 * 60
FALLBACK_RAINFALL_MM = 800.0

GEOCODING_URL = os.getenv("GEOCODING_URL", "https://geocoding-api.open-meteo.com/v1/search")
GEOCODING_TIMEOUT = float(os.getenv("GEOCODING_TIMEOUT", "10"))
GEOCODE_PLACE_NAMES = os.getenv("GEOCODE_PLACE_NAMES", "0").lower() in ("1", "true", "yes")

# New Delhi
DEFAULT_COORDINATES = Coordinates(latitude=28.6139, longitude=77.2090)

BACKEND_URL = os.getenv("BACKEND_URL", "http://localhost:8000")
SIZING_POLICY_FILE = os.getenv("SIZING_POLICY_FILE")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def load_policy(path: Optional[str] = None) -> SizingPolicy:
    """Load a SizingPolicy from a JSON file, or the built-in defaults when no file is set."""
    path = path or SIZING_POLICY_FILE
    if not path:
        return SizingPolicy()
    policy_path = Path(path)
    if not policy_path.exists():
        raise FileNotFoundError(f"{policy_path} not found. Unset SIZING_POLICY_FILE to use the default policy.")
    log.info("Loading sizing policy from %s", policy_path)
    return SizingPolicy.model_validate_json(policy_path.read_text(encoding="utf-8"))


def configure_logging(level: str = LOG_LEVEL) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
