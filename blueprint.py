# blueprint.py
import json
import logging
import re
from typing import Tuple

import requests
from pydantic import ValidationError

import config
from models import RoofDimensions

log = logging.getLogger(__name__)

DATA_URI_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>[A-Za-z0-9+/=\s]+)$")

PROMPT = (
    "You are an expert architect who can read building blueprints. "
    "Analyze the provided blueprint image and extract the overall rooftop dimensions.\n"
    "Identify the main roof of the building. Determine its total length and width in meters. "
    "Return only these two values."
)

RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "length": {"type": "NUMBER", "description": "The length of the rooftop in meters."},
        "width": {"type": "NUMBER", "description": "The width of the rooftop in meters."},
    },
    "required": ["length", "width"],
}


class BlueprintExtractionError(Exception):
    """The vision service could not produce roof dimensions. The message is shown to the user."""


def parse_data_uri(uri: str) -> Tuple[str, str]:
    """Split 'data:<mimetype>;base64,<data>' into (mimetype, data)."""
    match = DATA_URI_RE.match(uri.strip()) if uri else None
    if not match:
        raise ValueError("Blueprint must be a base64 data URI: 'data:<mimetype>;base64,<encoded_data>'.")
    return match.group("mime"), re.sub(r"\s+", "", match.group("data"))


# ================================
# GEMINI API CALL
# ================================
def call_gemini_vision(mime_type: str, image_b64: str) -> str:
    url = f"{config.GEMINI_BASE_URL}/{config.GEMINI_MODEL}:generateContent"

    headers = {
        "Content-Type": "application/json",
        "x-goog-api-key": config.GEMINI_API_KEY,
    }

    payload = {
        "contents": [
            {"parts": [
                {"text": PROMPT},
                {"inline_data": {"mime_type": mime_type, "data": image_b64}},
            ]}
        ],
        "generationConfig": {
            "responseMimeType": "application/json",
            "responseSchema": RESPONSE_SCHEMA,
        },
    }

    try:
        response = requests.post(url, headers=headers, json=payload, timeout=config.GEMINI_TIMEOUT)
        log.info("Gemini response status: %s", response.status_code)
        response.raise_for_status()
        data = response.json()
        return data["candidates"][0]["content"]["parts"][0]["text"]
    except requests.exceptions.RequestException as e:
        log.error("Gemini API request error: %s", e)
        raise BlueprintExtractionError(f"Could not connect to the blueprint analysis service. {e}") from e
    except (KeyError, IndexError, TypeError, ValueError) as e:
        log.error("Gemini response parsing error: %s", e)
        raise BlueprintExtractionError("Failed to get a response from the AI model.") from e


def extract_dimensions(blueprint_data_uri: str) -> RoofDimensions:
    """Ask the vision model for the main roof's length and width in meters.

    Raises ValueError for a malformed data URI and BlueprintExtractionError
    when the service fails or returns nothing usable.
    """
    mime_type, image_b64 = parse_data_uri(blueprint_data_uri)
    if not config.GEMINI_API_KEY:
        raise BlueprintExtractionError("Blueprint analysis is not configured (GEMINI_API_KEY is missing).")

    text = call_gemini_vision(mime_type, image_b64)
    if not text or not text.strip():
        raise BlueprintExtractionError("Failed to get a response from the AI model.")

    try:
        dims = RoofDimensions.model_validate(json.loads(text))
    except (json.JSONDecodeError, ValidationError) as e:
        log.error("Unusable dimensions from Gemini: %r (%s)", text, e)
        raise BlueprintExtractionError("The AI model returned dimensions that could not be read.") from e

    if dims.length <= 0 or dims.width <= 0:
        raise BlueprintExtractionError("Could not find the roof dimensions on this blueprint.")
    return dims
