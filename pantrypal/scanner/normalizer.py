"""Turn an untrusted model reply into validated detection candidates."""

from __future__ import annotations

import json
import logging
import math
import re

from .models import DEFAULT_CATEGORY, DEFAULT_LOCATION, STORAGE_LOCATIONS, DetectionCandidate
from .result import DetectionError, DetectionErrorKind, Err, Ok, Result

logger = logging.getLogger(__name__)

MIN_CONFIDENCE = 0.3
DEFAULT_CONFIDENCE = 0.9
DEFAULT_EXPIRY_DAYS = 7
MAX_EXPIRY_DAYS = 365

_OPEN_FENCE_RE = re.compile(r"^```[A-Za-z0-9_-]*")
_CLOSE_FENCE_RE = re.compile(r"```$")

_NAME_KEYS = ("name", "itemName")
_LOCATION_KEYS = ("suggestedLocation", "suggested_location")
_EXPIRY_KEYS = (
    "estimatedExpiryDays",
    "estimated_expiry_days",
    "estimatedExpiry",
    "expiry_days",
)
_LOCATIONS_BY_KEY = {loc.casefold(): loc for loc in STORAGE_LOCATIONS}


def strip_fences(text: str) -> str:
    """Remove a leading ```json and a trailing ``` marker, each if present."""
    cleaned = _OPEN_FENCE_RE.sub("", text.strip(), count=1).strip()
    return _CLOSE_FENCE_RE.sub("", cleaned, count=1).strip()


def normalize(
    raw: str, min_confidence: float = MIN_CONFIDENCE
) -> Result[list[DetectionCandidate], DetectionError]:
    """Parse and validate a model reply.

    Returns Err(PARSE_ERROR) when the reply is not a JSON array and
    Err(NO_ITEMS_DETECTED) when it is one but nothing usable survives
    validation and the confidence threshold.
    """
    try:
        data = json.loads(strip_fences(raw))
    except (json.JSONDecodeError, TypeError) as e:
        return Err(DetectionError(DetectionErrorKind.PARSE_ERROR, f"Reply is not JSON: {e}", raw=raw))

    if not isinstance(data, list):
        return Err(DetectionError(
            DetectionErrorKind.PARSE_ERROR,
            f"Expected a JSON array, got {type(data).__name__}",
            raw=raw,
        ))

    seen: dict[str, DetectionCandidate] = {}
    dropped = 0
    for element in data:
        candidate = _candidate(element)
        if candidate is None or candidate.confidence < min_confidence:
            dropped += 1
            continue
        key = candidate.name.casefold()
        if key not in seen or candidate.confidence > seen[key].confidence:
            seen[key] = candidate

    if dropped:
        logger.debug("Dropped %d of %d detected elements", dropped, len(data))

    if not seen:
        return Err(DetectionError(DetectionErrorKind.NO_ITEMS_DETECTED, "No items detected"))
    return Ok(list(seen.values()))


def _candidate(element: object) -> DetectionCandidate | None:
    if not isinstance(element, dict):
        return None

    name = _first(element, _NAME_KEYS)
    if not isinstance(name, str) or not name.strip():
        return None

    category = element.get("category")
    if not isinstance(category, str) or not category.strip():
        category = DEFAULT_CATEGORY

    location = _first(element, _LOCATION_KEYS)
    if isinstance(location, str):
        location = _LOCATIONS_BY_KEY.get(location.strip().casefold(), DEFAULT_LOCATION)
    else:
        location = DEFAULT_LOCATION

    confidence = _number(element.get("confidence"))
    if confidence is None:
        confidence = DEFAULT_CONFIDENCE
    confidence = min(max(confidence, 0.0), 1.0)

    days = _number(_first(element, _EXPIRY_KEYS))
    if days is None:
        days = DEFAULT_EXPIRY_DAYS
    days = int(round(min(max(days, 1), MAX_EXPIRY_DAYS)))

    return DetectionCandidate(
        name=name.strip(),
        category=category.strip(),
        confidence=confidence,
        suggested_location=location,
        estimated_expiry_days=days,
    )


def _first(element: dict, keys: tuple[str, ...]) -> object:
    for key in keys:
        if element.get(key) is not None:
            return element[key]
    return None


def _number(value: object) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            return None
    if isinstance(value, (int, float)) and not math.isnan(value):
        return float(value)
    return None
