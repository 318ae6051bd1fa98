"""Request handler for the serverless scan endpoint.

Request body: ``{"image": "<base64>"}``. Responses are ``(status, payload)``
pairs: 200 ``{"items": [...], "source": ...}`` or 4xx/5xx ``{"error": ...}``.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from .camera import RawImage
from .result import DetectionErrorKind, Err, Ok

if TYPE_CHECKING:
    from .detection import DetectionService

logger = logging.getLogger(__name__)

_DATA_URL_RE = re.compile(r"^data:(image/[A-Za-z0-9.+-]+);base64,")


class BadRequest(ValueError):
    pass


def decode_image(body: object) -> RawImage:
    """Validate the request body and decode its image."""
    if not isinstance(body, dict):
        raise BadRequest("Invalid request body")
    payload = body.get("image") or body.get("imageBase64")
    if not payload or not isinstance(payload, str):
        raise BadRequest("Missing or invalid image payload")

    media_type = "image/jpeg"
    m = _DATA_URL_RE.match(payload)
    if m:
        media_type = m.group(1)
        payload = payload[m.end():]

    # line-wrapped base64 is accepted
    payload = "".join(payload.split())

    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise BadRequest("Invalid base64 image data") from None
    if not data:
        raise BadRequest("Empty image payload")

    return RawImage(
        data=data,
        media_type=media_type,
        captured_at=datetime.now(timezone.utc).isoformat(),
    )


async def handle_scan_request(
    body: object, service: DetectionService, user_id: str | None = None
) -> tuple[int, dict]:
    try:
        image = decode_image(body)
    except BadRequest as e:
        return 400, {"error": str(e)}

    match await service.detect(image, user_id):
        case Ok(value=outcome):
            return 200, {
                "items": [c.to_dict() for c in outcome.candidates],
                "source": outcome.source,
            }
        case Err(error=error) if error.kind is DetectionErrorKind.NO_ITEMS_DETECTED:
            return 200, {"items": [], "source": "vision"}
        case Err(error=error):
            logger.error("Scan request failed: %s", error.message)
            return 502, {"error": error.message}
