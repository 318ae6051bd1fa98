"""Detection stage: gateway → normalizer, with the fallback policy applied."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .fallback import fallback_results
from .models import DetectionCandidate
from .normalizer import MIN_CONFIDENCE, normalize
from .result import (
    FALLBACK_KINDS,
    DetectionError,
    DetectionErrorKind,
    Err,
    Ok,
    Result,
)

if TYPE_CHECKING:
    from .camera import RawImage
    from .gateway import VisionGateway

logger = logging.getLogger(__name__)


@dataclass
class DetectionOutcome:
    candidates: list[DetectionCandidate]
    source: str  # "vision" or "fallback"
    reason: DetectionError | None = None  # why the fallback was used


class DetectionService:
    """Run one detection and decide whether to substitute fallback results.

    Fallback results replace CREDENTIAL_MISSING, NETWORK_FAILURE and
    PARSE_ERROR only. NO_ITEMS_DETECTED is returned as an error so the
    caller can show an empty state.
    """

    def __init__(self, gateway: VisionGateway, min_confidence: float = MIN_CONFIDENCE) -> None:
        self._gateway = gateway
        self._min_confidence = min_confidence

    async def detect(
        self, image: RawImage, user_id: str | None
    ) -> Result[DetectionOutcome, DetectionError]:
        reply = await self._gateway.detect(image, user_id)
        match reply:
            case Ok(value=raw):
                result = normalize(raw, min_confidence=self._min_confidence)
            case Err():
                result = reply

        match result:
            case Ok(value=candidates):
                return Ok(DetectionOutcome(candidates=candidates, source="vision"))
            case Err(error=error) if error.kind in FALLBACK_KINDS:
                self._log_failure(error)
                return Ok(DetectionOutcome(
                    candidates=fallback_results(), source="fallback", reason=error,
                ))
            case Err(error=error):
                logger.info("No items detected in image")
                return Err(error)

    @staticmethod
    def _log_failure(error: DetectionError) -> None:
        match error.kind:
            case DetectionErrorKind.CREDENTIAL_MISSING:
                logger.debug("No credential configured; using fallback results")
            case DetectionErrorKind.NETWORK_FAILURE:
                logger.warning("Vision request failed, using fallback results: %s", error.message)
            case DetectionErrorKind.PARSE_ERROR:
                logger.warning(
                    "Unparseable vision reply, using fallback results: %s\nraw payload: %r",
                    error.message, error.raw,
                )
