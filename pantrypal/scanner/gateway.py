"""Vision request gateway: credential resolution and the single model call."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Callable

from .result import DetectionError, DetectionErrorKind, Err, Ok, Result
from .vision import VisionBackend, create_backend

if TYPE_CHECKING:
    from .camera import RawImage
    from .config import VisionConfig
    from .credentials import CredentialResolver

logger = logging.getLogger(__name__)

DETECTION_PROMPT = """\
Identify every food item visible in this image.
Respond ONLY with a JSON array, no other text, markdown or explanation:
[
  {"name": "item name", "category": "category", "confidence": 0.0-1.0,
   "suggestedLocation": "Pantry" | "Fridge" | "Freezer",
   "estimatedExpiryDays": whole number of days until it spoils}
]

Choose category from: Produce, Dairy, Protein, Pantry, Frozen, Beverages,
Bakery, Other.

Use confidence 0.8-1.0 when the item is clearly visible, 0.5-0.8 when
somewhat uncertain, and below 0.5 when barely visible.
Return [] if there is no food in the image.
"""


class VisionGateway:
    """Build and send one multimodal detection request per image.

    Failures are returned, never retried: a missing credential yields
    CREDENTIAL_MISSING without touching the network, and a timeout,
    transport error or empty reply yields NETWORK_FAILURE.
    """

    def __init__(
        self,
        resolver: CredentialResolver,
        config: VisionConfig,
        backend_factory: Callable[[VisionConfig, str], VisionBackend] = create_backend,
    ) -> None:
        self._resolver = resolver
        self._config = config
        self._backend_factory = backend_factory

    async def detect(self, image: RawImage, user_id: str | None) -> Result[str, DetectionError]:
        credential = self._resolver.resolve(user_id)
        if credential is None:
            return Err(DetectionError(
                DetectionErrorKind.CREDENTIAL_MISSING,
                "No vision API key configured",
            ))

        backend = self._backend_factory(self._config, credential.api_key)
        logger.debug(
            "Sending %s image to %s backend (%s key)",
            image.media_type, self._config.backend, credential.source,
        )
        try:
            text = await asyncio.wait_for(
                backend.complete(DETECTION_PROMPT, image),
                timeout=self._config.timeout,
            )
        except ImportError:
            raise
        except asyncio.TimeoutError:
            return Err(DetectionError(
                DetectionErrorKind.NETWORK_FAILURE,
                f"Vision request timed out after {self._config.timeout:g}s",
            ))
        except Exception as e:  # SDK transport errors share no common base
            return Err(DetectionError(
                DetectionErrorKind.NETWORK_FAILURE,
                f"Vision request failed: {type(e).__name__}: {e}",
            ))

        if not text or not text.strip():
            return Err(DetectionError(
                DetectionErrorKind.NETWORK_FAILURE,
                "Vision service returned an empty reply",
            ))
        return Ok(text)
