"""Vision backend base class and factory."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..camera import RawImage
    from ..config import VisionConfig


class VisionBackend(ABC):
    """A multimodal model endpoint that answers an instruction about one image."""

    @abstractmethod
    async def complete(self, prompt: str, image: RawImage) -> str:
        """Send ``prompt`` and ``image`` as one request and return the reply text.

        Transport errors propagate; callers decide how to degrade.
        """
        ...


def create_backend(config: VisionConfig, api_key: str) -> VisionBackend:
    """Create a vision backend for ``config.backend`` bound to ``api_key``."""
    backend_name = config.backend

    match backend_name:
        case "gemini":
            from .gemini import GeminiVisionBackend

            return GeminiVisionBackend(api_key=api_key, model=config.gemini.model)
        case "claude":
            from .claude import ClaudeVisionBackend

            return ClaudeVisionBackend(api_key=api_key, model=config.claude.model)
        case _:
            raise ValueError(
                f"Unknown vision backend: {backend_name!r} "
                f"(choose gemini or claude)"
            )
