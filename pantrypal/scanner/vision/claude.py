"""Claude API vision backend."""

from __future__ import annotations

from typing import TYPE_CHECKING

from . import VisionBackend

if TYPE_CHECKING:
    from ..camera import RawImage


class ClaudeVisionBackend(VisionBackend):
    """Ask Claude about an image. The reply may come back fenced."""

    def __init__(self, api_key: str, model: str = "claude-sonnet-4-5-20250929") -> None:
        self._api_key = api_key
        self._model = model

    async def complete(self, prompt: str, image: RawImage) -> str:
        try:
            import anthropic
        except ImportError:
            raise ImportError(
                "anthropic SDK is required: pip install anthropic"
            ) from None

        content = [
            {
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": image.media_type,
                    "data": image.b64,
                },
            },
            {"type": "text", "text": prompt},
        ]

        client = anthropic.AsyncAnthropic(api_key=self._api_key)
        response = await client.messages.create(
            model=self._model,
            max_tokens=2048,
            messages=[{"role": "user", "content": content}],
        )
        return response.content[0].text
