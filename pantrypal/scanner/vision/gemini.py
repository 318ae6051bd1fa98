"""Gemini API vision backend."""

from __future__ import annotations

from typing import TYPE_CHECKING

from . import VisionBackend

if TYPE_CHECKING:
    from ..camera import RawImage


class GeminiVisionBackend(VisionBackend):
    """Ask Google Gemini about an image, requesting a JSON reply."""

    def __init__(self, api_key: str, model: str = "gemini-2.0-flash") -> None:
        self._api_key = api_key
        self._model = model

    async def complete(self, prompt: str, image: RawImage) -> str:
        try:
            import google.generativeai as genai
        except ImportError:
            raise ImportError(
                "google-generativeai SDK is required: pip install google-generativeai"
            ) from None

        genai.configure(api_key=self._api_key)
        model = genai.GenerativeModel(
            self._model,
            generation_config={
                "response_mime_type": "application/json",
                "temperature": 0.1,
            },
        )

        parts = [prompt, {"mime_type": image.media_type, "data": image.data}]
        response = await model.generate_content_async(parts)
        return response.text
