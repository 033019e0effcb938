import logging
from io import BytesIO
from typing import Optional, Protocol

import google.generativeai as genai
from PIL import Image

from studio.errors import GenerationError
from studio.presets import photographer_prompt, refine_prompt

logger = logging.getLogger(__name__)


class ImageGenerator(Protocol):
    async def generate(self, image: bytes, style: str, angle: str) -> bytes:
        ...

    async def refine(self, image: bytes, prompt: str) -> bytes:
        ...


def first_image_part(response) -> Optional[bytes]:
    """Pull the first inline image out of a generate_content response."""
    if not response.candidates:
        return None
    for part in response.candidates[0].content.parts:
        if part.inline_data:
            return part.inline_data.data
    return None


class GeminiStudioClient:
    """Talks to the Gemini image model. Every call is a single attempt."""

    def __init__(self, api_key: Optional[str], model_name: str = "gemini-2.5-flash-image"):
        self.model_name = model_name
        if api_key:
            genai.configure(api_key=api_key)
            self.model = genai.GenerativeModel(model_name=model_name)
        else:
            logger.warning("GEMINI_API_KEY not set; every generation request will fail")
            self.model = None

    @classmethod
    def from_settings(cls, settings) -> "GeminiStudioClient":
        return cls(settings.gemini_api_key, settings.image_model)

    async def _render(self, image: bytes, prompt: str, what: str) -> bytes:
        if self.model is None:
            raise GenerationError("GEMINI_API_KEY is not configured.")

        reference = Image.open(BytesIO(image))
        response = await self.model.generate_content_async(
            [reference, prompt],
            generation_config={"candidate_count": 1},
        )

        data = first_image_part(response)
        if data:
            return data
        block_reason = response.prompt_feedback.block_reason if response.prompt_feedback else "Unknown"
        raise GenerationError(f"The AI studio failed to render the {what} image. Reason: {block_reason}")

    async def generate(self, image: bytes, style: str, angle: str) -> bytes:
        return await self._render(image, photographer_prompt(style, angle), angle)

    async def refine(self, image: bytes, prompt: str) -> bytes:
        return await self._render(image, refine_prompt(prompt), "refined")
