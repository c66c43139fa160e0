"""Gemini image provider for character sheets and identity-locked headshots.

Identity lock is a two-step pipeline. A character sheet (front, both
profiles and a 3/4 view of the customer on white) is rendered once per
order from the reference photo. Every style is then rendered from the
reference photo plus that sheet, with instructions to keep the face
unchanged and vary only clothing, setting and light.
"""

import asyncio
import logging
from dataclasses import dataclass

import httpx
from google import genai
from google.genai import errors, types

from src.core.styles import Gender
from src.providers.base import ImageResult, ProviderError

logger = logging.getLogger(__name__)

CHARACTER_SHEET_PROMPT = (
    "Create a character reference sheet: front view, left profile, right profile, 3/4 view, "
    "neutral expression, plain white background, same person as in the attached reference image, "
    "ultra-detailed facial features, consistent identity."
)

IDENTITY_LOCK_PROMPT = """STRICT IDENTITY LOCK USING REFERENCE IMAGES:

Use both attached images as the ground truth for this person's identity.
- Image 1 (main reference): exact face, skin tone and texture, eye shape and color, nose, mouth, jawline, hairline, marks, apparent age.
- Image 2 (character sheet): multi-angle confirmation of proportions and head shape from front, profile and 3/4 views.

Preserve identical facial features, bone structure, face shape, eye placement and color, nose and lip shape, skin texture, hair texture and parting, and apparent age. No morphing, no aging, no blending with other faces.

Only change clothing, setting, lighting and pose, as follows. {style}

Ultra-photorealistic professional headshot for business profiles, sharp facial details, lighting on the face consistent with the references."""

GENDER_PROMPT = "Look at this photo of a person. Is this person male or female? Reply with exactly one word: male or female"


def _image_part(response: types.GenerateContentResponse) -> types.Blob | None:
    for candidate in response.candidates or []:
        if not candidate.content:
            continue
        for part in candidate.content.parts or []:
            if part.inline_data and part.inline_data.data:
                return part.inline_data
    return None


def parse_gender(answer: str) -> Gender | None:
    """Map a free-text classification to a gender, or None if unclear."""
    answer = answer.strip().lower()
    if "female" in answer or "woman" in answer:
        return "female"
    if "male" in answer or "man" in answer:
        return "male"
    return None


@dataclass
class GeminiImageProvider:
    """Gemini image generation over downloaded reference photos."""

    client: genai.Client
    http_client: httpx.AsyncClient
    model: str
    text_model: str

    @property
    def name(self) -> str:
        return f"gemini:{self.model}"

    async def _fetch(self, url: str) -> types.Part:
        try:
            response = await self.http_client.get(url, timeout=30)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise ProviderError(self.name, f"could not fetch {url}: {e}") from e
        mime_type = response.headers.get("content-type", "image/jpeg").split(";")[0]
        return types.Part.from_bytes(data=response.content, mime_type=mime_type)

    async def _render(self, contents: list[types.Part | str]) -> ImageResult:
        try:
            response = await asyncio.to_thread(
                self.client.models.generate_content,
                model=self.model,
                contents=contents,
                config=types.GenerateContentConfig(response_modalities=["IMAGE", "TEXT"]),
            )
        except errors.APIError as e:
            raise ProviderError(self.name, str(e)) from e

        image = _image_part(response)
        if image is None:
            raise ProviderError(self.name, "no image in response")
        return ImageResult(provider=self.name, content=image.data, content_type=image.mime_type or "image/png")

    async def generate_character_sheet(self, reference_url: str) -> ImageResult:
        """Render the multi-angle character sheet for one reference photo.

        Raises:
            ProviderError: If the photo cannot be fetched or nothing is rendered.
        """
        reference = await self._fetch(reference_url)
        return await self._render([reference, CHARACTER_SHEET_PROMPT])

    async def detect_gender(self, reference_url: str) -> Gender | None:
        """Classify the person in the photo, used only to pick outfits.

        Returns:
            Gender | None: None when the model gives no usable answer.

        Raises:
            ProviderError: If the photo cannot be fetched or the call fails.
        """
        reference = await self._fetch(reference_url)
        try:
            response = await asyncio.to_thread(
                self.client.models.generate_content,
                model=self.text_model,
                contents=[reference, GENDER_PROMPT],
            )
        except errors.APIError as e:
            raise ProviderError(self.name, str(e)) from e
        gender = parse_gender(response.text or "")
        logger.info("Gender classification %r -> %s", (response.text or "")[:20], gender)
        return gender

    async def lock_identity(self, character_sheet_url: str) -> "IdentityLockedProvider":
        """Bind a character sheet, returning a provider for the style batch.

        Raises:
            ProviderError: If the character sheet cannot be fetched.
        """
        sheet = await self._fetch(character_sheet_url)
        return IdentityLockedProvider(self, sheet)

    async def generate_locked(self, reference_url: str, sheet: types.Part, prompt: str) -> ImageResult:
        reference = await self._fetch(reference_url)
        return await self._render([reference, sheet, IDENTITY_LOCK_PROMPT.format(style=prompt)])


@dataclass
class IdentityLockedProvider:
    """An ``ImageProvider`` that renders against one bound character sheet."""

    provider: GeminiImageProvider
    sheet: types.Part

    @property
    def name(self) -> str:
        return f"{self.provider.name}:identity-lock"

    async def generate(self, reference_url: str, prompt: str) -> ImageResult:
        return await self.provider.generate_locked(reference_url, self.sheet, prompt)
