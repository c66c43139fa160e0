"""OpenAI image edits as the fallback headshot provider."""

import asyncio
import base64
import logging
from dataclasses import dataclass

import httpx
from openai import OpenAIError

from src.core.openai import TimedOpenAIClient
from src.providers.base import ImageResult, ProviderError

logger = logging.getLogger(__name__)


@dataclass
class OpenAIImageProvider:
    """Renders a style by editing the reference photo with an OpenAI image model."""

    client: TimedOpenAIClient
    http_client: httpx.AsyncClient
    model: str

    @property
    def name(self) -> str:
        return f"openai:{self.model}"

    async def generate(self, reference_url: str, prompt: str) -> ImageResult:
        try:
            download = await self.http_client.get(reference_url, timeout=30)
            download.raise_for_status()
        except httpx.HTTPError as e:
            raise ProviderError(self.name, f"could not fetch reference image: {e}") from e

        content_type = download.headers.get("content-type", "image/jpeg")
        try:
            response = await asyncio.to_thread(
                self.client.images.edit,
                model=self.model,
                image=("reference", download.content, content_type),
                prompt=prompt,
                size="1024x1536",
            )
        except OpenAIError as e:
            raise ProviderError(self.name, str(e)) from e

        if not response.data or not response.data[0].b64_json:
            raise ProviderError(self.name, "no image in response")
        return ImageResult(
            provider=self.name,
            content=base64.b64decode(response.data[0].b64_json),
            content_type="image/png",
        )
