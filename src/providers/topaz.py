"""Topaz Labs client for headshot upscaling."""

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from src.providers.base import ProviderError, parse_json_object

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UpscaleResult:
    """An upscaled rendition of one source image."""

    original_url: str
    upscaled_url: str
    scale: int
    width: int | None
    height: int | None


@dataclass
class TopazClient:
    """HTTPX-backed Topaz upscaling client."""

    api_key: str
    base_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, api_key: str, base_url: str) -> "TopazClient":
        """Create a Topaz client with a managed httpx session."""
        return cls(api_key=api_key, base_url=base_url, http_client=httpx.AsyncClient())

    async def upscale(
        self,
        image_url: str,
        scale: int = 4,
        face_enhancement: bool = True,
        creativity: int = 0,
        output_format: str = "png",
    ) -> UpscaleResult:
        """Upscale one image synchronously.

        Raises:
            ProviderError: If Topaz is not configured or rejects the request.
        """
        if not self.api_key:
            raise ProviderError("topaz", "upscaling service not configured")

        payload: dict[str, Any] = {
            "image_url": image_url,
            "scale_factor": scale,
            "face_enhancement": face_enhancement,
            "face_enhancement_creativity": creativity,
            "output_format": output_format,
        }
        try:
            response = await self.http_client.post(
                f"{self.base_url}/enhance",
                headers={"Authorization": f"Bearer {self.api_key}"},
                json=payload,
                timeout=120,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ProviderError("topaz", f"{e.response.status_code} {e.response.text}") from e
        except httpx.HTTPError as e:
            raise ProviderError("topaz", str(e)) from e

        result = parse_json_object(response, "topaz")
        upscaled_url = result.get("output_url") or result.get("url")
        if not upscaled_url:
            raise ProviderError("topaz", "no output url in response")

        return UpscaleResult(
            original_url=image_url,
            upscaled_url=upscaled_url,
            scale=scale,
            width=result.get("width"),
            height=result.get("height"),
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
