"""Replicate client for identity-preserving instant headshots (FLUX Kontext)."""

import logging
from dataclasses import dataclass
from typing import Any

import httpx
from tenacity import (
    RetryError,
    retry,
    retry_if_result,
    stop_after_attempt,
    wait_fixed,
)

from src.providers.base import ImageResult, ProviderError, parse_json_object

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = {"succeeded", "failed", "canceled"}
POLL_ATTEMPTS = 60
POLL_INTERVAL_SECONDS = 2


def _is_pending(prediction: dict[str, Any]) -> bool:
    return prediction.get("status") not in TERMINAL_STATUSES


@dataclass
class ReplicateClient:
    """HTTPX-backed Replicate predictions client."""

    api_token: str
    base_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, api_token: str, base_url: str) -> "ReplicateClient":
        """Create a Replicate client with a managed httpx session."""
        return cls(api_token=api_token, base_url=base_url, http_client=httpx.AsyncClient())

    @property
    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.api_token}"}

    async def run(self, model: str, model_input: dict[str, Any]) -> Any:
        """Run a model to completion and return its output.

        The prediction is created with ``Prefer: wait`` so most calls finish
        in one round trip; anything still running is polled until terminal.

        Raises:
            ProviderError: If the request fails or the prediction does not succeed.
        """
        try:
            response = await self.http_client.post(
                f"{self.base_url}/models/{model}/predictions",
                headers={**self._headers, "Prefer": "wait"},
                json={"input": model_input},
                timeout=120,
            )
            response.raise_for_status()
            prediction = parse_json_object(response, "replicate")
            if _is_pending(prediction):
                poll_url = (prediction.get("urls") or {}).get("get")
                if not poll_url:
                    raise ProviderError("replicate", "pending prediction has no poll url")
                prediction = await self._poll(poll_url)
        except httpx.HTTPStatusError as e:
            raise ProviderError("replicate", f"{e.response.status_code} {e.response.text}") from e
        except httpx.HTTPError as e:
            raise ProviderError("replicate", str(e)) from e
        except RetryError as e:
            raise ProviderError("replicate", f"prediction for {model} did not finish") from e

        if prediction.get("status") != "succeeded":
            raise ProviderError("replicate", prediction.get("error") or f"prediction {prediction.get('status')}")
        return prediction.get("output")

    @retry(
        retry=retry_if_result(_is_pending),
        stop=stop_after_attempt(POLL_ATTEMPTS),
        wait=wait_fixed(POLL_INTERVAL_SECONDS),
    )
    async def _poll(self, url: str) -> dict[str, Any]:
        response = await self.http_client.get(url, headers=self._headers, timeout=30)
        response.raise_for_status()
        return parse_json_object(response, "replicate")

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


@dataclass
class ReplicateImageProvider:
    """Renders a style from a reference photo with a FLUX Kontext model."""

    client: ReplicateClient
    model: str
    output_format: str = "jpg"

    @property
    def name(self) -> str:
        return f"replicate:{self.model}"

    async def generate(self, reference_url: str, prompt: str) -> ImageResult:
        output = await self.client.run(
            self.model,
            {
                "prompt": prompt,
                "input_image": reference_url,
                "aspect_ratio": "3:4",
                "output_format": self.output_format,
                "safety_tolerance": 2,
            },
        )
        image_url = output[0] if isinstance(output, list) and output else output
        if not image_url:
            raise ProviderError(self.name, "no image in output")
        content_type = "image/png" if self.output_format == "png" else "image/jpeg"
        return ImageResult(provider=self.name, url=str(image_url), content_type=content_type)
