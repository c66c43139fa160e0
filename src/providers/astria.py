"""Astria API client for face training (tunes) and tune prompts."""

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from src.providers.base import ProviderError, parse_json_object

logger = logging.getLogger(__name__)

# Trigger word the tune learns; prompts address the subject with it
TUNE_CLASS_NAME = "person"


def _require_id(resource: dict[str, Any], kind: str) -> None:
    if resource.get("id") is None:
        raise ProviderError("astria", f"{kind} response has no id")


@dataclass
class AstriaClient:
    """HTTPX-backed Astria client."""

    api_key: str
    base_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, api_key: str, base_url: str) -> "AstriaClient":
        """Create an Astria client with a managed httpx session."""
        return cls(api_key=api_key, base_url=base_url, http_client=httpx.AsyncClient())

    @property
    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}

    async def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            response = await self.http_client.post(
                f"{self.base_url}{path}",
                headers=self._headers,
                json=payload,
                timeout=60,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ProviderError("astria", f"{e.response.status_code} {e.response.text}") from e
        except httpx.HTTPError as e:
            raise ProviderError("astria", str(e)) from e
        return parse_json_object(response, "astria")

    async def create_tune(
        self,
        image_urls: list[str],
        title: str,
        callback_url: str,
        base_tune_id: str | None = None,
    ) -> dict[str, Any]:
        """Submit a fine-tuning job over the customer's photos.

        Args:
            image_urls: Public URLs of the uploaded photos.
            title: Tune title; carries the order id for support lookups.
            callback_url: URL Astria calls when the tune finishes.
            base_tune_id: Optional base model to fine-tune from.

        Returns:
            dict: The created tune, including its numeric ``id``.
        """
        tune = await self._post(
            "/tunes",
            {
                "tune": {
                    "title": title,
                    "name": TUNE_CLASS_NAME,
                    "base_tune_id": base_tune_id,
                    "image_urls": image_urls,
                    "callback": callback_url,
                }
            },
        )
        _require_id(tune, "tune")
        logger.info("Astria tune %s created (%s)", tune["id"], title)
        return tune

    async def create_prompt(
        self,
        tune_id: str | int,
        text: str,
        callback_url: str,
        num_images: int,
    ) -> dict[str, Any]:
        """Queue a prompt against a trained tune."""
        prompt = await self._post(
            f"/tunes/{tune_id}/prompts",
            {
                "prompt": {
                    "text": text,
                    "callback": callback_url,
                    "num_images": num_images,
                }
            },
        )
        _require_id(prompt, "prompt")
        return prompt

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
