"""Shared types for external image providers."""

from dataclasses import dataclass
from typing import Any, Protocol

import httpx


class ProviderError(Exception):
    """An external provider rejected or failed a request."""

    def __init__(self, provider: str, message: str) -> None:
        self.provider = provider
        self.message = message
        super().__init__(f"{provider}: {message}")


def parse_json_object(response: httpx.Response, provider: str) -> dict[str, Any]:
    """Decode a provider response body that must be a JSON object.

    Gateways sometimes answer 200 with an HTML page, so a body that does
    not decode to an object is a provider failure.

    Raises:
        ProviderError: If the body is not a JSON object.
    """
    try:
        body = response.json()
    except ValueError as e:
        raise ProviderError(provider, f"invalid JSON response: {response.text[:200]}") from e
    if not isinstance(body, dict):
        raise ProviderError(provider, f"expected a JSON object, got {type(body).__name__}")
    return body


@dataclass(frozen=True)
class ImageResult:
    """An image returned by a provider, either hosted or inline."""

    provider: str
    url: str | None = None
    content: bytes | None = None
    content_type: str = "image/jpeg"


class ImageProvider(Protocol):
    """A provider that renders a reference photo in a prompted style."""

    name: str

    async def generate(self, reference_url: str, prompt: str) -> ImageResult:
        """Render ``reference_url`` according to ``prompt``."""
