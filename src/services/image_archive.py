"""Copies provider output into our own storage bucket."""

import logging
from dataclasses import dataclass
from uuid import uuid4

import httpx

from src.providers.base import ImageResult, ProviderError
from src.providers.storage import StorageClient

logger = logging.getLogger(__name__)

EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}


@dataclass
class ImageArchive:
    """Stores provider images durably.

    Provider-hosted URLs expire, so every image we keep is re-uploaded
    under a path we own before its URL is persisted.
    """

    storage: StorageClient
    http_client: httpx.AsyncClient

    async def archive(self, result: ImageResult, prefix: str, label: str) -> str:
        """Store one provider image and return its public URL.

        Args:
            result: Image as returned by a provider.
            prefix: Storage folder, e.g. ``generated/<order_id>``.
            label: Readable suffix for the object name.

        Raises:
            ProviderError: If the image cannot be fetched or stored.
        """
        content = result.content
        content_type = result.content_type
        if content is None:
            if not result.url:
                raise ProviderError(result.provider, "result has neither content nor url")
            try:
                response = await self.http_client.get(result.url, timeout=60)
                response.raise_for_status()
            except httpx.HTTPError as e:
                raise ProviderError(result.provider, f"could not download result: {e}") from e
            content = response.content
            content_type = response.headers.get("content-type", content_type).split(";")[0]

        extension = EXTENSIONS.get(content_type, "jpg")
        path = f"{prefix}/{uuid4()}-{label}.{extension}"
        try:
            url = self.storage.upload(path, content, content_type)
        except Exception as e:
            raise ProviderError("storage", f"could not store {path}: {e}") from e

        logger.debug("Archived %s image to %s", result.provider, path)
        return url
