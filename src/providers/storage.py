"""Supabase Storage access for customer photos and generated images."""

from dataclasses import dataclass
from typing import Any

from supabase import Client


@dataclass
class StorageClient:
    """Object storage for one bucket; the durable home of all image bytes."""

    client: Client
    bucket: str

    def _bucket(self) -> Any:
        return self.client.storage.from_(self.bucket)

    def create_signed_upload_url(self, path: str) -> dict[str, str]:
        """Create a short-lived URL the browser can upload ``path`` to directly.

        Returns:
            dict: ``signed_url`` and ``token`` for the client.
        """
        data = self._bucket().create_signed_upload_url(path)
        return {
            "signed_url": data.get("signed_url") or data.get("signedUrl"),
            "token": data.get("token"),
        }

    def upload(self, path: str, content: bytes, content_type: str) -> str:
        """Store bytes at ``path`` and return their public URL."""
        self._bucket().upload(
            path,
            content,
            file_options={"content-type": content_type, "upsert": "false"},
        )
        return self.get_public_url(path)

    def get_public_url(self, path: str) -> str:
        """Public URL for a stored object."""
        return self._bucket().get_public_url(path)
