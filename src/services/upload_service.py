"""Source photo uploads into object storage."""

import logging
from typing import Any
from uuid import uuid4

from src.api.middleware.error_handler import UpstreamServiceError, ValidationError
from src.core.config import get_settings
from src.providers.storage import StorageClient
from src.repositories.uploads import UploadRepository
from src.services.image_archive import EXTENSIONS

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = "jpg"
ALLOWED_EXTENSIONS = frozenset(EXTENSIONS.values())


def build_upload_path(order_id: str, file_name: str, content_type: str | None = None) -> str:
    """Storage path for a new source photo: ``<order_id>/<uuid>.<ext>``.

    The extension comes from the content type when it is known, otherwise
    from the file name if it is an accepted image extension.
    """
    extension = EXTENSIONS.get(content_type or "")
    if extension is None:
        _, dot, suffix = file_name.rpartition(".")
        suffix = suffix.lower()
        extension = suffix if dot and suffix in ALLOWED_EXTENSIONS else DEFAULT_EXTENSION
    return f"{order_id}/{uuid4()}.{extension}"


class UploadService:
    """Records customer photos and the storage objects that hold them."""

    def __init__(self, uploads: UploadRepository, storage: StorageClient) -> None:
        self.uploads = uploads
        self.storage = storage
        self.settings = get_settings()

    def _check_content_type(self, content_type: str | None) -> None:
        if content_type and content_type not in self.settings.allowed_upload_types_list:
            raise ValidationError(
                "Invalid file type. Only JPG, PNG, and WebP are allowed.",
                details=[{"loc": ["content_type"], "msg": f"Unsupported content type {content_type}", "type": "invalid_type"}],
            )

    def create_signed_upload(
        self,
        order: dict[str, Any],
        file_name: str,
        content_type: str | None = None,
    ) -> dict[str, Any]:
        """Issue a signed URL the browser can upload one photo to directly.

        The upload row is recorded up front, since the transfer itself
        bypasses this service.

        Args:
            order: Order row the photo belongs to.
            file_name: Original client file name.
            content_type: Declared MIME type, if known.

        Returns:
            dict: signed_url, token, path, public_url and order_id.

        Raises:
            ValidationError: If the content type is not accepted.
            UpstreamServiceError: If storage cannot issue the URL.
        """
        self._check_content_type(content_type)
        order_id = str(order["id"])
        path = build_upload_path(order_id, file_name, content_type)

        try:
            signed = self.storage.create_signed_upload_url(path)
        except Exception as e:
            logger.error("Failed to create signed upload URL for %s: %s", path, str(e))
            raise UpstreamServiceError("Failed to create upload URL", provider="storage") from e

        self.uploads.create(order_id, path, file_name, mime_type=content_type)
        logger.info("Signed upload URL issued for order %s: %s", order_id, path)

        return {
            "signed_url": signed["signed_url"],
            "token": signed["token"],
            "path": path,
            "public_url": self.storage.get_public_url(path),
            "order_id": order_id,
        }

    def upload_file(
        self,
        order: dict[str, Any],
        file_name: str,
        content: bytes,
        content_type: str | None,
    ) -> dict[str, str]:
        """Store a photo proxied through the API.

        Returns:
            dict: Public ``url`` and storage ``path``.

        Raises:
            ValidationError: If the file type or size is not accepted.
            UpstreamServiceError: If storage rejects the object.
        """
        if not content_type:
            raise ValidationError("Missing file content type")
        self._check_content_type(content_type)
        if len(content) > self.settings.max_upload_bytes:
            raise ValidationError(
                "File too large. Maximum size is 10MB.",
                details=[{"loc": ["file"], "msg": f"File is {len(content)} bytes", "type": "too_large"}],
            )

        order_id = str(order["id"])
        path = build_upload_path(order_id, file_name, content_type)
        try:
            url = self.storage.upload(path, content, content_type)
        except Exception as e:
            logger.error("Failed to store upload %s: %s", path, str(e))
            raise UpstreamServiceError("Failed to upload file", provider="storage") from e

        self.uploads.create(order_id, path, file_name, file_size=len(content), mime_type=content_type)
        logger.info("Stored upload for order %s: %s (%d bytes)", order_id, path, len(content))
        return {"url": url, "path": path}
