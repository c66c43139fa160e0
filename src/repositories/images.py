"""Supabase-backed repository for generated and upscaled images."""

from dataclasses import dataclass
from typing import Any
from uuid import UUID

from supabase import Client

from src.models.image import GeneratedImageCreate


@dataclass
class ImageRepository:
    """Persistence for ``generated_images`` and ``upscaled_images``."""

    client: Client

    def add_generated(self, rows: list[GeneratedImageCreate]) -> list[dict[str, Any]]:
        """Insert generated images, skipping ones already recorded.

        Returns:
            list[dict]: Only the rows that were newly inserted.
        """
        if not rows:
            return []
        response = (
            self.client.table("generated_images")
            .upsert([dict(row) for row in rows], on_conflict="order_id,image_url", ignore_duplicates=True)
            .execute()
        )
        return response.data or []

    def count_generated(self, order_id: UUID | str) -> int:
        """Count generated images persisted for an order."""
        response = (
            self.client.table("generated_images")
            .select("id", count="exact")
            .eq("order_id", str(order_id))
            .execute()
        )
        if response.count is not None:
            return response.count
        return len(response.data or [])

    def list_generated(self, order_id: UUID | str) -> list[dict[str, Any]]:
        """List an order's generated images, oldest first."""
        response = (
            self.client.table("generated_images")
            .select("*")
            .eq("order_id", str(order_id))
            .order("created_at")
            .execute()
        )
        return response.data or []

    def add_upscaled(self, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Insert upscaled image rows."""
        if not rows:
            return []
        response = self.client.table("upscaled_images").insert(rows).execute()
        return response.data or []
