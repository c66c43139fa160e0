"""Supabase-backed character sheet repository."""

from dataclasses import dataclass
from typing import Any
from uuid import UUID

from supabase import Client


@dataclass
class CharacterSheetRepository:
    """Persistence for ``character_sheets`` rows."""

    client: Client

    def create(
        self,
        order_id: UUID | str,
        image_url: str,
        source_image_url: str,
        gender: str | None = None,
    ) -> dict[str, Any]:
        """Record a stored character sheet."""
        response = (
            self.client.table("character_sheets")
            .insert(
                {
                    "order_id": str(order_id),
                    "image_url": image_url,
                    "source_image_url": source_image_url,
                    "gender": gender,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to record character sheet")
        return response.data[0]

    def latest_for_order(self, order_id: UUID | str) -> dict[str, Any] | None:
        """Most recent character sheet of an order, if any."""
        response = (
            self.client.table("character_sheets")
            .select("*")
            .eq("order_id", str(order_id))
            .order("created_at", desc=True)
            .limit(1)
            .execute()
        )
        return response.data[0] if response.data else None
