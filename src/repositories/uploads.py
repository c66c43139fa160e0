"""Supabase-backed upload repository."""

from dataclasses import dataclass
from typing import Any
from uuid import UUID

from supabase import Client


@dataclass
class UploadRepository:
    """Persistence for ``uploads`` rows."""

    client: Client

    def create(
        self,
        order_id: UUID | str,
        file_path: str,
        file_name: str | None,
        file_size: int | None = None,
        mime_type: str | None = None,
    ) -> dict[str, Any]:
        """Record a source photo stored for an order."""
        response = (
            self.client.table("uploads")
            .insert(
                {
                    "order_id": str(order_id),
                    "file_path": file_path,
                    "file_name": file_name,
                    "file_size": file_size,
                    "mime_type": mime_type,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to record upload")
        return response.data[0]

    def list_for_order(self, order_id: UUID | str) -> list[dict[str, Any]]:
        """List an order's uploads, oldest first."""
        response = (
            self.client.table("uploads")
            .select("*")
            .eq("order_id", str(order_id))
            .order("created_at")
            .execute()
        )
        return response.data or []
