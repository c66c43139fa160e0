"""Supabase-backed notification ledger."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from src.models.notification import NotificationKind


@dataclass
class NotificationRepository:
    """Claims on (order, kind) pairs in the ``notifications`` table."""

    client: Client

    def claim(self, order_id: UUID | str, kind: NotificationKind) -> bool:
        """Claim the right to send ``kind`` for an order.

        Returns:
            bool: True only for the first caller; the unique index on
            (order_id, kind) turns every later insert into a no-op.
        """
        response = (
            self.client.table("notifications")
            .upsert(
                {"order_id": str(order_id), "kind": kind},
                on_conflict="order_id,kind",
                ignore_duplicates=True,
            )
            .execute()
        )
        return bool(response.data)

    def release(self, order_id: UUID | str, kind: NotificationKind) -> None:
        """Drop a claim so the notification can be attempted again."""
        (
            self.client.table("notifications")
            .delete()
            .eq("order_id", str(order_id))
            .eq("kind", kind)
            .execute()
        )
