"""Supabase-backed order repository."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from supabase import Client

from src.models.order import OrderCreate, OrderStatus

logger = logging.getLogger(__name__)


@dataclass
class OrderRepository:
    """Reads and conditional writes against the ``orders`` table."""

    client: Client

    def get(self, order_id: UUID | str) -> dict[str, Any] | None:
        """Return an order by id, if present."""
        response = (
            self.client.table("orders")
            .select("*")
            .eq("id", str(order_id))
            .limit(1)
            .execute()
        )
        return response.data[0] if response.data else None

    def get_by_stripe_session(self, stripe_session_id: str) -> dict[str, Any] | None:
        """Return the order created for a checkout session, if present."""
        response = (
            self.client.table("orders")
            .select("*")
            .eq("stripe_session_id", stripe_session_id)
            .limit(1)
            .execute()
        )
        return response.data[0] if response.data else None

    def create_if_absent(self, data: OrderCreate) -> tuple[dict[str, Any], bool]:
        """Insert an order unless one already exists for its checkout session.

        ``stripe_session_id`` carries a unique constraint, so concurrent
        deliveries of the same payment event race on the index rather
        than on a read-then-write.

        Returns:
            tuple: (order row, True if this call created it).

        Raises:
            RuntimeError: If neither the insert nor the follow-up read yields a row.
        """
        response = (
            self.client.table("orders")
            .upsert(dict(data), on_conflict="stripe_session_id", ignore_duplicates=True)
            .execute()
        )
        if response.data:
            return response.data[0], True

        existing = self.get_by_stripe_session(data["stripe_session_id"])
        if existing is None:
            raise RuntimeError(
                f"Order for checkout session {data['stripe_session_id']} was neither created nor found"
            )
        return existing, False

    def compare_and_set_status(
        self,
        order_id: UUID | str,
        expected: OrderStatus,
        new: OrderStatus,
    ) -> bool:
        """Atomically move an order from ``expected`` to ``new``.

        The update is filtered on the current status, so it only matches
        while the row is still in the expected predecessor state.

        Returns:
            bool: True if this call performed the transition.
        """
        response = (
            self.client.table("orders")
            .update({"status": new, "updated_at": datetime.now(timezone.utc).isoformat()})
            .eq("id", str(order_id))
            .eq("status", expected)
            .execute()
        )
        return bool(response.data)
