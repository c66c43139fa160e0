"""Order model type definitions for database operations."""

from datetime import datetime
from typing import Literal, TypedDict
from uuid import UUID


# Order status enum values matching database enum
OrderStatus = Literal["pending", "paid", "training", "generating", "completed", "failed"]

# Tier enum values matching database enum
OrderTier = Literal["basic", "pro", "premium"]


class Order(TypedDict):
    """Order table row representation.

    One row per purchase. ``tier`` and ``headshot_count`` are written once
    at creation and never updated.
    """

    id: UUID
    email: str | None
    stripe_session_id: str
    stripe_payment_intent: str | None
    amount: int
    tier: OrderTier
    headshot_count: int
    status: OrderStatus
    created_at: datetime
    updated_at: datetime


class OrderCreate(TypedDict, total=False):
    """Data required to create a new order from a completed checkout."""

    email: str | None
    stripe_session_id: str
    stripe_payment_intent: str | None
    amount: int
    tier: OrderTier
    headshot_count: int
    status: OrderStatus
