"""Notification ledger model type definitions."""

from datetime import datetime
from typing import Literal, TypedDict
from uuid import UUID


NotificationKind = Literal[
    "order_confirmed",
    "training_started",
    "headshots_ready",
    "generation_failed",
]


class Notification(TypedDict):
    """Notification table row representation.

    Unique on (order_id, kind); a row means the email was claimed for sending.
    """

    id: UUID
    order_id: UUID
    kind: NotificationKind
    created_at: datetime
