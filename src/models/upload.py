"""Upload model type definitions for database operations."""

from datetime import datetime
from typing import TypedDict
from uuid import UUID


class Upload(TypedDict):
    """Upload table row representation.

    One row per source photo transferred into object storage.
    """

    id: UUID
    order_id: UUID
    file_path: str
    file_name: str | None
    file_size: int | None
    mime_type: str | None
    created_at: datetime
