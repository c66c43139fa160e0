"""Character sheet model type definitions for database operations."""

from datetime import datetime
from typing import Literal, TypedDict
from uuid import UUID


class CharacterSheet(TypedDict):
    """Character sheet table row representation.

    A multi-angle identity reference rendered from one customer photo,
    reused for every identity-locked headshot of the order.
    """

    id: UUID
    order_id: UUID
    image_url: str
    source_image_url: str
    gender: Literal["male", "female"] | None
    created_at: datetime
