"""Headshot generation Pydantic schemas."""

from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

from src.models.order import OrderStatus


class InstantGenerationRequest(BaseModel):
    """Generate headshots from one reference photo."""

    image_url: str = Field(min_length=1, description="Public URL of the reference photo")
    styles: list[str] | None = Field(default=None, description="Style ids; defaults to the tier's styles")


class PremiumRegenerationRequest(BaseModel):
    """Re-render one style with the premium model."""

    image_url: str = Field(min_length=1, description="Public URL of the reference photo")
    style: str = Field(min_length=1, description="Style id to re-render")


class GeneratedHeadshot(BaseModel):
    """One generated headshot."""

    image_url: str = Field(description="Public image URL")
    style: str = Field(description="Style identifier")
    style_name: str = Field(description="Style display name")
    quality: str = Field(description="Quality tier")


class FailedStyle(BaseModel):
    """A style that could not be generated."""

    style: str = Field(description="Style identifier")
    error: str = Field(description="Last provider error")


class InstantGenerationResponse(BaseModel):
    """Batch result; a partial success lists the failed styles."""

    order_id: UUID = Field(description="Order identifier")
    status: OrderStatus = Field(description="Order status after the batch")
    count: int = Field(description="Number of headshots generated")
    images: list[GeneratedHeadshot] = Field(description="Generated headshots")
    failed: list[FailedStyle] = Field(default_factory=list, description="Styles that failed")


class PremiumRegenerationResponse(BaseModel):
    """The re-rendered premium headshot."""

    order_id: UUID = Field(description="Order identifier")
    image: GeneratedHeadshot = Field(description="Premium headshot")


class CharacterSheetRequest(BaseModel):
    """Render a character sheet from one reference photo."""

    image_url: str = Field(min_length=1, description="Public URL of the reference photo")


class CharacterSheetResponse(BaseModel):
    """A stored character sheet."""

    id: UUID = Field(description="Character sheet identifier")
    order_id: UUID = Field(description="Order identifier")
    image_url: str = Field(description="Public URL of the character sheet")
    source_image_url: str = Field(description="Reference photo it was rendered from")
    gender: Literal["male", "female"] | None = Field(default=None, description="Detected gender, used for outfits")


class IdentityLockGenerationResponse(InstantGenerationResponse):
    """Identity-locked batch result."""

    character_sheet_url: str = Field(description="Character sheet the batch was anchored to")
