"""Pricing and style catalog schemas."""

from pydantic import BaseModel, ConfigDict, Field


class PricingTierResponse(BaseModel):
    """A purchasable headshot package."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(description="Tier identifier")
    name: str = Field(description="Display name")
    price_cents: int = Field(description="Price in cents")
    headshots: int = Field(description="Number of headshots included")
    quality: str = Field(description="Generation quality (standard or premium)")
    features: list[str] = Field(description="Marketing feature list")
    popular: bool = Field(default=False, description="Highlighted tier")


class PricingResponse(BaseModel):
    """All tiers plus per-image upscale prices."""

    currency: str = Field(description="Currency code")
    tiers: list[PricingTierResponse] = Field(description="Available tiers")
    upscale_price_cents: dict[str, int] = Field(description="Per-image upscale price by scale, e.g. {'4x': 100}")


class StyleResponse(BaseModel):
    """A headshot style that can be generated."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(description="Style identifier")
    name: str = Field(description="Display name")
    category: str = Field(description="Style category")


class StyleListResponse(BaseModel):
    """Style catalog response."""

    items: list[StyleResponse] = Field(description="Available styles")
