"""Upscale Pydantic schemas."""

from uuid import UUID

from pydantic import BaseModel, Field


class UpscaleRequest(BaseModel):
    """Upscale some of an order's generated headshots."""

    image_urls: list[str] = Field(min_length=1, max_length=50, description="Generated image URLs")
    scale: int = Field(default=4, description="Scale factor (2, 4 or 8)")
    creativity: int = Field(default=0, ge=0, le=10, description="Face enhancement creativity")


class UpscaledHeadshot(BaseModel):
    """An upscaled rendition of a generated headshot."""

    original_url: str = Field(description="Source image URL")
    upscaled_url: str = Field(description="Upscaled image URL")
    scale: int = Field(description="Scale factor applied")
    width: int | None = Field(default=None, description="Output width in pixels")
    height: int | None = Field(default=None, description="Output height in pixels")


class FailedUpscale(BaseModel):
    """An image that could not be upscaled."""

    image_url: str = Field(description="Source image URL")
    error: str = Field(description="Provider error")


class UpscaleResponse(BaseModel):
    """Upscale batch result."""

    order_id: UUID = Field(description="Order identifier")
    count: int = Field(description="Number of images upscaled")
    images: list[UpscaledHeadshot] = Field(description="Upscaled images")
    failed: list[FailedUpscale] = Field(default_factory=list, description="Images that failed")
    total_cost_cents: int = Field(description="Price of the upscaled images in cents")


class UpscalePricingResponse(BaseModel):
    """Upscale price for a number of images at each scale."""

    count: int = Field(description="Number of images priced")
    pricing_cents: dict[str, int] = Field(description="Total price in cents by scale")
