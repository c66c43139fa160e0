"""Upscale pricing route."""

from fastapi import APIRouter, Query

from src.schemas.upscale import UpscalePricingResponse
from src.services.upscale_service import upscale_pricing

router = APIRouter(prefix="/upscale", tags=["upscale"])


@router.get(
    "/pricing",
    response_model=UpscalePricingResponse,
    summary="Quote upscale pricing",
    description="Total upscale price in cents for a number of images at each scale factor.",
)
async def get_upscale_pricing(
    count: int = Query(default=1, ge=1, le=100, description="Number of images"),
) -> UpscalePricingResponse:
    """Quote upscaling ``count`` images at 2x, 4x and 8x."""
    return UpscalePricingResponse(count=count, pricing_cents=upscale_pricing(count))
