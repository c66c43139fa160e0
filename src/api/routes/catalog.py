"""Pricing and style catalog routes."""

from fastapi import APIRouter, Query

from src.api.middleware.error_handler import ValidationError
from src.core.config import get_settings
from src.core.pricing import PRICING_TIERS, UPSCALE_PRICE_CENTS, get_tier
from src.core.styles import HEADSHOT_STYLES, styles_for_tier
from src.schemas.catalog import (
    PricingResponse,
    PricingTierResponse,
    StyleListResponse,
    StyleResponse,
)

router = APIRouter(tags=["catalog"])


@router.get(
    "/pricing",
    response_model=PricingResponse,
    summary="List pricing tiers",
    description="Returns every headshot package and the per-image upscale prices.",
)
async def get_pricing() -> PricingResponse:
    """Return the pricing catalog."""
    return PricingResponse(
        currency=get_settings().currency,
        tiers=[
            PricingTierResponse(
                id=tier.id,
                name=tier.name,
                price_cents=tier.price_cents,
                headshots=tier.headshots,
                quality=tier.quality,
                features=list(tier.features),
                popular=tier.popular,
            )
            for tier in PRICING_TIERS.values()
        ],
        upscale_price_cents={f"{scale}x": price for scale, price in sorted(UPSCALE_PRICE_CENTS.items())},
    )


@router.get(
    "/styles",
    response_model=StyleListResponse,
    summary="List headshot styles",
    description="Returns the style catalog, optionally only the styles included in a tier.",
)
async def list_styles(
    tier: str | None = Query(default=None, description="Only styles included in this tier"),
) -> StyleListResponse:
    """Return available headshot styles.

    Raises:
        ValidationError: If the tier is unknown.
    """
    if tier is None:
        styles = list(HEADSHOT_STYLES)
    else:
        pricing_tier = get_tier(tier)
        if pricing_tier is None:
            raise ValidationError(f"Invalid pricing tier: {tier}")
        styles = styles_for_tier(pricing_tier)

    return StyleListResponse(
        items=[StyleResponse(id=s.id, name=s.name, category=s.category) for s in styles]
    )
