"""Pricing tiers and upscale pricing."""

from dataclasses import dataclass
from typing import Literal

TierName = Literal["basic", "pro", "premium"]
Quality = Literal["standard", "premium"]


@dataclass(frozen=True)
class PricingTier:
    """A fixed (price, headshot count, feature set) bundle sold at checkout."""

    id: TierName
    name: str
    price_cents: int
    headshots: int
    quality: Quality
    features: tuple[str, ...]
    popular: bool = False


PRICING_TIERS: dict[str, PricingTier] = {
    "basic": PricingTier(
        id="basic",
        name="Basic",
        price_cents=499,
        headshots=10,
        quality="standard",
        features=(
            "10 professional headshots",
            "10 different styles",
            "High-resolution downloads",
            "30-day access",
        ),
    ),
    "pro": PricingTier(
        id="pro",
        name="Pro",
        price_cents=899,
        headshots=20,
        quality="standard",
        popular=True,
        features=(
            "20 professional headshots",
            "20 different styles",
            "High-resolution downloads",
            "60-day access",
            "Priority processing",
        ),
    ),
    "premium": PricingTier(
        id="premium",
        name="Premium",
        price_cents=1499,
        headshots=20,
        quality="premium",
        features=(
            "20 premium headshots",
            "20 different styles",
            "4K resolution downloads",
            "90-day access",
            "Premium AI model",
            "Background variations",
        ),
    ),
}

# Per-image upscale price in cents, keyed by scale factor
UPSCALE_PRICE_CENTS: dict[int, int] = {
    2: 50,
    4: 100,
    8: 200,
}


def get_tier(tier: str) -> PricingTier | None:
    """Look up a pricing tier by id."""
    return PRICING_TIERS.get(tier)


def calculate_upscale_price_cents(image_count: int, scale: int) -> int:
    """Return the total upscale price in cents.

    Raises:
        ValueError: If the scale factor is not offered.
    """
    if scale not in UPSCALE_PRICE_CENTS:
        raise ValueError(f"Unsupported scale factor: {scale}")
    return image_count * UPSCALE_PRICE_CENTS[scale]
