"""Checkout Pydantic schemas for API request/response models."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from src.models.order import OrderTier


class CheckoutSessionCreate(BaseModel):
    """Schema for creating a checkout session via POST /checkout/session."""

    model_config = ConfigDict(from_attributes=True)

    tier: str = Field(description="Pricing tier to purchase (basic, pro, premium)")
    email: EmailStr | None = Field(default=None, description="Pre-fill customer email")


class CheckoutSessionResponse(BaseModel):
    """Schema for checkout session creation response."""

    model_config = ConfigDict(from_attributes=True)

    checkout_url: str = Field(description="Stripe Checkout URL to redirect to")
    stripe_session_id: str = Field(description="Stripe Checkout Session ID")
    tier: OrderTier = Field(description="Purchased tier")
    headshot_count: int = Field(description="Headshots included in the tier")


class WebhookAck(BaseModel):
    """Acknowledgement returned to webhook senders."""

    received: bool = Field(default=True, description="Whether the event was accepted")
