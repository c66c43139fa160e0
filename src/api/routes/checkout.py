"""Checkout API routes for Stripe integration."""

from fastapi import APIRouter, status

from src.api.deps import CheckoutServiceDep
from src.schemas.checkout import CheckoutSessionCreate, CheckoutSessionResponse

router = APIRouter(prefix="/checkout", tags=["checkout"])


@router.post(
    "/session",
    response_model=CheckoutSessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Stripe Checkout Session",
    description="Creates a Stripe Checkout Session for a headshot package.",
)
async def create_checkout_session(
    data: CheckoutSessionCreate,
    service: CheckoutServiceDep,
) -> CheckoutSessionResponse:
    """Create a Stripe Checkout Session for a pricing tier.

    The order itself is created by the payment webhook once Stripe
    confirms the session. The frontend should redirect to the returned
    checkout_url.

    Args:
        data: Checkout session creation data.
        service: Checkout service.

    Returns:
        CheckoutSessionResponse: Contains checkout_url for redirect.

    Raises:
        ValidationError: 422 if the tier is unknown.
        UpstreamServiceError: 502 if Stripe rejects the session.
    """
    result = await service.create_checkout_session(
        tier_id=data.tier,
        customer_email=data.email,
    )
    return CheckoutSessionResponse(**result)
