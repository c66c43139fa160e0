"""Webhook API routes for payment and generation provider callbacks."""

import logging
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, Request, status

from src.api.deps import CheckoutServiceDep, FulfillmentServiceDep
from src.api.middleware.error_handler import NotFoundError
from src.schemas.checkout import WebhookAck
from src.schemas.webhook import AstriaWebhookPayload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


@router.post(
    "/stripe",
    response_model=WebhookAck,
    status_code=status.HTTP_200_OK,
    summary="Handle Stripe webhooks",
    description="Receives and processes Stripe webhook events. Requires valid signature.",
)
async def stripe_webhook(request: Request, service: CheckoutServiceDep) -> WebhookAck:
    """Handle Stripe webhook events.

    The Stripe signature is verified before anything else happens, so a
    forged or unsigned request causes no writes.

    Handles:
    - checkout.session.completed: Creates the order in ``paid`` state
      (once per checkout session) and sends the confirmation email.

    Args:
        request: FastAPI request object for reading raw body and headers.
        service: Checkout service.

    Returns:
        WebhookAck: Acknowledgment.

    Raises:
        HTTPException: 400 if the signature is missing or invalid.
    """
    payload = await request.body()

    sig_header = request.headers.get("stripe-signature")
    if not sig_header:
        logger.error("Missing Stripe-Signature header in webhook request")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing Stripe-Signature header",
        )

    try:
        event = service.verify_webhook_signature(payload, sig_header)
    except ValueError as e:
        logger.error("Invalid webhook signature: %s", str(e))
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid signature",
        ) from e

    event_type = event.get("type", "")
    logger.info("Processing Stripe webhook event: %s (%s)", event_type, event.get("id"))

    if event_type == "checkout.session.completed":
        try:
            await service.handle_checkout_completed(event)
        except Exception:
            # Acknowledge anyway; Stripe retries would only repeat the failure
            logger.exception("Failed to process checkout.session.completed %s", event.get("id"))
    else:
        logger.debug("Unhandled webhook event type: %s", event_type)

    return WebhookAck()


@router.post(
    "/astria",
    response_model=WebhookAck,
    status_code=status.HTTP_200_OK,
    summary="Handle Astria callbacks",
    description="Receives tune and prompt callbacks. Prompt callbacks must carry the order_id they were issued for.",
)
async def astria_webhook(
    payload: AstriaWebhookPayload,
    service: FulfillmentServiceDep,
    order_id: UUID | None = Query(default=None, description="Order the callback was issued for"),
    training_job_id: UUID | None = Query(default=None, description="Training job the callback was issued for"),
) -> WebhookAck:
    """Handle Astria tune and prompt callbacks.

    Tune callbacks are matched by tune id. Prompt callbacks are matched
    only by the ``order_id`` carried in the callback URL.

    Args:
        payload: Callback body.
        service: Fulfillment service.
        order_id: Order id from the callback URL.
        training_job_id: Training job id from the callback URL.

    Returns:
        WebhookAck: Acknowledgment.

    Raises:
        HTTPException: 400 if a prompt callback has no order_id.
        NotFoundError: 404 if the tune, order or training job is unknown.
    """
    logger.info("Astria %s callback %s: %s", payload.type, payload.id, payload.status)

    if payload.type == "prompt" and order_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Prompt callback is missing order_id",
        )

    try:
        if payload.type == "tune":
            result = await service.handle_tune_update(payload)
        else:
            result = await service.handle_prompt_update(payload, order_id, training_job_id)
    except NotFoundError:
        raise
    except Exception:
        logger.exception("Failed to process Astria %s callback %s", payload.type, payload.id)
        return WebhookAck()

    logger.info("Astria callback %s handled: %s", payload.id, result)
    return WebhookAck()
