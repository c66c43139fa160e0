"""Checkout and order creation business logic service."""

import logging
from typing import Any
from uuid import UUID

import stripe

from src.api.middleware.error_handler import (
    NotFoundError,
    PaymentRequiredError,
    UpstreamServiceError,
    ValidationError,
)
from src.core.config import get_settings
from src.core.pricing import get_tier
from src.core.stripe import get_stripe
from src.models.order import OrderCreate
from src.repositories.orders import OrderRepository
from src.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

CHECKOUT_SESSION_PREFIX = "cs_"


def _parse_uuid(value: str) -> UUID | None:
    try:
        return UUID(value)
    except ValueError:
        return None


class CheckoutService:
    """Service for Stripe checkout and paid order creation."""

    def __init__(self, orders: OrderRepository, notifications: NotificationService) -> None:
        """Initialize checkout service with its collaborators."""
        self.orders = orders
        self.notifications = notifications
        self.stripe = get_stripe()
        self.settings = get_settings()

    async def create_checkout_session(
        self,
        tier_id: str,
        customer_email: str | None = None,
    ) -> dict[str, Any]:
        """Create a Stripe Checkout Session for a headshot package.

        No order row is written here; the order is created in ``paid``
        state once Stripe reports the session as completed.

        Args:
            tier_id: Pricing tier to purchase.
            customer_email: Optional pre-fill email.

        Returns:
            dict: Contains checkout_url, stripe_session_id, tier, headshot_count.

        Raises:
            ValidationError: If the tier is unknown.
            UpstreamServiceError: If Stripe is not configured or rejects the request.
        """
        tier = get_tier(tier_id)
        if tier is None:
            raise ValidationError(f"Invalid pricing tier: {tier_id}")

        if not self.settings.stripe_secret_key:
            raise UpstreamServiceError("Payments are not configured", provider="stripe")

        checkout_params: dict[str, Any] = {
            "mode": "payment",
            "payment_method_types": ["card"],
            "line_items": [
                {
                    "price_data": {
                        "currency": self.settings.currency,
                        "product_data": {
                            "name": f"{tier.name} Headshots",
                            "description": f"{tier.headshots} professional AI headshots",
                        },
                        "unit_amount": tier.price_cents,
                    },
                    "quantity": 1,
                }
            ],
            "success_url": f"{self.settings.frontend_url}/upload/{{CHECKOUT_SESSION_ID}}",
            "cancel_url": f"{self.settings.frontend_url}/pricing",
            "metadata": {
                "tier": tier.id,
                "headshot_count": str(tier.headshots),
            },
        }
        if customer_email:
            checkout_params["customer_email"] = customer_email

        try:
            session = self.stripe.checkout.Session.create(**checkout_params)
        except stripe.error.StripeError as e:
            logger.error("Stripe error creating checkout session: %s", str(e))
            raise UpstreamServiceError("Failed to create checkout session", provider="stripe") from e

        logger.info("Checkout session %s created for tier %s", session.id, tier.id)
        return {
            "checkout_url": session.url,
            "stripe_session_id": session.id,
            "tier": tier.id,
            "headshot_count": tier.headshots,
        }

    def verify_webhook_signature(self, payload: bytes, sig_header: str) -> dict[str, Any]:
        """Verify Stripe webhook signature and return event.

        Args:
            payload: Raw webhook payload bytes.
            sig_header: Stripe-Signature header value.

        Returns:
            dict: Verified Stripe event.

        Raises:
            ValueError: If signature is invalid or Stripe not configured.
        """
        if not self.settings.stripe_webhook_secret:
            raise ValueError("Stripe webhook secret is not configured. Please set STRIPE_WEBHOOK_SECRET environment variable.")

        try:
            return self.stripe.Webhook.construct_event(
                payload, sig_header, self.settings.stripe_webhook_secret
            )
        except stripe.error.SignatureVerificationError as e:
            logger.warning("Invalid webhook signature: %s", str(e))
            raise ValueError("Invalid webhook signature") from e

    async def handle_checkout_completed(self, event: dict[str, Any]) -> dict[str, Any] | None:
        """Process checkout.session.completed webhook event.

        Args:
            event: Verified Stripe webhook event.

        Returns:
            dict | None: The order for the session, or None if the session
            does not describe a headshot purchase.
        """
        session = event["data"]["object"]
        return await self._create_order_from_session(session)

    async def _create_order_from_session(self, session: dict[str, Any]) -> dict[str, Any] | None:
        metadata = session.get("metadata") or {}
        tier = get_tier(metadata.get("tier", ""))
        if tier is None:
            logger.warning(
                "Checkout session %s has no valid tier in metadata: %s",
                session.get("id"),
                metadata.get("tier"),
            )
            return None

        customer_details = session.get("customer_details") or {}
        order_data: OrderCreate = {
            "email": session.get("customer_email") or customer_details.get("email"),
            "stripe_session_id": session["id"],
            "stripe_payment_intent": session.get("payment_intent"),
            "amount": session.get("amount_total") or tier.price_cents,
            "tier": tier.id,
            "headshot_count": tier.headshots,
            "status": "paid",
        }

        order, created = self.orders.create_if_absent(order_data)
        if created:
            logger.info("Order %s created for checkout session %s", order["id"], session["id"])
        else:
            logger.info("Checkout session %s already has order %s", session["id"], order["id"])

        # The ledger dedups, so a replay only resends if the first send failed
        await self.notifications.order_confirmed(order)
        return order

    def find_order(self, order_ref: str) -> dict[str, Any]:
        """Find an order by id or by its Stripe checkout session id.

        Never writes and never calls Stripe, so it is safe for polling.

        Args:
            order_ref: Order UUID or ``cs_...`` checkout session id.

        Returns:
            dict: The order row.

        Raises:
            NotFoundError: If no order matches.
        """
        order = self._lookup(order_ref)
        if not order:
            raise NotFoundError("Order not found")
        return order

    async def resolve_order(self, order_ref: str) -> dict[str, Any]:
        """Find an order, reconciling a paid checkout session that has none yet.

        A customer returning from checkout before the webhook lands still
        gets their order. Only the upload flow uses this; status polling
        goes through ``find_order``.

        Args:
            order_ref: Order UUID or ``cs_...`` checkout session id.

        Returns:
            dict: The order row.

        Raises:
            NotFoundError: If no order or checkout session matches.
            PaymentRequiredError: If the checkout session is not paid.
            UpstreamServiceError: If Stripe cannot be reached.
        """
        order = self._lookup(order_ref)
        if order:
            return order
        if not order_ref.startswith(CHECKOUT_SESSION_PREFIX):
            raise NotFoundError("Order not found")
        return await self._reconcile_session(order_ref)

    def _lookup(self, order_ref: str) -> dict[str, Any] | None:
        order_id = _parse_uuid(order_ref)
        if order_id is not None:
            return self.orders.get(order_id)
        if order_ref.startswith(CHECKOUT_SESSION_PREFIX):
            return self.orders.get_by_stripe_session(order_ref)
        return None

    async def _reconcile_session(self, session_id: str) -> dict[str, Any]:
        try:
            session = self.stripe.checkout.Session.retrieve(session_id)
        except stripe.error.InvalidRequestError as e:
            raise NotFoundError("Checkout session not found") from e
        except stripe.error.StripeError as e:
            logger.error("Stripe error retrieving session %s: %s", session_id, str(e))
            raise UpstreamServiceError("Could not verify payment", provider="stripe") from e

        if session.get("payment_status") != "paid":
            raise PaymentRequiredError("Payment not completed")

        logger.info("Reconciling paid checkout session %s ahead of webhook", session_id)
        order = await self._create_order_from_session(session)
        if order is None:
            raise NotFoundError("Checkout session is not a headshot order")
        return order
