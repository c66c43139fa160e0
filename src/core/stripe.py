"""Stripe SDK setup for checkout and payment webhooks."""

import logging

import stripe

from src.core.config import get_settings

logger = logging.getLogger(__name__)

# Session create/retrieve are idempotent reads or keyed writes, so SDK retries are safe
STRIPE_NETWORK_RETRIES = 2


def configure_stripe() -> None:
    """Set the module-level Stripe key and client options.

    Called once from the application lifespan. Without a secret key the
    app still starts; checkout requests then fail with a 502.
    """
    settings = get_settings()
    stripe.max_network_retries = STRIPE_NETWORK_RETRIES
    stripe.set_app_info(settings.app_name, version="0.1.0")

    if not settings.stripe_secret_key:
        logger.warning("Stripe secret key not configured; checkout is disabled")
        return
    stripe.api_key = settings.stripe_secret_key


def get_stripe() -> stripe:
    """Return the configured Stripe module.

    Services resolve Stripe through this function so tests can patch it.
    """
    return stripe
