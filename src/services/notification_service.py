"""Exactly-once customer notifications keyed by (order, event kind)."""

import logging
from typing import Any

from src.models.notification import NotificationKind
from src.repositories.notifications import NotificationRepository
from src.services.email_service import EmailService

logger = logging.getLogger(__name__)


class NotificationService:
    """Sends each order notification at most once.

    A notification is sent only by the caller that wins the claim on the
    (order_id, kind) row. Failed sends release the claim so a replayed
    webhook can try again.
    """

    def __init__(self, notifications: NotificationRepository, email: EmailService) -> None:
        self.notifications = notifications
        self.email = email

    async def _dispatch(self, order: dict[str, Any], kind: NotificationKind, **kwargs: Any) -> bool:
        order_id = str(order["id"])
        to_email = order.get("email")
        if not to_email:
            logger.info("Order %s has no email, skipping %s notification", order_id, kind)
            return False

        if not self.notifications.claim(order_id, kind):
            logger.info("Notification %s for order %s already claimed", kind, order_id)
            return False

        sender = {
            "order_confirmed": self.email.send_order_confirmation,
            "training_started": self.email.send_training_started,
            "headshots_ready": self.email.send_headshots_ready,
            "generation_failed": self.email.send_generation_failed,
        }[kind]
        result = await sender(to_email, order_id, **kwargs)

        if not result.get("success"):
            logger.warning(
                "Notification %s for order %s failed, releasing claim: %s",
                kind,
                order_id,
                result.get("error"),
            )
            self.notifications.release(order_id, kind)
            return False

        logger.info("Notification %s sent for order %s", kind, order_id)
        return True

    async def order_confirmed(self, order: dict[str, Any]) -> bool:
        """Send the order confirmation email.

        Returns:
            bool: True if this call sent the email.
        """
        return await self._dispatch(
            order,
            "order_confirmed",
            tier=order["tier"],
            headshot_count=order["headshot_count"],
        )

    async def training_started(self, order: dict[str, Any]) -> bool:
        return await self._dispatch(order, "training_started")

    async def headshots_ready(self, order: dict[str, Any], image_count: int) -> bool:
        return await self._dispatch(order, "headshots_ready", image_count=image_count)

    async def generation_failed(self, order: dict[str, Any]) -> bool:
        return await self._dispatch(order, "generation_failed")
