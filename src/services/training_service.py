"""Starts face training for a paid order."""

import logging
from typing import Any
from urllib.parse import urlencode
from uuid import UUID

from src.api.middleware.error_handler import (
    ConflictError,
    NotFoundError,
    UpstreamServiceError,
    ValidationError,
)
from src.core.config import get_settings
from src.providers.astria import AstriaClient
from src.providers.base import ProviderError
from src.providers.storage import StorageClient
from src.repositories.orders import OrderRepository
from src.repositories.training_jobs import TrainingJobRepository
from src.repositories.uploads import UploadRepository
from src.services.notification_service import NotificationService
from src.services.order_state import OrderStateMachine

logger = logging.getLogger(__name__)


def build_callback_url(base_url: str, order_id: str, training_job_id: str) -> str:
    """Callback URL that carries the order and job ids back to us."""
    query = urlencode({"order_id": order_id, "training_job_id": training_job_id})
    return f"{base_url}?{query}"


class TrainingService:
    """Moves an order from ``paid`` to ``training``."""

    def __init__(
        self,
        orders: OrderRepository,
        uploads: UploadRepository,
        training_jobs: TrainingJobRepository,
        storage: StorageClient,
        astria: AstriaClient,
        notifications: NotificationService,
    ) -> None:
        self.orders = orders
        self.uploads = uploads
        self.training_jobs = training_jobs
        self.storage = storage
        self.astria = astria
        self.notifications = notifications
        self.state = OrderStateMachine(orders)
        self.settings = get_settings()

    async def start_training(self, order_id: UUID | str) -> dict[str, Any]:
        """Submit the order's photos for training.

        Preconditions are checked before anything is written, so a
        rejected request leaves no training job behind.

        Args:
            order_id: Order UUID.

        Returns:
            dict: training_job_id, tune_id and status.

        Raises:
            NotFoundError: If the order does not exist.
            ConflictError: If the order is not ``paid`` or another request
                started training first.
            ValidationError: If fewer than the minimum photos were uploaded.
            UpstreamServiceError: If Astria rejects the tune. The order is
                failed in that case.
        """
        order_id = str(order_id)
        order = self.orders.get(order_id)
        if not order:
            raise NotFoundError("Order not found")

        if order["status"] != "paid":
            raise ConflictError(
                f"Order is {order['status']}; training can only start on a paid order",
            )

        uploads = self.uploads.list_for_order(order_id)
        minimum = self.settings.min_training_uploads
        if len(uploads) < minimum:
            raise ValidationError(
                f"Minimum {minimum} images required for training",
                details=[{"loc": ["uploads"], "msg": f"{len(uploads)} uploaded, {minimum} required", "type": "too_few_uploads"}],
            )

        if not self.state.advance(order_id, "paid", "training"):
            raise ConflictError("Training has already been started for this order")

        job = self.training_jobs.create(order_id, status="pending")
        job_id = str(job["id"])
        image_urls = [self.storage.get_public_url(upload["file_path"]) for upload in uploads]

        try:
            tune = await self.astria.create_tune(
                image_urls,
                title=f"headshot-{order_id}",
                callback_url=build_callback_url(self.settings.astria_callback_url, order_id, job_id),
                base_tune_id=self.settings.astria_base_tune_id or None,
            )
        except ProviderError as e:
            logger.error("Astria rejected training for order %s: %s", order_id, e.message)
            await self._fail_training(order, job_id, e.message)
            raise UpstreamServiceError("Failed to start training", provider=e.provider) from e
        except Exception as e:
            logger.exception("Unexpected error submitting training for order %s", order_id)
            await self._fail_training(order, job_id, str(e))
            raise

        tune_id = str(tune["id"])
        self.training_jobs.update(job_id, {"astria_tune_id": tune_id, "status": "training"})
        logger.info("Training started for order %s (tune %s, job %s)", order_id, tune_id, job_id)

        await self.notifications.training_started(order)
        return {"training_job_id": job_id, "tune_id": tune_id, "status": "training"}

    async def _fail_training(self, order: dict[str, Any], job_id: str, error: str) -> None:
        self.training_jobs.update(job_id, {"status": "failed", "error_message": error})
        if self.state.fail(str(order["id"]), "training"):
            await self.notifications.generation_failed(order)
