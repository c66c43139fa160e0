"""Handles Astria tune and prompt callbacks for trained orders."""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from src.api.middleware.error_handler import NotFoundError
from src.core.config import get_settings
from src.core.styles import build_tune_prompts, prompts_needed
from src.models.image import GeneratedImageCreate
from src.providers.astria import AstriaClient
from src.providers.base import ProviderError
from src.repositories.images import ImageRepository
from src.repositories.orders import OrderRepository
from src.repositories.training_jobs import TrainingJobRepository
from src.schemas.webhook import AstriaWebhookPayload
from src.services.notification_service import NotificationService
from src.services.order_state import OrderStateMachine
from src.services.training_service import build_callback_url

logger = logging.getLogger(__name__)


async def complete_if_done(
    order: dict[str, Any],
    images: ImageRepository,
    state: OrderStateMachine,
    notifications: NotificationService,
) -> bool:
    """Complete a generating order once its image count reaches the target.

    Only the caller that wins ``generating -> completed`` sends the
    ready notification, so repeated calls past the threshold are no-ops.

    Returns:
        bool: True if this call completed the order.
    """
    order_id = str(order["id"])
    count = images.count_generated(order_id)
    target = order["headshot_count"]
    if count < target:
        logger.info("Order %s has %d/%d images", order_id, count, target)
        return False

    if not state.advance(order_id, "generating", "completed"):
        return False

    await notifications.headshots_ready(order, image_count=count)
    return True


class FulfillmentService:
    """Drives trained orders from ``training`` through ``completed``."""

    def __init__(
        self,
        orders: OrderRepository,
        training_jobs: TrainingJobRepository,
        images: ImageRepository,
        astria: AstriaClient,
        notifications: NotificationService,
    ) -> None:
        self.orders = orders
        self.training_jobs = training_jobs
        self.images = images
        self.astria = astria
        self.notifications = notifications
        self.state = OrderStateMachine(orders)
        self.settings = get_settings()

    def _get_order(self, order_id: UUID | str) -> dict[str, Any]:
        order = self.orders.get(order_id)
        if not order:
            raise NotFoundError("Order not found")
        return order

    async def handle_tune_update(self, payload: AstriaWebhookPayload) -> dict[str, Any]:
        """Apply a tune (training) status callback.

        Args:
            payload: Callback body; ``id`` is the Astria tune id.

        Returns:
            dict: What the callback did, for logging.

        Raises:
            NotFoundError: If no training job matches the tune id.
        """
        tune_id = str(payload.id)
        job = self.training_jobs.get_by_tune_id(tune_id)
        if not job:
            raise NotFoundError(f"Training job not found for tune {tune_id}")

        job_id = str(job["id"])
        order = self._get_order(job["order_id"])
        order_id = str(order["id"])

        if payload.status == "completed":
            self.training_jobs.update(
                job_id,
                {
                    "status": "completed",
                    "completed_at": datetime.now(timezone.utc).isoformat(),
                },
            )
            if not self.state.advance(order_id, "training", "generating"):
                logger.info("Generation already triggered for order %s", order_id)
                return {"action": "duplicate", "order_id": order_id}

            accepted = await self._submit_prompts(order, job_id, tune_id)
            return {"action": "generation_started", "order_id": order_id, "prompts": accepted}

        if payload.status == "failed":
            error = payload.error or "Training failed"
            self.training_jobs.update(job_id, {"status": "failed", "error_message": error})
            logger.warning("Training failed for order %s: %s", order_id, error)
            if self.state.fail(order_id, "training"):
                await self.notifications.generation_failed(order)
            return {"action": "failed", "order_id": order_id}

        logger.info("Ignoring tune %s status %s", tune_id, payload.status)
        return {"action": "ignored", "order_id": order_id}

    async def _submit_prompts(self, order: dict[str, Any], job_id: str, tune_id: str) -> int:
        order_id = str(order["id"])
        per_prompt = self.settings.astria_images_per_prompt
        prompts = build_tune_prompts(prompts_needed(order["headshot_count"], per_prompt))
        callback_url = build_callback_url(self.settings.astria_callback_url, order_id, job_id)

        results = await asyncio.gather(
            *(
                self.astria.create_prompt(tune_id, text, callback_url, num_images=per_prompt)
                for text in prompts
            ),
            return_exceptions=True,
        )

        accepted = 0
        for text, result in zip(prompts, results):
            if isinstance(result, ProviderError):
                logger.warning("Astria rejected prompt for order %s (%s): %s", order_id, text[:40], result.message)
            elif isinstance(result, Exception):
                logger.error("Unexpected error submitting prompt for order %s", order_id, exc_info=result)
            elif isinstance(result, BaseException):
                raise result
            else:
                accepted += 1

        logger.info("Submitted %d/%d prompts for order %s", accepted, len(prompts), order_id)
        if accepted == 0 and self.state.fail(order_id, "generating"):
            await self.notifications.generation_failed(order)
        return accepted

    async def handle_prompt_update(
        self,
        payload: AstriaWebhookPayload,
        order_id: UUID | str,
        training_job_id: UUID | str | None = None,
    ) -> dict[str, Any]:
        """Persist the images delivered by a prompt callback.

        The order is taken from the callback URL, never inferred from
        other orders' training jobs.

        Args:
            payload: Callback body with the rendered image URLs.
            order_id: Order id threaded through the callback URL.
            training_job_id: Training job id threaded through the callback URL.

        Returns:
            dict: What the callback did, for logging.

        Raises:
            NotFoundError: If the order, or a referenced training job of
                that order, does not exist.
        """
        order = self._get_order(order_id)
        order_id = str(order["id"])

        if training_job_id is not None:
            job = self.training_jobs.get(training_job_id)
            if not job or str(job["order_id"]) != order_id:
                raise NotFoundError("Training job not found for order")

        if payload.status != "completed" or not payload.images:
            if payload.status == "failed":
                logger.warning("Astria prompt %s failed for order %s: %s", payload.id, order_id, payload.error)
            return {"action": "ignored", "order_id": order_id}

        quality = "premium" if order["tier"] == "premium" else "standard"
        rows: list[GeneratedImageCreate] = [
            {
                "order_id": order_id,
                "training_job_id": str(training_job_id) if training_job_id else None,
                "image_url": url,
                "prompt": payload.text or payload.title,
                "quality": quality,
            }
            for url in payload.images
        ]
        inserted = self.images.add_generated(rows)
        logger.info(
            "Prompt %s delivered %d images for order %s (%d new)",
            payload.id,
            len(rows),
            order_id,
            len(inserted),
        )

        completed = await complete_if_done(order, self.images, self.state, self.notifications)
        return {"action": "images_saved", "order_id": order_id, "inserted": len(inserted), "completed": completed}
