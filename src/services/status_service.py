"""Read-only projection of an order's fulfillment progress."""

import logging
import math
from typing import Any

from src.models.order import OrderStatus
from src.repositories.images import ImageRepository
from src.repositories.training_jobs import TrainingJobRepository

logger = logging.getLogger(__name__)

BASE_PROGRESS: dict[OrderStatus, int] = {
    "pending": 0,
    "paid": 10,
    "training": 30,
    "generating": 50,
    "completed": 100,
    "failed": 0,
}

# Share of the bar the generating phase fills on top of its base
GENERATING_SPAN = 45
IMAGES_PER_MINUTE = 4


def compute_progress(status: OrderStatus, image_count: int = 0, target: int = 0) -> int:
    """Progress percentage for an order.

    Args:
        status: Current order status.
        image_count: Generated images persisted so far.
        target: The order's headshot count.

    Returns:
        int: Percentage in [0, 100]. Image counts above target are clamped.
    """
    progress = BASE_PROGRESS.get(status, 0)
    if status == "generating" and target > 0:
        done = min(max(image_count, 0), target)
        progress += (GENERATING_SPAN * done) // target
    return progress


def status_message(status: OrderStatus, image_count: int = 0, target: int = 0) -> tuple[str, str | None]:
    """Human-readable message and time estimate for a status."""
    if status == "pending":
        return "Waiting for payment...", None
    if status == "paid":
        return "Payment received. Upload your photos to get started.", None
    if status == "training":
        return "AI is learning your unique features...", "10-15 minutes"
    if status == "generating":
        done = min(image_count, target)
        remaining = max(target - done, 0)
        minutes = math.ceil(remaining / IMAGES_PER_MINUTE)
        return f"Generating headshots... {done}/{target}", f"{minutes} minutes"
    if status == "completed":
        return "Your headshots are ready!", None
    return "Something went wrong. We're looking into it.", None


class StatusService:
    """Builds the polled status view of an order. Never writes."""

    def __init__(self, images: ImageRepository, training_jobs: TrainingJobRepository) -> None:
        self.images = images
        self.training_jobs = training_jobs

    def project(self, order: dict[str, Any]) -> dict[str, Any]:
        """Project an order row into its client-facing status.

        Args:
            order: Order row.

        Returns:
            dict: Status, progress, message and, once completed, the images.
        """
        order_id = str(order["id"])
        status: OrderStatus = order["status"]
        target = order["headshot_count"]
        image_count = self.images.count_generated(order_id)

        training_job = self.training_jobs.get_for_order(order_id)
        message, estimate = status_message(status, image_count, target)

        projection: dict[str, Any] = {
            "order_id": order_id,
            "status": status,
            "progress": compute_progress(status, image_count, target),
            "message": message,
            "estimated_time": estimate,
            "tier": order["tier"],
            "headshot_count": target,
            "image_count": image_count,
            "training_status": training_job["status"] if training_job else None,
            "images": None,
        }
        if status == "completed":
            projection["images"] = self.images.list_generated(order_id)
        return projection
