"""Instant headshot generation with identity-preserving image models."""

import asyncio
import logging
from typing import Any
from uuid import UUID

from src.api.middleware.error_handler import (
    ConflictError,
    NotFoundError,
    UpstreamServiceError,
    ValidationError,
)
from src.core.pricing import get_tier
from src.core.styles import PREMIUM_PROMPT_SUFFIX, HeadshotStyle, get_style, styles_for_tier
from src.models.image import GeneratedImageCreate, ImageQuality
from src.providers.base import ImageProvider, ImageResult, ProviderError
from src.repositories.images import ImageRepository
from src.repositories.orders import OrderRepository
from src.services.fulfillment_service import complete_if_done
from src.services.image_archive import ImageArchive
from src.services.notification_service import NotificationService
from src.services.order_state import OrderStateMachine

logger = logging.getLogger(__name__)

MAX_CONCURRENT_GENERATIONS = 4
GENERATABLE_STATUSES = frozenset({"paid", "generating"})


class GenerationService:
    """Renders styles from one reference photo, with a one-shot fallback.

    Each style is independent: a style that fails on both providers is
    reported back without affecting the others.
    """

    def __init__(
        self,
        orders: OrderRepository,
        images: ImageRepository,
        archive: ImageArchive,
        standard_provider: ImageProvider,
        premium_provider: ImageProvider,
        fallback_provider: ImageProvider | None,
        notifications: NotificationService,
    ) -> None:
        self.orders = orders
        self.images = images
        self.archive = archive
        self.standard_provider = standard_provider
        self.premium_provider = premium_provider
        self.fallback_provider = fallback_provider
        self.notifications = notifications
        self.state = OrderStateMachine(orders)

    def get_order(self, order_id: UUID | str) -> dict[str, Any]:
        order = self.orders.get(order_id)
        if not order:
            raise NotFoundError("Order not found")
        return order

    def resolve_styles(self, style_ids: list[str] | None, order: dict[str, Any]) -> list[HeadshotStyle]:
        tier = get_tier(order["tier"])
        if not style_ids:
            styles = styles_for_tier(tier) if tier else []
            if not styles:
                raise ValidationError("No styles to generate")
            return styles

        styles = []
        unknown = []
        for style_id in style_ids:
            style = get_style(style_id)
            if style is None:
                unknown.append(style_id)
            else:
                styles.append(style)
        if unknown:
            raise ValidationError(
                "Unknown styles requested",
                details=[
                    {"loc": ["styles"], "msg": f"Unknown style {style_id}", "type": "unknown_style"}
                    for style_id in unknown
                ],
            )
        if len(styles) > order["headshot_count"]:
            raise ValidationError(
                f"At most {order['headshot_count']} styles can be generated for this order",
            )
        return styles

    async def render(
        self,
        primary: ImageProvider,
        reference_url: str,
        prompt: str,
    ) -> ImageResult:
        """Render with the primary provider, falling back once on failure.

        Raises:
            ProviderError: If every provider failed. Carries the last error.
        """
        try:
            return await primary.generate(reference_url, prompt)
        except ProviderError as e:
            if self.fallback_provider is None:
                raise
            logger.warning("%s failed (%s), falling back to %s", primary.name, e.message, self.fallback_provider.name)
        return await self.fallback_provider.generate(reference_url, prompt)

    async def _generate_style(
        self,
        order_id: str,
        primary: ImageProvider,
        reference_url: str,
        style: HeadshotStyle,
        prompt: str,
        semaphore: asyncio.Semaphore,
    ) -> str:
        async with semaphore:
            result = await self.render(primary, reference_url, prompt)
            return await self.archive.archive(result, f"generated/{order_id}", style.id)

    def ensure_can_generate(self, order: dict[str, Any]) -> None:
        """Raise ConflictError unless the order is ``paid`` or ``generating``."""
        if order["status"] not in GENERATABLE_STATUSES:
            raise ConflictError(f"Order is {order['status']}; headshots cannot be generated now")

    async def _start_generating(self, order: dict[str, Any]) -> None:
        order_id = str(order["id"])
        if order["status"] == "generating":
            return
        if order["status"] == "paid" and self.state.advance(order_id, "paid", "generating"):
            return

        current = self.get_order(order_id)["status"]
        if current != "generating":
            raise ConflictError(f"Order is {current}; headshots cannot be generated now")

    async def generate_instant(
        self,
        order_id: UUID | str,
        image_url: str,
        style_ids: list[str] | None = None,
    ) -> dict[str, Any]:
        """Generate one headshot per style from a single reference photo.

        Args:
            order_id: Order UUID; must be ``paid`` or ``generating``.
            image_url: Public URL of the reference photo.
            style_ids: Styles to render. Defaults to the tier's styles.

        Returns:
            dict: Succeeded images, failed styles and the order status.

        Raises:
            NotFoundError: If the order does not exist.
            ConflictError: If the order cannot accept new images.
            ValidationError: If a requested style is unknown.
            UpstreamServiceError: If no style could be generated.
        """
        order = self.get_order(order_id)
        styles = self.resolve_styles(style_ids, order)

        tier = get_tier(order["tier"])
        quality: ImageQuality = tier.quality if tier else "standard"
        primary = self.premium_provider if quality == "premium" else self.standard_provider
        return await self.run_batch(order, primary, image_url, [(style, style.prompt) for style in styles], quality)

    async def run_batch(
        self,
        order: dict[str, Any],
        primary: ImageProvider,
        image_url: str,
        jobs: list[tuple[HeadshotStyle, str]],
        quality: ImageQuality,
    ) -> dict[str, Any]:
        """Render ``(style, prompt)`` jobs and persist every success.

        Moves a paid order to ``generating`` first. If nothing succeeds and
        the order has no images at all, the order fails.

        Raises:
            ConflictError: If the order cannot accept new images.
            UpstreamServiceError: If no style could be generated.
        """
        order_id = str(order["id"])
        await self._start_generating(order)
        logger.info("Generating %d styles for order %s with %s", len(jobs), order_id, primary.name)

        semaphore = asyncio.Semaphore(MAX_CONCURRENT_GENERATIONS)
        results = await asyncio.gather(
            *(
                self._generate_style(order_id, primary, image_url, style, prompt, semaphore)
                for style, prompt in jobs
            ),
            return_exceptions=True,
        )

        rows: list[GeneratedImageCreate] = []
        failed: list[dict[str, str]] = []
        for (style, prompt), result in zip(jobs, results):
            if isinstance(result, ProviderError):
                logger.warning("Style %s failed for order %s: %s", style.id, order_id, result)
                failed.append({"style": style.id, "error": result.message})
            elif isinstance(result, Exception):
                logger.error("Unexpected error generating style %s for order %s", style.id, order_id, exc_info=result)
                failed.append({"style": style.id, "error": "unexpected provider error"})
            elif isinstance(result, BaseException):
                raise result
            else:
                rows.append(
                    {
                        "order_id": order_id,
                        "image_url": result,
                        "style": style.id,
                        "style_name": style.name,
                        "prompt": prompt,
                        "quality": quality,
                    }
                )

        self.images.add_generated(rows)
        logger.info("Order %s: %d/%d styles generated", order_id, len(rows), len(jobs))

        if not rows:
            if self.images.count_generated(order_id) == 0 and self.state.fail(order_id, "generating"):
                await self.notifications.generation_failed(order)
            raise UpstreamServiceError(
                "Failed to generate any headshots",
                details=[
                    {"loc": ["styles", item["style"]], "msg": item["error"], "type": "generation_failed"}
                    for item in failed
                ],
            )

        completed = await complete_if_done(order, self.images, self.state, self.notifications)
        return {
            "order_id": order_id,
            "status": "completed" if completed else self.get_order(order_id)["status"],
            "count": len(rows),
            "images": [
                {
                    "image_url": row["image_url"],
                    "style": row["style"],
                    "style_name": row["style_name"],
                    "quality": row["quality"],
                }
                for row in rows
            ],
            "failed": failed,
        }

    async def regenerate_premium(
        self,
        order_id: UUID | str,
        image_url: str,
        style_id: str,
    ) -> dict[str, Any]:
        """Re-render one style with the premium model.

        The new image is added alongside the existing ones; order status
        is not changed.

        Raises:
            NotFoundError: If the order does not exist.
            ValidationError: If the style is unknown.
            UpstreamServiceError: If every provider failed.
        """
        order = self.get_order(order_id)
        order_id = str(order["id"])
        style = get_style(style_id)
        if style is None:
            raise ValidationError(f"Unknown style: {style_id}")

        prompt = style.prompt + PREMIUM_PROMPT_SUFFIX
        try:
            result = await self.render(self.premium_provider, image_url, prompt)
            stored_url = await self.archive.archive(result, f"generated/{order_id}", f"{style.id}-premium")
        except ProviderError as e:
            logger.error("Premium regeneration failed for order %s style %s: %s", order_id, style.id, e)
            raise UpstreamServiceError("Failed to regenerate image", provider=e.provider) from e

        row: GeneratedImageCreate = {
            "order_id": order_id,
            "image_url": stored_url,
            "style": style.id,
            "style_name": style.name,
            "prompt": prompt,
            "quality": "premium",
        }
        self.images.add_generated([row])
        logger.info("Premium regeneration complete for order %s style %s", order_id, style.id)
        return {
            "order_id": order_id,
            "image": {
                "image_url": stored_url,
                "style": style.id,
                "style_name": style.name,
                "quality": "premium",
            },
        }
