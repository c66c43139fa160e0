"""Batch upscaling of generated headshots."""

import asyncio
import logging
from typing import Any
from uuid import UUID

from src.api.middleware.error_handler import NotFoundError, UpstreamServiceError, ValidationError
from src.core.pricing import UPSCALE_PRICE_CENTS, calculate_upscale_price_cents
from src.providers.base import ImageResult, ProviderError
from src.providers.topaz import TopazClient, UpscaleResult
from src.repositories.images import ImageRepository
from src.repositories.orders import OrderRepository
from src.services.image_archive import ImageArchive

logger = logging.getLogger(__name__)

UPSCALE_BATCH_SIZE = 3


def upscale_pricing(image_count: int) -> dict[str, int]:
    """Total price in cents for each offered scale factor."""
    return {
        f"{scale}x": calculate_upscale_price_cents(image_count, scale)
        for scale in sorted(UPSCALE_PRICE_CENTS)
    }


class UpscaleService:
    """Upscales an order's generated images without touching the originals."""

    def __init__(
        self,
        orders: OrderRepository,
        images: ImageRepository,
        topaz: TopazClient,
        archive: ImageArchive,
    ) -> None:
        self.orders = orders
        self.images = images
        self.topaz = topaz
        self.archive = archive

    async def _upscale_one(self, order_id: str, image_url: str, scale: int, creativity: int) -> UpscaleResult:
        result = await self.topaz.upscale(image_url, scale=scale, creativity=creativity)
        stored_url = await self.archive.archive(
            ImageResult(provider="topaz", url=result.upscaled_url, content_type="image/png"),
            f"upscaled/{order_id}",
            f"{scale}x",
        )
        return UpscaleResult(
            original_url=result.original_url,
            upscaled_url=stored_url,
            scale=result.scale,
            width=result.width,
            height=result.height,
        )

    async def upscale(
        self,
        order_id: UUID | str,
        image_urls: list[str],
        scale: int = 4,
        creativity: int = 0,
    ) -> dict[str, Any]:
        """Upscale a set of the order's generated images.

        Images are processed in small concurrent batches. Successes are
        persisted even when other images in the request fail.

        Args:
            order_id: Order UUID.
            image_urls: Generated image URLs belonging to the order.
            scale: Scale factor, one of the priced factors.
            creativity: Face enhancement creativity passed to Topaz.

        Returns:
            dict: Upscaled images, failures and the price of the successes.

        Raises:
            NotFoundError: If the order does not exist.
            ValidationError: If the scale is not offered or a URL is not one
                of the order's images.
            UpstreamServiceError: If no image could be upscaled.
        """
        order = self.orders.get(order_id)
        if not order:
            raise NotFoundError("Order not found")
        order_id = str(order["id"])

        if scale not in UPSCALE_PRICE_CENTS:
            raise ValidationError(
                f"Unsupported scale factor: {scale}",
                details=[{"loc": ["scale"], "msg": f"Allowed: {sorted(UPSCALE_PRICE_CENTS)}", "type": "invalid_scale"}],
            )

        known = {image["image_url"] for image in self.images.list_generated(order_id)}
        unknown = [url for url in image_urls if url not in known]
        if unknown:
            raise ValidationError(
                "Images do not belong to this order",
                details=[{"loc": ["image_urls"], "msg": url, "type": "unknown_image"} for url in unknown],
            )

        logger.info("Upscaling %d images for order %s at %dx", len(image_urls), order_id, scale)
        succeeded: list[UpscaleResult] = []
        failed: list[dict[str, str]] = []
        for start in range(0, len(image_urls), UPSCALE_BATCH_SIZE):
            batch = image_urls[start:start + UPSCALE_BATCH_SIZE]
            results = await asyncio.gather(
                *(self._upscale_one(order_id, url, scale, creativity) for url in batch),
                return_exceptions=True,
            )
            for url, result in zip(batch, results):
                if isinstance(result, ProviderError):
                    logger.warning("Upscale failed for %s: %s", url, result)
                    failed.append({"image_url": url, "error": result.message})
                elif isinstance(result, Exception):
                    logger.error("Unexpected error upscaling %s", url, exc_info=result)
                    failed.append({"image_url": url, "error": "unexpected provider error"})
                elif isinstance(result, BaseException):
                    raise result
                else:
                    succeeded.append(result)

        if not succeeded:
            raise UpstreamServiceError(
                "Failed to upscale any images",
                provider="topaz",
                details=[
                    {"loc": ["image_urls"], "msg": f"{item['image_url']}: {item['error']}", "type": "upscale_failed"}
                    for item in failed
                ],
            )

        self.images.add_upscaled(
            [
                {
                    "order_id": order_id,
                    "original_url": result.original_url,
                    "upscaled_url": result.upscaled_url,
                    "scale_factor": result.scale,
                    "width": result.width,
                    "height": result.height,
                }
                for result in succeeded
            ]
        )
        logger.info("Upscale complete for order %s: %d ok, %d failed", order_id, len(succeeded), len(failed))

        return {
            "order_id": order_id,
            "count": len(succeeded),
            "images": [
                {
                    "original_url": result.original_url,
                    "upscaled_url": result.upscaled_url,
                    "scale": result.scale,
                    "width": result.width,
                    "height": result.height,
                }
                for result in succeeded
            ],
            "failed": failed,
            "total_cost_cents": calculate_upscale_price_cents(len(succeeded), scale),
        }
