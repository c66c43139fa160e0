"""Identity-locked generation: character sheets and sheet-anchored styles."""

import logging
from typing import Any
from uuid import UUID

from src.api.middleware.error_handler import UpstreamServiceError
from src.providers.base import ProviderError
from src.providers.gemini import GeminiImageProvider
from src.repositories.character_sheets import CharacterSheetRepository
from src.services.generation_service import GenerationService
from src.services.image_archive import ImageArchive

logger = logging.getLogger(__name__)


class IdentityLockService:
    """Renders headshots anchored to a per-order character sheet.

    The sheet is created once per order and reused; styles are rendered
    through the generation batch runner, so fallback, partial success and
    order transitions behave exactly as for instant generation.
    """

    def __init__(
        self,
        generation: GenerationService,
        character_sheets: CharacterSheetRepository,
        gemini: GeminiImageProvider,
        archive: ImageArchive,
    ) -> None:
        self.generation = generation
        self.character_sheets = character_sheets
        self.gemini = gemini
        self.archive = archive

    async def create_character_sheet(self, order_id: UUID | str, image_url: str) -> dict[str, Any]:
        """Render, store and record a character sheet for an order.

        Gender detection only picks outfits, so a failed classification
        is logged and the sheet is recorded without one.

        Args:
            order_id: Order UUID.
            image_url: Public URL of the reference photo.

        Returns:
            dict: The character sheet row.

        Raises:
            NotFoundError: If the order does not exist.
            UpstreamServiceError: If the sheet cannot be rendered or stored.
        """
        order = self.generation.get_order(order_id)
        order_id = str(order["id"])

        try:
            sheet = await self.gemini.generate_character_sheet(image_url)
            sheet_url = await self.archive.archive(sheet, f"character-sheets/{order_id}", "character-sheet")
        except ProviderError as e:
            logger.error("Character sheet failed for order %s: %s", order_id, e.message)
            raise UpstreamServiceError("Failed to generate character sheet", provider=e.provider) from e

        try:
            gender = await self.gemini.detect_gender(image_url)
        except ProviderError as e:
            logger.warning("Gender detection failed for order %s: %s", order_id, e.message)
            gender = None

        row = self.character_sheets.create(order_id, sheet_url, image_url, gender)
        logger.info("Character sheet %s stored for order %s (gender=%s)", row["id"], order_id, gender)
        return row

    async def generate(
        self,
        order_id: UUID | str,
        image_url: str,
        style_ids: list[str] | None = None,
    ) -> dict[str, Any]:
        """Generate identity-locked headshots for an order.

        Uses the order's latest character sheet, creating one from
        ``image_url`` if the order has none. Every image is premium quality.

        Returns:
            dict: The batch result plus ``character_sheet_url``.

        Raises:
            NotFoundError: If the order does not exist.
            ConflictError: If the order cannot accept new images.
            ValidationError: If a requested style is unknown.
            UpstreamServiceError: If the sheet or every style failed.
        """
        order = self.generation.get_order(order_id)
        styles = self.generation.resolve_styles(style_ids, order)
        self.generation.ensure_can_generate(order)

        sheet = self.character_sheets.latest_for_order(order["id"])
        if sheet is None:
            sheet = await self.create_character_sheet(order["id"], image_url)

        try:
            locked = await self.gemini.lock_identity(sheet["image_url"])
        except ProviderError as e:
            raise UpstreamServiceError("Failed to load character sheet", provider=e.provider) from e

        gender = sheet.get("gender")
        jobs = [(style, style.prompt_for(gender)) for style in styles]
        result = await self.generation.run_batch(order, locked, image_url, jobs, "premium")
        return {**result, "character_sheet_url": sheet["image_url"]}
