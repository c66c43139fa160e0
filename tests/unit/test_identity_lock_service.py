"""Unit tests for IdentityLockService."""

from uuid import uuid4

import pytest

from src.api.middleware.error_handler import ConflictError, NotFoundError, UpstreamServiceError
from src.core.styles import get_style
from src.services.generation_service import GenerationService
from src.services.identity_lock_service import IdentityLockService
from src.services.image_archive import ImageArchive
from src.services.notification_service import NotificationService

REFERENCE_URL = "https://test-project.supabase.co/storage/v1/object/public/headshots/ref.jpg"


@pytest.fixture
def identity_lock_service(backend) -> IdentityLockService:
    archive = ImageArchive(backend.storage, backend.http_client)
    generation = GenerationService(
        backend.orders,
        backend.images,
        archive,
        backend.standard_provider,
        backend.premium_provider,
        backend.fallback_provider,
        NotificationService(backend.notifications, backend.email),
    )
    return IdentityLockService(generation, backend.character_sheets, backend.gemini, archive)


class TestCreateCharacterSheet:
    """Tests for create_character_sheet."""

    @pytest.mark.asyncio
    async def test_sheet_is_stored_and_recorded(self, identity_lock_service, backend) -> None:
        """Test the sheet lands in the order's folder and is recorded with gender."""
        order = backend.orders.add(status="paid")

        row = await identity_lock_service.create_character_sheet(order["id"], REFERENCE_URL)

        (path,) = backend.storage.objects
        assert path.startswith(f"character-sheets/{order['id']}/")
        assert path.endswith("-character-sheet.png")
        assert row["image_url"] == backend.storage.get_public_url(path)
        assert row["source_image_url"] == REFERENCE_URL
        assert row["gender"] == "female"
        assert backend.character_sheets.latest_for_order(order["id"])["id"] == row["id"]

    @pytest.mark.asyncio
    async def test_gender_failure_still_records_sheet(self, identity_lock_service, backend) -> None:
        """Test a failed classification only drops the gender."""
        order = backend.orders.add(status="paid")
        backend.gemini.fail_gender = True

        row = await identity_lock_service.create_character_sheet(order["id"], REFERENCE_URL)

        assert row["gender"] is None
        assert len(backend.character_sheets.rows) == 1

    @pytest.mark.asyncio
    async def test_render_failure_raises_upstream_error(self, identity_lock_service, backend) -> None:
        """Test nothing is stored when the sheet cannot be rendered."""
        order = backend.orders.add(status="paid")
        backend.gemini.fail_sheet = True

        with pytest.raises(UpstreamServiceError) as exc_info:
            await identity_lock_service.create_character_sheet(order["id"], REFERENCE_URL)

        assert exc_info.value.provider == "gemini:fake"
        assert backend.storage.objects == {}
        assert backend.character_sheets.rows == []

    @pytest.mark.asyncio
    async def test_unknown_order_raises_not_found(self, identity_lock_service, backend) -> None:
        """Test an unknown order renders nothing."""
        with pytest.raises(NotFoundError):
            await identity_lock_service.create_character_sheet(uuid4(), REFERENCE_URL)

        assert backend.gemini.sheet_calls == []


class TestGenerate:
    """Tests for identity-locked generation."""

    @pytest.mark.asyncio
    async def test_creates_sheet_then_renders_locked_styles(self, identity_lock_service, backend) -> None:
        """Test the first batch builds a sheet and renders premium images against it."""
        order = backend.orders.add(status="paid")

        result = await identity_lock_service.generate(
            order["id"], REFERENCE_URL, ["corporate-navy", "business-casual-blue"]
        )

        sheet = backend.character_sheets.latest_for_order(order["id"])
        assert result["character_sheet_url"] == sheet["image_url"]
        assert backend.gemini.locked_sheets == [sheet["image_url"]]
        assert result["count"] == 2
        assert all(img["quality"] == "premium" for img in result["images"])
        assert len(backend.gemini.locked.calls) == 2
        assert backend.standard_provider.calls == []
        assert backend.orders.get(order["id"])["status"] == "generating"

    @pytest.mark.asyncio
    async def test_female_outfits_are_used(self, identity_lock_service, backend) -> None:
        """Test prompts follow the gender recorded on the sheet."""
        order = backend.orders.add(status="paid")
        navy = get_style("corporate-navy")

        await identity_lock_service.generate(order["id"], REFERENCE_URL, ["corporate-navy"])

        assert backend.gemini.locked.calls == [navy.prompt_for("female")]
        assert navy.outfit_female in backend.images.list_generated(order["id"])[0]["prompt"]

    @pytest.mark.asyncio
    async def test_existing_sheet_is_reused(self, identity_lock_service, backend) -> None:
        """Test a second batch does not render another sheet."""
        order = backend.orders.add(status="paid")
        existing = backend.character_sheets.create(
            order["id"], "https://cdn.test/sheet.png", REFERENCE_URL, "male"
        )

        await identity_lock_service.generate(order["id"], REFERENCE_URL, ["corporate-navy"])

        assert backend.gemini.sheet_calls == []
        assert backend.gemini.locked_sheets == [existing["image_url"]]
        assert backend.gemini.locked.calls == [get_style("corporate-navy").prompt_for("male")]

    @pytest.mark.asyncio
    async def test_locked_failure_falls_back(self, identity_lock_service, backend) -> None:
        """Test a style the locked renderer cannot produce goes to the fallback."""
        order = backend.orders.add(status="paid")
        backend.gemini.locked.fail_all = True

        result = await identity_lock_service.generate(order["id"], REFERENCE_URL, ["corporate-navy"])

        assert result["count"] == 1
        assert len(backend.fallback_provider.calls) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", ["training", "completed", "failed"])
    async def test_wrong_state_renders_nothing(self, identity_lock_service, backend, status) -> None:
        """Test the state check runs before any sheet is rendered."""
        order = backend.orders.add(status=status)

        with pytest.raises(ConflictError):
            await identity_lock_service.generate(order["id"], REFERENCE_URL, ["corporate-navy"])

        assert backend.gemini.sheet_calls == []
        assert backend.character_sheets.rows == []

    @pytest.mark.asyncio
    async def test_sheet_failure_leaves_order_paid(self, identity_lock_service, backend) -> None:
        """Test a failed sheet aborts before the order starts generating."""
        order = backend.orders.add(status="paid")
        backend.gemini.fail_sheet = True

        with pytest.raises(UpstreamServiceError):
            await identity_lock_service.generate(order["id"], REFERENCE_URL, ["corporate-navy"])

        assert backend.orders.get(order["id"])["status"] == "paid"
        assert backend.gemini.locked.calls == []
