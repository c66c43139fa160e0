"""Unit tests for NotificationService and EmailService."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.services.email_service import EmailService
from src.services.notification_service import NotificationService


class TestNotificationService:
    """Tests for exactly-once notifications."""

    @pytest.mark.asyncio
    async def test_sends_once_per_order_and_kind(self, backend) -> None:
        """Test the claim ledger suppresses repeats."""
        service = NotificationService(backend.notifications, backend.email)
        order = backend.orders.add(tier="pro", headshot_count=20)

        assert await service.order_confirmed(order) is True
        assert await service.order_confirmed(order) is False

        backend.email.send_order_confirmation.assert_awaited_once_with(
            "customer@example.com", order["id"], tier="pro", headshot_count=20
        )

    @pytest.mark.asyncio
    async def test_kinds_are_independent(self, backend) -> None:
        """Test different notification kinds each send."""
        service = NotificationService(backend.notifications, backend.email)
        order = backend.orders.add()

        assert await service.training_started(order) is True
        assert await service.headshots_ready(order, image_count=10) is True

        backend.email.send_headshots_ready.assert_awaited_once_with(
            "customer@example.com", order["id"], image_count=10
        )

    @pytest.mark.asyncio
    async def test_failed_send_releases_claim(self, backend) -> None:
        """Test a failed send can be retried later."""
        failing = MagicMock()
        failing.send_generation_failed = AsyncMock(return_value={"success": False, "error": "boom"})
        order = backend.orders.add()

        assert await NotificationService(backend.notifications, failing).generation_failed(order) is False
        assert backend.notifications.claims == set()

        assert await NotificationService(backend.notifications, backend.email).generation_failed(order) is True
        assert (order["id"], "generation_failed") in backend.notifications.claims

    @pytest.mark.asyncio
    async def test_order_without_email_is_skipped(self, backend) -> None:
        """Test nothing is claimed when there is no recipient."""
        service = NotificationService(backend.notifications, backend.email)
        order = backend.orders.add(email=None)

        assert await service.order_confirmed(order) is False
        assert backend.notifications.claims == set()
        backend.email.send_order_confirmation.assert_not_awaited()


class TestEmailService:
    """Tests for EmailService."""

    @pytest.mark.asyncio
    @patch("src.services.email_service.resend.Emails.send")
    async def test_order_confirmation_links_to_upload(self, mock_send) -> None:
        """Test the confirmation email content."""
        mock_send.return_value = {"id": "email_123"}

        result = await EmailService().send_order_confirmation(
            "buyer@example.com", "order-1", tier="pro", headshot_count=20
        )

        assert result == {"success": True, "email_id": "email_123"}
        params = mock_send.call_args.args[0]
        assert params["to"] == ["buyer@example.com"]
        assert params["subject"] == "Your Headshot Order is Confirmed!"
        assert "https://iheadshot.test/upload/order-1" in params["html"]
        assert "20" in params["text"]

    @pytest.mark.asyncio
    @patch("src.services.email_service.resend.Emails.send")
    async def test_headshots_ready_links_to_gallery(self, mock_send) -> None:
        """Test the ready email content."""
        mock_send.return_value = {"id": "email_456"}

        await EmailService().send_headshots_ready("buyer@example.com", "order-1", image_count=10)

        params = mock_send.call_args.args[0]
        assert params["subject"] == "Your Professional Headshots Are Ready!"
        assert "https://iheadshot.test/gallery/order-1" in params["html"]

    @pytest.mark.asyncio
    @patch("src.services.email_service.resend.Emails.send")
    async def test_send_failure_is_reported(self, mock_send) -> None:
        """Test Resend errors are returned, not raised."""
        mock_send.side_effect = Exception("Resend unavailable")

        result = await EmailService().send_generation_failed("buyer@example.com", "order-1")

        assert result["success"] is False
        assert "Resend unavailable" in result["error"]
