"""Unit tests for TrainingService."""

from urllib.parse import parse_qs, urlparse
from uuid import uuid4

import httpx
import pytest

from src.api.middleware.error_handler import (
    ConflictError,
    NotFoundError,
    UpstreamServiceError,
    ValidationError,
)
from src.providers.astria import AstriaClient
from src.providers.base import ProviderError
from src.services.notification_service import NotificationService
from src.services.training_service import TrainingService, build_callback_url


@pytest.fixture
def training_service(backend) -> TrainingService:
    """Training service over in-memory collaborators."""
    return TrainingService(
        backend.orders,
        backend.uploads,
        backend.training_jobs,
        backend.storage,
        backend.astria,
        NotificationService(backend.notifications, backend.email),
    )


def test_build_callback_url_carries_ids() -> None:
    """Test the callback URL threads the order and job ids."""
    url = build_callback_url("https://api.test/api/v1/webhooks/astria", "order-1", "job-1")

    parsed = urlparse(url)
    assert parsed.path == "/api/v1/webhooks/astria"
    assert parse_qs(parsed.query) == {"order_id": ["order-1"], "training_job_id": ["job-1"]}


class TestStartTraining:
    """Tests for start_training."""

    @pytest.mark.asyncio
    async def test_starts_training_for_paid_order(self, training_service, backend) -> None:
        """Test a paid order with enough photos moves to training."""
        order = backend.orders.add(status="paid")
        backend.uploads.seed(order["id"], 10)

        result = await training_service.start_training(order["id"])

        assert result["status"] == "training"
        assert result["tune_id"] == "4242"
        assert backend.orders.get(order["id"])["status"] == "training"

        job = backend.training_jobs.get(result["training_job_id"])
        assert job["astria_tune_id"] == "4242"
        assert job["status"] == "training"

        args, kwargs = backend.astria.create_tune.call_args
        assert len(args[0]) == 10
        assert args[0][0].startswith(backend.storage.base_url)
        assert kwargs["title"] == f"headshot-{order['id']}"
        callback = parse_qs(urlparse(kwargs["callback_url"]).query)
        assert callback["order_id"] == [order["id"]]
        assert callback["training_job_id"] == [result["training_job_id"]]

        backend.email.send_training_started.assert_awaited_once_with("customer@example.com", order["id"])

    @pytest.mark.asyncio
    async def test_unknown_order_raises_not_found(self, training_service) -> None:
        """Test an unknown order."""
        with pytest.raises(NotFoundError):
            await training_service.start_training(uuid4())

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", ["training", "generating", "completed", "failed"])
    async def test_non_paid_order_is_rejected_without_writes(self, training_service, backend, status) -> None:
        """Test training can only start from paid, and nothing is written otherwise."""
        order = backend.orders.add(status=status)
        backend.uploads.seed(order["id"], 10)

        with pytest.raises(ConflictError):
            await training_service.start_training(order["id"])

        assert backend.training_jobs.rows == {}
        assert backend.orders.get(order["id"])["status"] == status
        backend.astria.create_tune.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_too_few_uploads_raises_validation_error(self, training_service, backend) -> None:
        """Test the minimum photo count."""
        order = backend.orders.add(status="paid")
        backend.uploads.seed(order["id"], 9)

        with pytest.raises(ValidationError):
            await training_service.start_training(order["id"])

        assert backend.orders.get(order["id"])["status"] == "paid"
        assert backend.training_jobs.rows == {}

    @pytest.mark.asyncio
    async def test_second_start_conflicts(self, training_service, backend) -> None:
        """Test a repeated start does not submit a second tune."""
        order = backend.orders.add(status="paid")
        backend.uploads.seed(order["id"], 10)

        await training_service.start_training(order["id"])
        with pytest.raises(ConflictError):
            await training_service.start_training(order["id"])

        assert backend.astria.create_tune.await_count == 1
        assert len(backend.training_jobs.rows) == 1

    @pytest.mark.asyncio
    async def test_provider_rejection_fails_order(self, training_service, backend) -> None:
        """Test an Astria rejection fails the job and the order."""
        order = backend.orders.add(status="paid")
        backend.uploads.seed(order["id"], 10)
        backend.astria.create_tune.side_effect = ProviderError("astria", "422 invalid images")

        with pytest.raises(UpstreamServiceError) as exc_info:
            await training_service.start_training(order["id"])

        assert exc_info.value.provider == "astria"
        assert backend.orders.get(order["id"])["status"] == "failed"
        (job,) = backend.training_jobs.rows.values()
        assert job["status"] == "failed"
        assert job["error_message"] == "422 invalid images"
        backend.email.send_generation_failed.assert_awaited_once()
        backend.email.send_training_started.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_non_json_tune_response_fails_order(self, backend) -> None:
        """Test a 200 gateway page from Astria does not leave the order training."""
        astria = AstriaClient(
            "astria-key",
            "https://api.astria.test",
            httpx.AsyncClient(
                transport=httpx.MockTransport(lambda request: httpx.Response(200, text="<html>gateway</html>"))
            ),
        )
        service = TrainingService(
            backend.orders,
            backend.uploads,
            backend.training_jobs,
            backend.storage,
            astria,
            NotificationService(backend.notifications, backend.email),
        )
        order = backend.orders.add(status="paid")
        backend.uploads.seed(order["id"], 10)

        with pytest.raises(UpstreamServiceError) as exc_info:
            await service.start_training(order["id"])

        assert exc_info.value.provider == "astria"
        assert backend.orders.get(order["id"])["status"] == "failed"
        (job,) = backend.training_jobs.rows.values()
        assert job["status"] == "failed"
        backend.email.send_generation_failed.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unexpected_error_fails_order_and_propagates(self, training_service, backend) -> None:
        """Test an error outside the provider taxonomy still fails the order."""
        order = backend.orders.add(status="paid")
        backend.uploads.seed(order["id"], 10)
        backend.astria.create_tune.side_effect = RuntimeError("connection pool closed")

        with pytest.raises(RuntimeError):
            await training_service.start_training(order["id"])

        assert backend.orders.get(order["id"])["status"] == "failed"
        (job,) = backend.training_jobs.rows.values()
        assert job["error_message"] == "connection pool closed"
