"""Pytest configuration and fixtures."""

import os
from collections.abc import Generator
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import httpx
import pytest
from fastapi.testclient import TestClient

# Set test environment variables before importing application modules
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("APP_URL", "https://api.iheadshot.test")
os.environ.setdefault("FRONTEND_URL", "https://iheadshot.test")
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_SECRET_KEY", "test-secret-key")
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_stripe_secret_key")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "whsec_test_webhook_secret")
os.environ.setdefault("STRIPE_PUBLISHABLE_KEY", "pk_test_stripe_publishable_key")
os.environ.setdefault("RESEND_API_KEY", "re_test_key")
os.environ.setdefault("ASTRIA_API_KEY", "test-astria-key")
os.environ.setdefault("REPLICATE_API_TOKEN", "r8_test_token")
os.environ.setdefault("TOPAZ_API_KEY", "test-topaz-key")

from src.providers.base import ImageResult, ProviderError  # noqa: E402


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class FakeOrderRepository:
    """In-memory stand-in for OrderRepository with the same CAS semantics."""

    def __init__(self) -> None:
        self.rows: dict[str, dict[str, Any]] = {}
        self.writes = 0

    def add(self, **overrides: Any) -> dict[str, Any]:
        order = {
            "id": str(uuid4()),
            "email": "customer@example.com",
            "stripe_session_id": f"cs_test_{uuid4().hex[:12]}",
            "stripe_payment_intent": "pi_test_123",
            "amount": 499,
            "tier": "basic",
            "headshot_count": 10,
            "status": "paid",
            "created_at": _now(),
            "updated_at": _now(),
        }
        order.update(overrides)
        self.rows[order["id"]] = order
        return order

    def get(self, order_id: Any) -> dict[str, Any] | None:
        row = self.rows.get(str(order_id))
        return dict(row) if row else None

    def get_by_stripe_session(self, stripe_session_id: str) -> dict[str, Any] | None:
        for row in self.rows.values():
            if row["stripe_session_id"] == stripe_session_id:
                return dict(row)
        return None

    def create_if_absent(self, data: dict[str, Any]) -> tuple[dict[str, Any], bool]:
        existing = self.get_by_stripe_session(data["stripe_session_id"])
        if existing:
            return existing, False
        self.writes += 1
        return dict(self.add(**data)), True

    def compare_and_set_status(self, order_id: Any, expected: str, new: str) -> bool:
        row = self.rows.get(str(order_id))
        if not row or row["status"] != expected:
            return False
        self.writes += 1
        row["status"] = new
        row["updated_at"] = _now()
        return True


class FakeTrainingJobRepository:
    """In-memory stand-in for TrainingJobRepository."""

    def __init__(self) -> None:
        self.rows: dict[str, dict[str, Any]] = {}

    def create(self, order_id: Any, status: str = "pending") -> dict[str, Any]:
        job = {
            "id": str(uuid4()),
            "order_id": str(order_id),
            "astria_tune_id": None,
            "status": status,
            "model_url": None,
            "error_message": None,
            "created_at": _now(),
            "completed_at": None,
        }
        self.rows[job["id"]] = job
        return dict(job)

    def get(self, job_id: Any) -> dict[str, Any] | None:
        row = self.rows.get(str(job_id))
        return dict(row) if row else None

    def get_by_tune_id(self, tune_id: str) -> dict[str, Any] | None:
        for row in self.rows.values():
            if row["astria_tune_id"] == tune_id:
                return dict(row)
        return None

    def get_for_order(self, order_id: Any) -> dict[str, Any] | None:
        jobs = [row for row in self.rows.values() if row["order_id"] == str(order_id)]
        return dict(jobs[-1]) if jobs else None

    def update(self, job_id: Any, data: dict[str, Any]) -> dict[str, Any] | None:
        row = self.rows.get(str(job_id))
        if not row:
            return None
        row.update(data)
        return dict(row)


class FakeImageRepository:
    """In-memory stand-in for ImageRepository, unique on (order_id, image_url)."""

    def __init__(self) -> None:
        self.generated: list[dict[str, Any]] = []
        self.upscaled: list[dict[str, Any]] = []

    def add_generated(self, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        inserted = []
        for row in rows:
            key = (str(row["order_id"]), row["image_url"])
            if any((img["order_id"], img["image_url"]) == key for img in self.generated):
                continue
            record = {"id": str(uuid4()), "created_at": _now(), **row, "order_id": key[0]}
            self.generated.append(record)
            inserted.append(record)
        return inserted

    def count_generated(self, order_id: Any) -> int:
        return len(self.list_generated(order_id))

    def list_generated(self, order_id: Any) -> list[dict[str, Any]]:
        return [img for img in self.generated if img["order_id"] == str(order_id)]

    def add_upscaled(self, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        records = [{"id": str(uuid4()), "created_at": _now(), **row} for row in rows]
        self.upscaled.extend(records)
        return records


class FakeUploadRepository:
    """In-memory stand-in for UploadRepository."""

    def __init__(self) -> None:
        self.rows: list[dict[str, Any]] = []

    def create(
        self,
        order_id: Any,
        file_path: str,
        file_name: str | None,
        file_size: int | None = None,
        mime_type: str | None = None,
    ) -> dict[str, Any]:
        row = {
            "id": str(uuid4()),
            "order_id": str(order_id),
            "file_path": file_path,
            "file_name": file_name,
            "file_size": file_size,
            "mime_type": mime_type,
            "created_at": _now(),
        }
        self.rows.append(row)
        return row

    def list_for_order(self, order_id: Any) -> list[dict[str, Any]]:
        return [row for row in self.rows if row["order_id"] == str(order_id)]

    def seed(self, order_id: Any, count: int) -> None:
        for i in range(count):
            self.create(order_id, f"{order_id}/photo-{i}.jpg", f"photo-{i}.jpg")


class FakeCharacterSheetRepository:
    """In-memory stand-in for CharacterSheetRepository."""

    def __init__(self) -> None:
        self.rows: list[dict[str, Any]] = []

    def create(
        self,
        order_id: Any,
        image_url: str,
        source_image_url: str,
        gender: str | None = None,
    ) -> dict[str, Any]:
        row = {
            "id": str(uuid4()),
            "order_id": str(order_id),
            "image_url": image_url,
            "source_image_url": source_image_url,
            "gender": gender,
            "created_at": _now(),
        }
        self.rows.append(row)
        return dict(row)

    def latest_for_order(self, order_id: Any) -> dict[str, Any] | None:
        sheets = [row for row in self.rows if row["order_id"] == str(order_id)]
        return dict(sheets[-1]) if sheets else None


class FakeNotificationRepository:
    """In-memory (order_id, kind) claim ledger."""

    def __init__(self) -> None:
        self.claims: set[tuple[str, str]] = set()

    def claim(self, order_id: Any, kind: str) -> bool:
        key = (str(order_id), kind)
        if key in self.claims:
            return False
        self.claims.add(key)
        return True

    def release(self, order_id: Any, kind: str) -> None:
        self.claims.discard((str(order_id), kind))


class FakeStorage:
    """In-memory object storage."""

    base_url = "https://test-project.supabase.co/storage/v1/object/public/headshots"

    def __init__(self) -> None:
        self.objects: dict[str, tuple[bytes, str]] = {}

    def create_signed_upload_url(self, path: str) -> dict[str, str]:
        return {"signed_url": f"{self.base_url}/upload/sign/{path}?token=tok", "token": "tok"}

    def upload(self, path: str, content: bytes, content_type: str) -> str:
        self.objects[path] = (content, content_type)
        return self.get_public_url(path)

    def get_public_url(self, path: str) -> str:
        return f"{self.base_url}/{path}"


@dataclass
class FakeImageProvider:
    """Image provider returning inline bytes, or failing for listed prompts."""

    name: str = "fake"
    fail_all: bool = False
    failing_prompts: set[str] = field(default_factory=set)
    calls: list[str] = field(default_factory=list)

    async def generate(self, reference_url: str, prompt: str) -> ImageResult:
        self.calls.append(prompt)
        if self.fail_all or prompt in self.failing_prompts:
            raise ProviderError(self.name, "render failed")
        return ImageResult(provider=self.name, content=b"\xff\xd8fake-jpeg", content_type="image/jpeg")


PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-png"


def make_http_client(status_code: int = 200) -> httpx.AsyncClient:
    """HTTP client whose every GET returns a small PNG."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, content=PNG_BYTES, headers={"content-type": "image/png"})

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@dataclass
class FakeGeminiProvider:
    """Character sheet renderer whose locked batches go to ``locked``."""

    name: str = "gemini:fake"
    gender: str | None = "female"
    fail_sheet: bool = False
    fail_gender: bool = False
    sheet_calls: list[str] = field(default_factory=list)
    locked_sheets: list[str] = field(default_factory=list)
    locked: FakeImageProvider = field(default_factory=lambda: FakeImageProvider(name="gemini:fake:identity-lock"))

    async def generate_character_sheet(self, reference_url: str) -> ImageResult:
        self.sheet_calls.append(reference_url)
        if self.fail_sheet:
            raise ProviderError(self.name, "no image in response")
        return ImageResult(provider=self.name, content=PNG_BYTES, content_type="image/png")

    async def detect_gender(self, reference_url: str) -> str | None:
        if self.fail_gender:
            raise ProviderError(self.name, "quota exceeded")
        return self.gender

    async def lock_identity(self, character_sheet_url: str) -> FakeImageProvider:
        self.locked_sheets.append(character_sheet_url)
        return self.locked


def make_email_service(success: bool = True) -> MagicMock:
    """Email service double whose sends all report ``success``."""
    email = MagicMock()
    result = {"success": success, "email_id": "email_123"} if success else {"success": False, "error": "boom"}
    for method in (
        "send_order_confirmation",
        "send_training_started",
        "send_headshots_ready",
        "send_generation_failed",
    ):
        setattr(email, method, AsyncMock(return_value=result))
    return email


@dataclass
class FakeBackend:
    """Every external collaborator, in memory."""

    orders: FakeOrderRepository = field(default_factory=FakeOrderRepository)
    training_jobs: FakeTrainingJobRepository = field(default_factory=FakeTrainingJobRepository)
    images: FakeImageRepository = field(default_factory=FakeImageRepository)
    uploads: FakeUploadRepository = field(default_factory=FakeUploadRepository)
    notifications: FakeNotificationRepository = field(default_factory=FakeNotificationRepository)
    character_sheets: FakeCharacterSheetRepository = field(default_factory=FakeCharacterSheetRepository)
    storage: FakeStorage = field(default_factory=FakeStorage)
    email: MagicMock = field(default_factory=make_email_service)
    astria: MagicMock = field(default_factory=MagicMock)
    topaz: MagicMock = field(default_factory=MagicMock)
    standard_provider: FakeImageProvider = field(default_factory=lambda: FakeImageProvider(name="replicate:standard"))
    premium_provider: FakeImageProvider = field(default_factory=lambda: FakeImageProvider(name="replicate:premium"))
    fallback_provider: FakeImageProvider = field(default_factory=lambda: FakeImageProvider(name="openai:fallback"))
    gemini: FakeGeminiProvider = field(default_factory=FakeGeminiProvider)
    http_client: httpx.AsyncClient = field(default_factory=lambda: make_http_client())

    def __post_init__(self) -> None:
        self.astria.create_tune = AsyncMock(return_value={"id": 4242, "status": "queued"})
        self.astria.create_prompt = AsyncMock(return_value={"id": 777, "status": "queued"})


@pytest.fixture
def backend() -> FakeBackend:
    """Provide fresh in-memory collaborators."""
    return FakeBackend()


@pytest.fixture(scope="session")
def test_settings() -> Generator[Any, None, None]:
    """Provide test settings with cleared cache.

    Yields:
        Settings: Test configuration settings.
    """
    from src.core.config import get_settings

    get_settings.cache_clear()
    settings = get_settings()
    yield settings
    get_settings.cache_clear()


@pytest.fixture
def client(backend: FakeBackend) -> Generator[TestClient, None, None]:
    """Provide a test client with every collaborator replaced by the fakes.

    Args:
        backend: In-memory collaborators.

    Yields:
        TestClient: FastAPI test client.
    """
    from src.api import deps
    from src.main import app

    app.dependency_overrides.update(
        {
            deps.get_order_repository: lambda: backend.orders,
            deps.get_training_job_repository: lambda: backend.training_jobs,
            deps.get_image_repository: lambda: backend.images,
            deps.get_upload_repository: lambda: backend.uploads,
            deps.get_notification_repository: lambda: backend.notifications,
            deps.get_character_sheet_repository: lambda: backend.character_sheets,
            deps.get_storage_client: lambda: backend.storage,
            deps.get_email_service: lambda: backend.email,
            deps.get_astria_client: lambda: backend.astria,
            deps.get_topaz_client: lambda: backend.topaz,
            deps.get_http_client: lambda: backend.http_client,
            deps.get_standard_image_provider: lambda: backend.standard_provider,
            deps.get_premium_image_provider: lambda: backend.premium_provider,
            deps.get_fallback_image_provider: lambda: backend.fallback_provider,
            deps.get_gemini_provider: lambda: backend.gemini,
        }
    )
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
