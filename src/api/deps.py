"""FastAPI dependency injection functions.

Third-party clients are constructed once and shared; repositories and
services are cheap and built per request. Tests replace any of these
through ``app.dependency_overrides``.
"""

from functools import lru_cache
from typing import Annotated

import httpx
from fastapi import Depends

from src.api.middleware.error_handler import UpstreamServiceError
from src.core.config import get_settings
from src.core.gemini import get_gemini_client
from src.core.openai import get_openai_client
from src.core.supabase import get_supabase_client
from src.providers.astria import AstriaClient
from src.providers.base import ImageProvider
from src.providers.gemini import GeminiImageProvider
from src.providers.openai_images import OpenAIImageProvider
from src.providers.replicate import ReplicateClient, ReplicateImageProvider
from src.providers.storage import StorageClient
from src.providers.topaz import TopazClient
from src.repositories.character_sheets import CharacterSheetRepository
from src.repositories.images import ImageRepository
from src.repositories.notifications import NotificationRepository
from src.repositories.orders import OrderRepository
from src.repositories.training_jobs import TrainingJobRepository
from src.repositories.uploads import UploadRepository
from src.services.checkout_service import CheckoutService
from src.services.email_service import EmailService
from src.services.fulfillment_service import FulfillmentService
from src.services.generation_service import GenerationService
from src.services.identity_lock_service import IdentityLockService
from src.services.image_archive import ImageArchive
from src.services.notification_service import NotificationService
from src.services.status_service import StatusService
from src.services.training_service import TrainingService
from src.services.upload_service import UploadService
from src.services.upscale_service import UpscaleService


# Shared clients


@lru_cache
def get_http_client() -> httpx.AsyncClient:
    """Shared HTTP session for downloading provider output."""
    return httpx.AsyncClient(follow_redirects=True)


@lru_cache
def get_astria_client() -> AstriaClient:
    settings = get_settings()
    return AstriaClient.create(settings.astria_api_key, settings.astria_api_url)


@lru_cache
def get_replicate_client() -> ReplicateClient:
    settings = get_settings()
    return ReplicateClient.create(settings.replicate_api_token, settings.replicate_api_url)


@lru_cache
def get_topaz_client() -> TopazClient:
    settings = get_settings()
    return TopazClient.create(settings.topaz_api_key, settings.topaz_api_url)


async def close_clients() -> None:
    """Close every HTTP session opened by the shared clients."""
    for factory in (get_astria_client, get_replicate_client, get_topaz_client):
        if factory.cache_info().currsize:
            await factory().close()
            factory.cache_clear()
    if get_http_client.cache_info().currsize:
        await get_http_client().aclose()
        get_http_client.cache_clear()


def get_storage_client() -> StorageClient:
    return StorageClient(get_supabase_client(), get_settings().storage_bucket)


def get_email_service() -> EmailService:
    return EmailService()


# Repositories


def get_order_repository() -> OrderRepository:
    return OrderRepository(get_supabase_client())


def get_training_job_repository() -> TrainingJobRepository:
    return TrainingJobRepository(get_supabase_client())


def get_image_repository() -> ImageRepository:
    return ImageRepository(get_supabase_client())


def get_upload_repository() -> UploadRepository:
    return UploadRepository(get_supabase_client())


def get_notification_repository() -> NotificationRepository:
    return NotificationRepository(get_supabase_client())


def get_character_sheet_repository() -> CharacterSheetRepository:
    return CharacterSheetRepository(get_supabase_client())


# Image providers


def get_standard_image_provider(
    client: Annotated[ReplicateClient, Depends(get_replicate_client)],
) -> ImageProvider:
    return ReplicateImageProvider(client, get_settings().replicate_standard_model)


def get_premium_image_provider(
    client: Annotated[ReplicateClient, Depends(get_replicate_client)],
) -> ImageProvider:
    return ReplicateImageProvider(client, get_settings().replicate_premium_model, output_format="png")


def get_fallback_image_provider(
    http_client: Annotated[httpx.AsyncClient, Depends(get_http_client)],
) -> ImageProvider | None:
    """OpenAI image edits, or None when no OpenAI key is configured."""
    settings = get_settings()
    if not settings.openai_api_key:
        return None
    return OpenAIImageProvider(get_openai_client(), http_client, settings.openai_image_model)


def get_gemini_provider(
    http_client: Annotated[httpx.AsyncClient, Depends(get_http_client)],
) -> GeminiImageProvider:
    """Gemini identity-lock provider; identity lock is unavailable without a key."""
    settings = get_settings()
    if not settings.google_ai_api_key:
        raise UpstreamServiceError("Identity lock is not configured", provider="gemini")
    return GeminiImageProvider(
        get_gemini_client(), http_client, settings.gemini_image_model, settings.gemini_text_model
    )


# Services


def get_notification_service(
    notifications: Annotated[NotificationRepository, Depends(get_notification_repository)],
    email: Annotated[EmailService, Depends(get_email_service)],
) -> NotificationService:
    return NotificationService(notifications, email)


def get_image_archive(
    storage: Annotated[StorageClient, Depends(get_storage_client)],
    http_client: Annotated[httpx.AsyncClient, Depends(get_http_client)],
) -> ImageArchive:
    return ImageArchive(storage, http_client)


def get_checkout_service(
    orders: Annotated[OrderRepository, Depends(get_order_repository)],
    notifications: Annotated[NotificationService, Depends(get_notification_service)],
) -> CheckoutService:
    return CheckoutService(orders, notifications)


def get_status_service(
    images: Annotated[ImageRepository, Depends(get_image_repository)],
    training_jobs: Annotated[TrainingJobRepository, Depends(get_training_job_repository)],
) -> StatusService:
    return StatusService(images, training_jobs)


def get_upload_service(
    uploads: Annotated[UploadRepository, Depends(get_upload_repository)],
    storage: Annotated[StorageClient, Depends(get_storage_client)],
) -> UploadService:
    return UploadService(uploads, storage)


def get_training_service(
    orders: Annotated[OrderRepository, Depends(get_order_repository)],
    uploads: Annotated[UploadRepository, Depends(get_upload_repository)],
    training_jobs: Annotated[TrainingJobRepository, Depends(get_training_job_repository)],
    storage: Annotated[StorageClient, Depends(get_storage_client)],
    astria: Annotated[AstriaClient, Depends(get_astria_client)],
    notifications: Annotated[NotificationService, Depends(get_notification_service)],
) -> TrainingService:
    return TrainingService(orders, uploads, training_jobs, storage, astria, notifications)


def get_fulfillment_service(
    orders: Annotated[OrderRepository, Depends(get_order_repository)],
    training_jobs: Annotated[TrainingJobRepository, Depends(get_training_job_repository)],
    images: Annotated[ImageRepository, Depends(get_image_repository)],
    astria: Annotated[AstriaClient, Depends(get_astria_client)],
    notifications: Annotated[NotificationService, Depends(get_notification_service)],
) -> FulfillmentService:
    return FulfillmentService(orders, training_jobs, images, astria, notifications)


def get_generation_service(
    orders: Annotated[OrderRepository, Depends(get_order_repository)],
    images: Annotated[ImageRepository, Depends(get_image_repository)],
    archive: Annotated[ImageArchive, Depends(get_image_archive)],
    standard: Annotated[ImageProvider, Depends(get_standard_image_provider)],
    premium: Annotated[ImageProvider, Depends(get_premium_image_provider)],
    fallback: Annotated[ImageProvider | None, Depends(get_fallback_image_provider)],
    notifications: Annotated[NotificationService, Depends(get_notification_service)],
) -> GenerationService:
    return GenerationService(orders, images, archive, standard, premium, fallback, notifications)


def get_identity_lock_service(
    generation: Annotated[GenerationService, Depends(get_generation_service)],
    character_sheets: Annotated[CharacterSheetRepository, Depends(get_character_sheet_repository)],
    gemini: Annotated[GeminiImageProvider, Depends(get_gemini_provider)],
    archive: Annotated[ImageArchive, Depends(get_image_archive)],
) -> IdentityLockService:
    return IdentityLockService(generation, character_sheets, gemini, archive)


def get_upscale_service(
    orders: Annotated[OrderRepository, Depends(get_order_repository)],
    images: Annotated[ImageRepository, Depends(get_image_repository)],
    topaz: Annotated[TopazClient, Depends(get_topaz_client)],
    archive: Annotated[ImageArchive, Depends(get_image_archive)],
) -> UpscaleService:
    return UpscaleService(orders, images, topaz, archive)


CheckoutServiceDep = Annotated[CheckoutService, Depends(get_checkout_service)]
StatusServiceDep = Annotated[StatusService, Depends(get_status_service)]
UploadServiceDep = Annotated[UploadService, Depends(get_upload_service)]
TrainingServiceDep = Annotated[TrainingService, Depends(get_training_service)]
FulfillmentServiceDep = Annotated[FulfillmentService, Depends(get_fulfillment_service)]
GenerationServiceDep = Annotated[GenerationService, Depends(get_generation_service)]
IdentityLockServiceDep = Annotated[IdentityLockService, Depends(get_identity_lock_service)]
UpscaleServiceDep = Annotated[UpscaleService, Depends(get_upscale_service)]
OrderRepositoryDep = Annotated[OrderRepository, Depends(get_order_repository)]
