"""Order training, status, generation, identity lock and upscale routes."""

from uuid import UUID

from fastapi import APIRouter, status

from src.api.deps import (
    CheckoutServiceDep,
    GenerationServiceDep,
    IdentityLockServiceDep,
    StatusServiceDep,
    TrainingServiceDep,
    UpscaleServiceDep,
)
from src.schemas.generation import (
    CharacterSheetRequest,
    CharacterSheetResponse,
    IdentityLockGenerationResponse,
    InstantGenerationRequest,
    InstantGenerationResponse,
    PremiumRegenerationRequest,
    PremiumRegenerationResponse,
)
from src.schemas.order import OrderStatusResponse, TrainingStartResponse
from src.schemas.upscale import UpscaleRequest, UpscaleResponse

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post(
    "/{order_id}/train",
    response_model=TrainingStartResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Start training",
    description="Submits the order's uploaded photos for face training. The order must be paid.",
)
async def start_training(order_id: UUID, service: TrainingServiceDep) -> TrainingStartResponse:
    """Start face training for a paid order.

    Raises:
        NotFoundError: 404 if the order does not exist.
        ConflictError: 409 if the order is not paid.
        ValidationError: 422 if too few photos were uploaded.
        UpstreamServiceError: 502 if the training provider rejects the job.
    """
    result = await service.start_training(order_id)
    return TrainingStartResponse(**result)


@router.get(
    "/{order_ref}/status",
    response_model=OrderStatusResponse,
    summary="Get order status",
    description="Returns status, progress and, once completed, the generated images. Accepts an order id or checkout session id.",
)
async def get_order_status(
    order_ref: str,
    checkout: CheckoutServiceDep,
    status_service: StatusServiceDep,
) -> OrderStatusResponse:
    """Return the polled status of an order.

    A checkout session whose payment webhook has not landed yet reads as
    not found until the order exists.

    Raises:
        NotFoundError: 404 if no order matches.
    """
    order = checkout.find_order(order_ref)
    return OrderStatusResponse(**status_service.project(order))


@router.post(
    "/{order_id}/generate-instant",
    response_model=InstantGenerationResponse,
    summary="Generate headshots instantly",
    description="Renders styles from one reference photo without training. Partial failures are reported per style.",
)
async def generate_instant(
    order_id: UUID,
    data: InstantGenerationRequest,
    service: GenerationServiceDep,
) -> InstantGenerationResponse:
    """Generate headshots from a reference photo.

    Raises:
        NotFoundError: 404 if the order does not exist.
        ConflictError: 409 if the order cannot accept new images.
        ValidationError: 422 if a style is unknown.
        UpstreamServiceError: 502 if no style could be generated.
    """
    result = await service.generate_instant(order_id, data.image_url, data.styles)
    return InstantGenerationResponse(**result)


@router.post(
    "/{order_id}/regenerate-premium",
    response_model=PremiumRegenerationResponse,
    summary="Regenerate one style in premium quality",
)
async def regenerate_premium(
    order_id: UUID,
    data: PremiumRegenerationRequest,
    service: GenerationServiceDep,
) -> PremiumRegenerationResponse:
    """Re-render one style with the premium model."""
    result = await service.regenerate_premium(order_id, data.image_url, data.style)
    return PremiumRegenerationResponse(**result)


@router.post(
    "/{order_id}/character-sheet",
    response_model=CharacterSheetResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a character sheet",
    description="Renders a multi-angle character sheet from the reference photo and stores it for the order.",
)
async def create_character_sheet(
    order_id: UUID,
    data: CharacterSheetRequest,
    service: IdentityLockServiceDep,
) -> CharacterSheetResponse:
    """Create the identity reference used by identity-locked generation.

    Raises:
        NotFoundError: 404 if the order does not exist.
        UpstreamServiceError: 502 if the sheet cannot be rendered.
    """
    row = await service.create_character_sheet(order_id, data.image_url)
    return CharacterSheetResponse(**row)


@router.post(
    "/{order_id}/generate-identity-lock",
    response_model=IdentityLockGenerationResponse,
    summary="Generate identity-locked headshots",
    description="Renders styles anchored to the order's character sheet, creating the sheet first if needed.",
)
async def generate_identity_lock(
    order_id: UUID,
    data: InstantGenerationRequest,
    service: IdentityLockServiceDep,
) -> IdentityLockGenerationResponse:
    """Generate premium headshots that keep the customer's face unchanged.

    Raises:
        NotFoundError: 404 if the order does not exist.
        ConflictError: 409 if the order cannot accept new images.
        ValidationError: 422 if a style is unknown.
        UpstreamServiceError: 502 if the sheet or every style failed.
    """
    result = await service.generate(order_id, data.image_url, data.styles)
    return IdentityLockGenerationResponse(**result)


@router.post(
    "/{order_id}/upscale",
    response_model=UpscaleResponse,
    summary="Upscale headshots",
    description="Upscales generated headshots. Originals are kept; successes are saved even if some images fail.",
)
async def upscale_images(
    order_id: UUID,
    data: UpscaleRequest,
    service: UpscaleServiceDep,
) -> UpscaleResponse:
    """Upscale some of an order's headshots.

    Raises:
        NotFoundError: 404 if the order does not exist.
        ValidationError: 422 for an unsupported scale or foreign image URL.
        UpstreamServiceError: 502 if no image could be upscaled.
    """
    result = await service.upscale(order_id, data.image_urls, data.scale, data.creativity)
    return UpscaleResponse(**result)
