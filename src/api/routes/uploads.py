"""Source photo upload routes."""

from uuid import UUID

from fastapi import APIRouter, File, Form, UploadFile, status

from src.api.deps import CheckoutServiceDep, OrderRepositoryDep, UploadServiceDep
from src.api.middleware.error_handler import NotFoundError
from src.schemas.upload import SignedUploadRequest, SignedUploadResponse, UploadResponse

router = APIRouter(prefix="/uploads", tags=["uploads"])


@router.post(
    "/signed-url",
    response_model=SignedUploadResponse,
    summary="Create a direct upload URL",
    description="Returns a signed storage URL for one photo. Accepts an order id or checkout session id.",
)
async def create_signed_upload_url(
    data: SignedUploadRequest,
    checkout: CheckoutServiceDep,
    uploads: UploadServiceDep,
) -> SignedUploadResponse:
    """Issue a signed upload URL for a photo.

    Customers arrive from checkout holding only the session id, so the
    order is resolved (and reconciled with Stripe if needed) first.

    Raises:
        NotFoundError: 404 if no order matches.
        PaymentRequiredError: 402 if the checkout session is unpaid.
        ValidationError: 422 if the content type is not accepted.
    """
    order = await checkout.resolve_order(data.order_ref)
    result = uploads.create_signed_upload(order, data.file_name, data.content_type)
    return SignedUploadResponse(**result)


@router.post(
    "",
    response_model=UploadResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a photo",
    description="Stores one JPEG, PNG or WebP photo (max 10MB) for an order.",
)
async def upload_photo(
    uploads: UploadServiceDep,
    orders: OrderRepositoryDep,
    file: UploadFile = File(..., description="Photo to upload"),
    order_id: UUID = Form(..., description="Order the photo belongs to"),
) -> UploadResponse:
    """Store a photo proxied through the API.

    Raises:
        NotFoundError: 404 if the order does not exist.
        ValidationError: 422 if the file type or size is not accepted.
    """
    order = orders.get(order_id)
    if not order:
        raise NotFoundError("Order not found")

    content = await file.read()
    result = uploads.upload_file(order, file.filename or "photo.jpg", content, file.content_type)
    return UploadResponse(**result)
