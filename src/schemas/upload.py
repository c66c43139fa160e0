"""Upload Pydantic schemas."""

from uuid import UUID

from pydantic import BaseModel, Field


class SignedUploadRequest(BaseModel):
    """Request a direct-to-storage upload URL for one photo."""

    order_ref: str = Field(min_length=1, description="Order id or Stripe checkout session id")
    file_name: str = Field(min_length=1, max_length=255, description="Original file name")
    content_type: str | None = Field(default=None, description="MIME type of the photo")


class SignedUploadResponse(BaseModel):
    """Signed URL plus where the photo will live."""

    signed_url: str = Field(description="URL to PUT the photo to")
    token: str = Field(description="Upload token for the storage client")
    path: str = Field(description="Storage path of the photo")
    public_url: str = Field(description="Public URL once uploaded")
    order_id: UUID = Field(description="Resolved order identifier")


class UploadResponse(BaseModel):
    """A photo stored through the API."""

    url: str = Field(description="Public URL of the photo")
    path: str = Field(description="Storage path of the photo")
