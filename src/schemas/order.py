"""Order status and training Pydantic schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from src.models.order import OrderStatus, OrderTier
from src.models.training_job import TrainingJobStatus


class GeneratedImageResponse(BaseModel):
    """A generated headshot in an order's gallery."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID | None = Field(default=None, description="Image identifier")
    image_url: str = Field(description="Public image URL")
    style: str | None = Field(default=None, description="Style identifier")
    style_name: str | None = Field(default=None, description="Style display name")
    quality: str | None = Field(default=None, description="Quality tier")
    created_at: datetime | None = Field(default=None, description="Creation timestamp")


class OrderStatusResponse(BaseModel):
    """Polled status of an order's fulfillment."""

    model_config = ConfigDict(from_attributes=True)

    order_id: UUID = Field(description="Order identifier")
    status: OrderStatus = Field(description="Lifecycle status")
    progress: int = Field(ge=0, le=100, description="Progress percentage")
    message: str = Field(description="Human-readable status message")
    estimated_time: str | None = Field(default=None, description="Rough time remaining")
    tier: OrderTier = Field(description="Purchased tier")
    headshot_count: int = Field(description="Target number of headshots")
    image_count: int = Field(description="Headshots generated so far")
    training_status: TrainingJobStatus | None = Field(default=None, description="Training job status, if any")
    images: list[GeneratedImageResponse] | None = Field(
        default=None,
        description="Generated images, present once the order is completed",
    )


class TrainingStartResponse(BaseModel):
    """Response after training has been submitted."""

    training_job_id: UUID = Field(description="Training job identifier")
    tune_id: str = Field(description="Astria tune identifier")
    status: TrainingJobStatus = Field(description="Training job status")
