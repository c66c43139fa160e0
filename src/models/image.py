"""Generated and upscaled image model type definitions."""

from datetime import datetime
from typing import Literal, TypedDict
from uuid import UUID


ImageQuality = Literal["standard", "premium"]


class GeneratedImage(TypedDict):
    """Generated image table row representation.

    Unique on (order_id, image_url) so a replayed provider callback
    cannot add the same image twice.
    """

    id: UUID
    order_id: UUID
    training_job_id: UUID | None
    image_url: str
    style: str | None
    style_name: str | None
    prompt: str | None
    quality: ImageQuality
    created_at: datetime


class GeneratedImageCreate(TypedDict, total=False):
    """Data required to record a generated image."""

    order_id: str
    training_job_id: str | None
    image_url: str
    style: str | None
    style_name: str | None
    prompt: str | None
    quality: ImageQuality


class UpscaledImage(TypedDict):
    """Upscaled image table row representation.

    A derivative of a generated image; the original row is kept.
    """

    id: UUID
    order_id: UUID
    original_url: str
    upscaled_url: str
    scale_factor: int
    width: int | None
    height: int | None
    created_at: datetime
