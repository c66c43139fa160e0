"""Training job model type definitions for database operations."""

from datetime import datetime
from typing import Literal, TypedDict
from uuid import UUID


TrainingJobStatus = Literal["pending", "training", "completed", "failed"]


class TrainingJob(TypedDict):
    """Training job table row representation.

    Zero or one per order. Updated by the generation provider's callbacks,
    never deleted.
    """

    id: UUID
    order_id: UUID
    astria_tune_id: str | None
    status: TrainingJobStatus
    model_url: str | None
    error_message: str | None
    created_at: datetime
    completed_at: datetime | None


class TrainingJobUpdate(TypedDict, total=False):
    """Data that can be updated on a training job."""

    astria_tune_id: str
    status: TrainingJobStatus
    model_url: str | None
    error_message: str | None
    completed_at: str
