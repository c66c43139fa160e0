"""Supabase-backed training job repository."""

from dataclasses import dataclass
from typing import Any
from uuid import UUID

from supabase import Client

from src.models.training_job import TrainingJobStatus, TrainingJobUpdate


@dataclass
class TrainingJobRepository:
    """Persistence for ``training_jobs`` rows."""

    client: Client

    def create(self, order_id: UUID | str, status: TrainingJobStatus = "pending") -> dict[str, Any]:
        """Create a training job row for an order."""
        response = (
            self.client.table("training_jobs")
            .insert({"order_id": str(order_id), "status": status})
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create training job")
        return response.data[0]

    def get(self, job_id: UUID | str) -> dict[str, Any] | None:
        """Return a training job by id."""
        response = (
            self.client.table("training_jobs")
            .select("*")
            .eq("id", str(job_id))
            .limit(1)
            .execute()
        )
        return response.data[0] if response.data else None

    def get_by_tune_id(self, tune_id: str) -> dict[str, Any] | None:
        """Return the training job for an external Astria tune id."""
        response = (
            self.client.table("training_jobs")
            .select("*")
            .eq("astria_tune_id", tune_id)
            .limit(1)
            .execute()
        )
        return response.data[0] if response.data else None

    def get_for_order(self, order_id: UUID | str) -> dict[str, Any] | None:
        """Return the order's training job, if training was ever started."""
        response = (
            self.client.table("training_jobs")
            .select("*")
            .eq("order_id", str(order_id))
            .order("created_at", desc=True)
            .limit(1)
            .execute()
        )
        return response.data[0] if response.data else None

    def update(self, job_id: UUID | str, data: TrainingJobUpdate) -> dict[str, Any] | None:
        """Apply a partial update to a training job."""
        response = (
            self.client.table("training_jobs")
            .update(dict(data))
            .eq("id", str(job_id))
            .execute()
        )
        return response.data[0] if response.data else None
