"""Webhook payload schemas."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class AstriaWebhookPayload(BaseModel):
    """Callback body Astria posts for tunes and prompts."""

    model_config = ConfigDict(extra="ignore")

    id: int | str = Field(description="Tune or prompt id")
    type: Literal["tune", "prompt"] = Field(description="Which kind of job this callback reports")
    status: str = Field(description="Job status, e.g. completed or failed")
    title: str | None = Field(default=None, description="Tune title")
    text: str | None = Field(default=None, description="Prompt text")
    tune_id: int | str | None = Field(default=None, description="Owning tune for prompt callbacks")
    images: list[str] | None = Field(default=None, description="Rendered image URLs")
    error: str | None = Field(default=None, description="Error message on failure")
