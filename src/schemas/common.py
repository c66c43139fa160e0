"""Schemas shared by the health endpoints and the error handler."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class HealthStatus(str, Enum):
    """Health check status values."""

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


class HealthResponse(BaseModel):
    """Liveness check response."""

    status: HealthStatus = Field(description="Current health status")
    service: str = Field(default="iheadshot-backend", description="Service name")
    version: str = Field(default="0.1.0", description="API version")
    timestamp: datetime = Field(default_factory=_utcnow, description="Check timestamp")


class CheckResult(BaseModel):
    """Outcome of checking one dependency."""

    name: str = Field(description="Dependency name")
    healthy: bool = Field(description="Whether the dependency answered")
    latency_ms: float | None = Field(default=None, description="Check round trip in milliseconds")
    error: str | None = Field(default=None, description="Failure reason when unhealthy")


class ReadinessResponse(BaseModel):
    """Readiness check response.

    The service is ready only when every check is healthy.
    """

    status: HealthStatus = Field(description="Overall readiness status")
    checks: list[CheckResult] = Field(default_factory=list, description="Individual check results")
    timestamp: datetime = Field(default_factory=_utcnow, description="Check timestamp")


class ErrorDetail(BaseModel):
    """One field-level or item-level problem behind an error."""

    loc: list[str] | None = Field(default=None, description="Where the problem is, e.g. a field path")
    msg: str = Field(description="Human-readable message")
    type: str = Field(description="Machine-readable problem type")


class ErrorResponse(BaseModel):
    """Body of every error the API returns."""

    error: str = Field(description="Error category, e.g. not_found or upstream_error")
    message: str = Field(description="Human-readable error description")
    provider: str | None = Field(default=None, description="External provider that failed, for upstream errors")
    details: list[ErrorDetail] | None = Field(default=None, description="Additional error details")
    request_id: str | None = Field(default=None, description="Request ID for tracing")
    timestamp: datetime = Field(default_factory=_utcnow, description="Error timestamp")

    @classmethod
    def from_exception(
        cls,
        error_type: str,
        message: str,
        details: list[dict[str, Any]] | None = None,
        request_id: str | None = None,
        provider: str | None = None,
    ) -> "ErrorResponse":
        """Build an error body from an exception's parts.

        Args:
            error_type: Error category.
            message: Human-readable description.
            details: Detail dictionaries with ``loc``, ``msg`` and ``type``.
            request_id: Request ID for tracing.
            provider: Failing provider, if any.

        Returns:
            ErrorResponse: Formatted error body.
        """
        error_details = None
        if details:
            error_details = [
                ErrorDetail(
                    loc=d.get("loc"),
                    msg=d.get("msg", str(d)),
                    type=d.get("type", "error"),
                )
                for d in details
            ]

        return cls(
            error=error_type,
            message=message,
            provider=provider,
            details=error_details,
            request_id=request_id,
        )
