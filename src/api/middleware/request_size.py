"""Request body size limiting middleware."""

import logging
from typing import Callable

from fastapi import Request, Response, status

from src.api.middleware.error_handler import create_error_response
from src.core.config import get_settings

logger = logging.getLogger(__name__)

# Proxied photo uploads are the only large bodies we accept
UPLOAD_PATH = "/api/v1/uploads"
MAX_JSON_BODY_BYTES = 1024 * 1024


def body_limit_for(path: str, upload_limit: int) -> int:
    """Maximum body size accepted for a request path."""
    if path == UPLOAD_PATH:
        return upload_limit
    return MAX_JSON_BODY_BYTES


async def request_size_limit_middleware(
    request: Request,
    call_next: Callable[[Request], Response],
) -> Response:
    """Middleware to enforce request body size limits.

    Multipart uploads may carry a photo up to the configured maximum;
    every other endpoint takes small JSON bodies.

    Args:
        request: The incoming request.
        call_next: Next middleware or route handler.

    Returns:
        Response: Either the successful response or 413 error.
    """
    max_size = body_limit_for(request.url.path, get_settings().max_request_body_size)

    content_length = request.headers.get("content-length")
    if content_length and content_length.isdigit() and int(content_length) > max_size:
        logger.warning(
            "Request body too large for %s: %s bytes (max: %d)",
            request.url.path,
            content_length,
            max_size,
        )
        return create_error_response(
            error_type="request_too_large",
            message=f"Request body exceeds maximum size of {max_size} bytes",
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            request_id=request.headers.get("X-Request-ID"),
        )

    return await call_next(request)
