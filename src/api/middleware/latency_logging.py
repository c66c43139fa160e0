"""Request latency logging middleware."""

import logging
import re
import time
from typing import Callable

from fastapi import Request, Response

logger = logging.getLogger(__name__)

# Thresholds for log levels (in milliseconds)
SLOW_REQUEST_THRESHOLD_MS = 1000
# Generation and upscaling wait on providers; only flag them when extreme
SLOW_PROVIDER_REQUEST_THRESHOLD_MS = 60000

HEALTH_PATHS = ("/health", "/health/ready")
PROVIDER_BOUND_PATH = re.compile(r"/orders/[^/]+/(generate-instant|regenerate-premium|upscale|train)$")
UUID_PATTERN = re.compile(r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}", re.IGNORECASE)


def normalize_path(path: str) -> str:
    """Replace ids in a path so log lines group by route."""
    path = UUID_PATTERN.sub("{id}", path)
    return re.sub(r"cs_(test|live)_[A-Za-z0-9]+", "{session}", path)


async def latency_logging_middleware(request: Request, call_next: Callable) -> Response:
    """Log every request with its latency and status.

    Health checks are logged at debug level. Requests that wait on
    image providers get a higher slow threshold than plain API calls.

    Args:
        request: The incoming request.
        call_next: The next middleware/handler in the chain.

    Returns:
        Response: The response from the handler.
    """
    start_time = time.perf_counter()
    method = request.method
    path = request.url.path

    response = None
    try:
        response = await call_next(request)
        return response
    finally:
        latency_ms = (time.perf_counter() - start_time) * 1000
        status_code = response.status_code if response else 500
        log_msg = "%s %s - %d - %.2fms"
        args = (method, normalize_path(path), status_code, latency_ms)

        threshold = (
            SLOW_PROVIDER_REQUEST_THRESHOLD_MS
            if PROVIDER_BOUND_PATH.search(path)
            else SLOW_REQUEST_THRESHOLD_MS
        )

        if path in HEALTH_PATHS:
            logger.debug(log_msg, *args)
        elif status_code >= 500:
            logger.error(log_msg, *args)
        elif latency_ms > threshold:
            logger.warning("SLOW REQUEST: " + log_msg, *args)
        elif status_code >= 400:
            logger.warning(log_msg, *args)
        else:
            logger.info(log_msg, *args)
