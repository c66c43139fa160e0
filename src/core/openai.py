"""OpenAI client with timing and retry logic for image edits."""

import logging
import time
from functools import lru_cache
from typing import Any

from openai import APIConnectionError, APITimeoutError, OpenAI, RateLimitError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.core.config import get_settings

logger = logging.getLogger(__name__)

# Only transport-level failures are retried: a request that reached the
# model and failed is billed, so it is surfaced instead.
MAX_RETRIES = 3
MIN_WAIT_SECONDS = 1
MAX_WAIT_SECONDS = 10

# Latency thresholds for logging (milliseconds)
SLOW_CALL_THRESHOLD_MS = 30000
VERY_SLOW_CALL_THRESHOLD_MS = 60000


class TimedOpenAIClient:
    """OpenAI client wrapper with timing and retry logic."""

    def __init__(self, client: OpenAI):
        self._client = client

    @property
    def images(self) -> "TimedImages":
        """Get the timed images interface."""
        return TimedImages(self._client.images)

    # Pass through other attributes to the underlying client
    def __getattr__(self, name: str) -> Any:
        return getattr(self._client, name)


class TimedImages:
    """Image edits with timing and retry logic."""

    def __init__(self, images: Any):
        self._images = images

    @retry(
        retry=retry_if_exception_type((APIConnectionError, APITimeoutError, RateLimitError)),
        stop=stop_after_attempt(MAX_RETRIES),
        wait=wait_exponential(multiplier=1, min=MIN_WAIT_SECONDS, max=MAX_WAIT_SECONDS),
        reraise=True,
    )
    def _edit_with_retry(self, **kwargs: Any) -> Any:
        """Create image edit with retry logic."""
        return self._images.edit(**kwargs)

    def edit(self, **kwargs: Any) -> Any:
        """Edit an image with timing and retry.

        Args:
            **kwargs: Arguments to pass to the OpenAI images API.

        Returns:
            The images response.
        """
        model = kwargs.get("model", "unknown")
        start_time = time.perf_counter()
        error_msg = None

        try:
            return self._edit_with_retry(**kwargs)

        except Exception as e:
            error_msg = f"{type(e).__name__}: {str(e)}"
            raise

        finally:
            latency_ms = (time.perf_counter() - start_time) * 1000
            log_msg = f"OpenAI image edit: model={model}, latency={latency_ms:.2f}ms"
            if error_msg:
                logger.error(log_msg + f", error={error_msg}")
            elif latency_ms > VERY_SLOW_CALL_THRESHOLD_MS:
                logger.warning(f"VERY SLOW OpenAI call: {log_msg}")
            elif latency_ms > SLOW_CALL_THRESHOLD_MS:
                logger.warning(f"SLOW OpenAI call: {log_msg}")
            else:
                logger.info(log_msg)


@lru_cache
def get_openai_client() -> TimedOpenAIClient:
    """Get cached OpenAI client singleton with timing and retry logic.

    Returns:
        TimedOpenAIClient: OpenAI client instance.
    """
    settings = get_settings()
    raw_client = OpenAI(api_key=settings.openai_api_key)
    return TimedOpenAIClient(raw_client)
