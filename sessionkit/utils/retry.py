from __future__ import annotations

import httpx
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)


def _is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, (httpx.TransportError, httpx.TimeoutException)):
        return True
    return isinstance(exc, httpx.HTTPStatusError) and exc.response.status_code >= 500


def with_retry(max_retries: int = 3, backoff_factor: float = 0.5):
    """Exponential backoff retry decorator for best-effort HTTP deliveries.

    Retries transport failures and 5xx answers; 4xx answers are final.
    """
    return retry(
        retry=retry_if_exception(_is_retryable),
        stop=stop_after_attempt(max(1, max_retries)),
        wait=wait_exponential(multiplier=backoff_factor, min=backoff_factor, max=30),
        reraise=True,
    )
