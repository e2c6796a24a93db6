"""
HTTP helpers shared by the Routes API and London GIS clients.
"""

from typing import Any
import logging
import time
import requests

from .constants import MAX_RETRIES, RETRY_BASE_DELAY

logger = logging.getLogger(__name__)


def is_retryable_error(e: requests.exceptions.HTTPError) -> bool:
    """Check if an HTTP error is retryable (rate limited or server error)."""
    if e.response is not None:
        return e.response.status_code == 429 or e.response.status_code >= 500
    error_msg = str(e).lower()
    return any(code in error_msg for code in ["429", "500", "502", "503", "504"])


def request_with_retries(
    method: str,
    url: str,
    max_retries: int = MAX_RETRIES,
    base_delay: float = RETRY_BASE_DELAY,
    **kwargs: Any,
) -> requests.Response:
    """
    Send an HTTP request, retrying 429 and 5xx responses with exponential backoff.

    Args:
        method: HTTP method ("GET", "POST", ...)
        url: Request URL
        max_retries: Retries after the first attempt
        base_delay: Delay before the first retry in seconds, doubled each time
        **kwargs: Passed through to requests.request (timeout, json, params, ...)

    Returns:
        The successful response

    Raises:
        requests.exceptions.RequestException: On network errors, non-retryable
            HTTP errors, or when retries are exhausted
    """
    attempt = 0
    while True:
        try:
            response = requests.request(method, url, **kwargs)
            response.raise_for_status()
            return response

        except requests.exceptions.HTTPError as e:
            status_code = e.response.status_code if e.response is not None else None
            if is_retryable_error(e) and attempt < max_retries:
                delay = base_delay * (2**attempt)
                error_type = (
                    "Server error"
                    if status_code and status_code >= 500
                    else "Rate limited"
                )
                logger.warning(
                    f"{error_type} ({status_code or 'unknown'}) from {url}, retrying in {delay:.0f}s (attempt {attempt + 1} of {max_retries + 1})"
                )
                time.sleep(delay)
                attempt += 1
                continue

            logger.debug(
                f"Not retrying: status={status_code}, attempt={attempt}, max_retries={max_retries}"
            )
            raise
