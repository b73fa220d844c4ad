"""HTTP session factory with connection pooling and guarded retries.

Pattern: requests.Session with an HTTPAdapter pool; GET is wrapped with a
tenacity retry policy, POST is never retried so a booking cannot be
submitted twice by the transport.

Retries default to zero: every failure is terminal for the attempt and
the user decides whether to try again.
"""
import logging
from typing import Callable, Optional

import requests
from requests.adapters import HTTPAdapter
from requests.auth import AuthBase
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)
from urllib3.util.retry import Retry

from patient_portal import config

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], Optional[str]]


class BearerTokenAuth(AuthBase):
    """Attach the session token supplied by the host application."""

    def __init__(self, token_provider: TokenProvider):
        self.token_provider = token_provider

    def __call__(self, request):
        token = self.token_provider()
        if token:
            request.headers["Authorization"] = f"Bearer {token}"
        return request


def _is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, (requests.exceptions.ConnectionError, requests.exceptions.Timeout)):
        return True
    if isinstance(exc, requests.exceptions.HTTPError):
        response = exc.response
        return response is not None and response.status_code >= 500
    return False


def create_http_session(
    max_retries: int = config.HTTP_MAX_RETRIES,
    timeout: float = config.HTTP_TIMEOUT_SECONDS,
    token_provider: Optional[TokenProvider] = None
) -> requests.Session:
    """
    Create HTTP session with connection pooling.

    Args:
        max_retries: Extra attempts for idempotent GETs (default: 0)
                     Retry delays grow exponentially: 1s, 2s, 4s...
        timeout: Request timeout in seconds (default: 15)
        token_provider: Returns the current session token, or None

    Returns:
        Configured requests.Session whose get/post raise HTTPError on
        4xx/5xx responses
    """
    session = requests.Session()

    # Status retries are handled by tenacity below; urllib3 only pools
    adapter = HTTPAdapter(
        max_retries=Retry(total=0, raise_on_status=False),
        pool_connections=10,
        pool_maxsize=10,
    )
    session.mount("http://", adapter)
    session.mount("https://", adapter)

    if token_provider is not None:
        session.auth = BearerTokenAuth(token_provider)

    original_get = session.get
    original_post = session.post

    @retry(
        stop=stop_after_attempt(max_retries + 1),
        wait=wait_exponential(multiplier=1, min=1, max=8),
        retry=retry_if_exception(_is_retryable),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True
    )
    def get_with_retry(*args, **kwargs):
        kwargs.setdefault("timeout", timeout)
        response = original_get(*args, **kwargs)
        response.raise_for_status()
        return response

    def post_once(*args, **kwargs):
        kwargs.setdefault("timeout", timeout)
        response = original_post(*args, **kwargs)
        response.raise_for_status()
        return response

    session.get = get_with_retry
    session.post = post_once

    return session
