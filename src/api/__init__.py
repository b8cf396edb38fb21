"""API client factory and shared exports."""

import httpx

from src.config import ClientSettings, get_settings

from .base import (
    IDEMPOTENT_METHODS,
    ApiClient,
    ApiError,
    HttpMethod,
    OperationCancelledError,
    build_url,
)
from .client import TypedApiClient
from .retry import RetryingClient, RetryPolicy


def create_client(
    settings: ClientSettings | None = None,
    http_client: httpx.AsyncClient | None = None,
    policy: RetryPolicy | None = None,
) -> RetryingClient:
    """Create a typed client wrapped with the retry policy.

    Close it with ``aclose()`` (or use ``async with``) to release the
    connection pool.
    """
    settings = settings or get_settings()
    typed = TypedApiClient(settings, http_client=http_client)
    return RetryingClient(typed, settings, policy=policy)


__all__ = [
    "ApiClient",
    "ApiError",
    "HttpMethod",
    "IDEMPOTENT_METHODS",
    "OperationCancelledError",
    "RetryPolicy",
    "RetryingClient",
    "TypedApiClient",
    "build_url",
    "create_client",
]
