"""Shared contract for API clients."""

import asyncio
from enum import Enum
from typing import Any, Protocol, TypeVar

from src.result import Result

T = TypeVar("T")


class ApiError(Exception):
    """Base exception for the API layer."""


class OperationCancelledError(ApiError):
    """Raised when a caller cancels an operation while it waits to retry."""


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


# Methods that can be repeated with the same net effect as a single call
IDEMPOTENT_METHODS = frozenset({HttpMethod.GET, HttpMethod.PUT, HttpMethod.DELETE})


class ApiClient(Protocol):
    """Interface implemented by the typed client and its decorators."""

    async def get(
        self,
        endpoint: str,
        response_type: type[T],
        *,
        cancel: asyncio.Event | None = None,
    ) -> Result[T]: ...

    async def get_list(
        self,
        endpoint: str,
        item_type: type[T],
        *,
        cancel: asyncio.Event | None = None,
    ) -> Result[list[T]]: ...

    async def post(
        self,
        endpoint: str,
        data: Any,
        response_type: type[T] | None = None,
        *,
        cancel: asyncio.Event | None = None,
    ) -> Result[T]: ...

    async def put(
        self,
        endpoint: str,
        data: Any,
        response_type: type[T] | None = None,
        *,
        cancel: asyncio.Event | None = None,
    ) -> Result[T]: ...

    async def delete(
        self,
        endpoint: str,
        *,
        cancel: asyncio.Event | None = None,
    ) -> Result[None]: ...


def build_url(base_url: str, endpoint: str) -> str:
    """Join base URL and endpoint with exactly one slash between them."""
    return f"{base_url.rstrip('/')}/{endpoint.lstrip('/')}"
