"""
Typed HTTP client for the JSONPlaceholder REST API.

Every operation performs a single request and returns a Result. Transport,
timeout and deserialization errors are converted to failed results and never
raised to the caller.
"""

import asyncio
from collections.abc import Awaitable, Callable
from functools import lru_cache
from typing import Any, Optional, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError
from pydantic_core import to_json

from src.config import ClientSettings
from src.logging_config import get_logger
from src.result import ErrorType, Result

from .base import HttpMethod, OperationCancelledError, build_url

logger = get_logger("api.client")

T = TypeVar("T")

RATE_LIMIT_MESSAGE = "Rate limit exceeded. Please try again later."
CANCELLED_MESSAGE = "Request was cancelled."
TIMEOUT_MESSAGE = "Request timed out."

# Status codes with a more specific classification than GENERAL
_STATUS_ERROR_TYPES: dict[int, ErrorType] = {
    400: ErrorType.VALIDATION,
    401: ErrorType.UNAUTHORIZED,
    403: ErrorType.UNAUTHORIZED,
    404: ErrorType.NOT_FOUND,
    409: ErrorType.CONFLICT,
    422: ErrorType.VALIDATION,
}


@lru_cache(maxsize=128)
def _adapter(tp: Any) -> TypeAdapter:
    return TypeAdapter(tp)


def _describe_validation_error(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = f"{location}: {first['msg']}" if location else first["msg"]
    extra = exc.error_count() - 1
    return f"{message} (+{extra} more)" if extra else message


def _encode(data: Any) -> bytes:
    """Serialize a request body, using the API's field aliases for models."""
    return to_json(data, by_alias=True)


class TypedApiClient:
    """Performs one HTTP call per operation and maps the outcome to a Result."""

    def __init__(
        self,
        settings: ClientSettings,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.settings = settings
        self._headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "User-Agent": settings.user_agent,
        }
        self._owns_http_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            timeout=settings.timeout_seconds, headers=self._headers
        )

    async def __aenter__(self) -> "TypedApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_http_client:
            await self._http.aclose()

    async def get(
        self,
        endpoint: str,
        response_type: type[T],
        *,
        cancel: asyncio.Event | None = None,
    ) -> Result[T]:
        """GET a single resource and deserialize it as ``response_type``."""

        def handle(response: httpx.Response) -> Result[T]:
            if response.status_code == httpx.codes.OK:
                return self._deserialize(response, response_type)
            return self._status_failure(response, endpoint, "API error", read=True)

        return await self._call(HttpMethod.GET, endpoint, handle, cancel=cancel)

    async def get_list(
        self,
        endpoint: str,
        item_type: type[T],
        *,
        cancel: asyncio.Event | None = None,
    ) -> Result[list[T]]:
        """GET a JSON array. An empty or ``null`` body is an empty list."""

        def handle(response: httpx.Response) -> Result[list[T]]:
            if not response.is_success:
                return self._status_failure(response, endpoint, "API error", read=True)
            if not response.content.strip():
                return Result.success([])
            try:
                items = _adapter(Optional[list[item_type]]).validate_json(response.content)
            except ValidationError as exc:
                return Result.failure(
                    f"Failed to deserialize response: {_describe_validation_error(exc)}",
                    ErrorType.VALIDATION,
                    exc,
                )
            return Result.success(items or [])

        return await self._call(HttpMethod.GET, endpoint, handle, cancel=cancel)

    async def post(
        self,
        endpoint: str,
        data: Any,
        response_type: type[T] | None = None,
        *,
        cancel: asyncio.Event | None = None,
    ) -> Result[T]:
        """POST ``data`` as JSON. The response is parsed as ``response_type``
        (defaults to the type of ``data``)."""
        return await self._write(
            HttpMethod.POST, endpoint, data, response_type, "Failed to create resource", cancel
        )

    async def put(
        self,
        endpoint: str,
        data: Any,
        response_type: type[T] | None = None,
        *,
        cancel: asyncio.Event | None = None,
    ) -> Result[T]:
        """PUT ``data`` as JSON, replacing the resource at ``endpoint``."""
        return await self._write(
            HttpMethod.PUT, endpoint, data, response_type, "Failed to update resource", cancel
        )

    async def delete(
        self,
        endpoint: str,
        *,
        cancel: asyncio.Event | None = None,
    ) -> Result[None]:
        """DELETE the resource at ``endpoint``. Success carries no value."""

        def handle(response: httpx.Response) -> Result[None]:
            if response.is_success:
                return Result.success()
            return self._status_failure(response, endpoint, "Failed to delete resource")

        return await self._call(HttpMethod.DELETE, endpoint, handle, cancel=cancel)

    async def _write(
        self,
        method: HttpMethod,
        endpoint: str,
        data: Any,
        response_type: type[T] | None,
        error_prefix: str,
        cancel: asyncio.Event | None,
    ) -> Result[T]:
        if data is None:
            return Result.failure("Request body is required", ErrorType.VALIDATION)
        target_type = response_type or type(data)

        def handle(response: httpx.Response) -> Result[T]:
            if response.is_success:
                return self._deserialize(response, target_type)
            return self._status_failure(response, endpoint, error_prefix)

        return await self._call(method, endpoint, handle, body=data, cancel=cancel)

    async def _call(
        self,
        method: HttpMethod,
        endpoint: str,
        handle: Callable[[httpx.Response], Result[T]],
        *,
        body: Any = None,
        cancel: asyncio.Event | None = None,
    ) -> Result[T]:
        """Send a request and map the response or the raised error to a Result."""
        if endpoint is None:
            return Result.failure("Endpoint is required", ErrorType.VALIDATION)

        url = build_url(self.settings.base_url, endpoint)
        logger.debug(f"{method.value} {url}")

        try:
            content = _encode(body) if body is not None else None
            # Caller-supplied clients carry none of these defaults
            request = self._http.request(
                method.value,
                url,
                content=content,
                headers=self._headers,
                timeout=self.settings.timeout_seconds,
            )
            response = await self._send(request, cancel)
            result = handle(response)
        except OperationCancelledError:
            result = Result.failure(CANCELLED_MESSAGE)
        except httpx.TimeoutException as exc:
            result = Result.failure(TIMEOUT_MESSAGE, ErrorType.TIMEOUT, exc)
        except httpx.HTTPError as exc:
            result = Result.from_exception(exc, ErrorType.NETWORK)
        except Exception as exc:
            result = Result.from_exception(exc)

        if result.is_failure:
            logger.warning(f"{method.value} {endpoint} failed: {result.error}")
        return result

    @staticmethod
    async def _send(
        request: Awaitable[httpx.Response],
        cancel: asyncio.Event | None,
    ) -> httpx.Response:
        """Await the request, abandoning it if ``cancel`` is set first."""
        if cancel is None:
            return await request
        if cancel.is_set():
            if asyncio.iscoroutine(request):
                request.close()
            raise OperationCancelledError(CANCELLED_MESSAGE)

        send = asyncio.ensure_future(request)
        waiter = asyncio.ensure_future(cancel.wait())
        try:
            await asyncio.wait({send, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (send, waiter):
                if not task.done():
                    task.cancel()

        if send.done() and not send.cancelled():
            return send.result()
        raise OperationCancelledError(CANCELLED_MESSAGE)

    def _deserialize(self, response: httpx.Response, response_type: type[T]) -> Result[T]:
        if not response.content.strip():
            return Result.failure("Response content was null")
        try:
            value = _adapter(Optional[response_type]).validate_json(response.content)
        except ValidationError as exc:
            return Result.failure(
                f"Failed to deserialize response: {_describe_validation_error(exc)}",
                ErrorType.VALIDATION,
                exc,
            )
        if value is None:
            return Result.failure("Response content was null")
        return Result.success(value)

    @staticmethod
    def _status_failure(
        response: httpx.Response, endpoint: str, prefix: str, read: bool = False
    ) -> Result[Any]:
        status = response.status_code
        if status == httpx.codes.TOO_MANY_REQUESTS:
            return Result.failure(RATE_LIMIT_MESSAGE)
        if status == httpx.codes.NOT_FOUND and read:
            return Result.failure(f"Resource not found: {endpoint}", ErrorType.NOT_FOUND)
        error_type = _STATUS_ERROR_TYPES.get(status, ErrorType.GENERAL)
        return Result.failure(f"{prefix}: {status} - {response.reason_phrase}", error_type)
