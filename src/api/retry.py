"""API client wrapper with retry and exponential backoff."""

import asyncio
import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from src.config import ClientSettings
from src.logging_config import get_logger
from src.result import ErrorType, Result

from .base import IDEMPOTENT_METHODS, ApiClient, HttpMethod, OperationCancelledError

logger = get_logger("api.retry")

T = TypeVar("T")

_RETRYABLE_PATTERNS = re.compile(
    r"timeout|timed out|rate limit|429|503|502",
    re.IGNORECASE,
)


def _is_retryable(error: str | None) -> bool:
    """Check if a failure message describes a transient error."""
    return bool(error and _RETRYABLE_PATTERNS.search(error))


@dataclass(frozen=True)
class RetryPolicy:
    """Which operations may be retried, and which failures are transient.

    ``retry_methods`` defaults to the idempotent verbs; POST is sent once.
    """

    retry_methods: frozenset[HttpMethod] = IDEMPOTENT_METHODS
    retryable_error_types: frozenset[ErrorType] = frozenset({ErrorType.TIMEOUT})

    def allows(self, method: HttpMethod) -> bool:
        return method in self.retry_methods

    def is_retryable(self, result: Result[Any]) -> bool:
        if result.is_success:
            return False
        return result.error_type in self.retryable_error_types or _is_retryable(result.error)


class RetryingClient:
    """Wraps an ApiClient with retry logic and exponential backoff."""

    def __init__(
        self,
        inner: ApiClient,
        settings: ClientSettings,
        policy: RetryPolicy | None = None,
    ):
        self.inner = inner
        self.max_retries = settings.max_retries
        self.base_delay = settings.retry_delay
        self.policy = policy or RetryPolicy()

    async def __aenter__(self) -> "RetryingClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        close = getattr(self.inner, "aclose", None)
        if close is not None:
            await close()

    async def get(
        self,
        endpoint: str,
        response_type: type[T],
        *,
        cancel: asyncio.Event | None = None,
    ) -> Result[T]:
        return await self._execute(
            HttpMethod.GET,
            lambda: self.inner.get(endpoint, response_type, cancel=cancel),
            cancel,
        )

    async def get_list(
        self,
        endpoint: str,
        item_type: type[T],
        *,
        cancel: asyncio.Event | None = None,
    ) -> Result[list[T]]:
        return await self._execute(
            HttpMethod.GET,
            lambda: self.inner.get_list(endpoint, item_type, cancel=cancel),
            cancel,
        )

    async def post(
        self,
        endpoint: str,
        data: Any,
        response_type: type[T] | None = None,
        *,
        cancel: asyncio.Event | None = None,
    ) -> Result[T]:
        # Not idempotent: a retry could create the resource twice
        return await self._execute(
            HttpMethod.POST,
            lambda: self.inner.post(endpoint, data, response_type, cancel=cancel),
            cancel,
        )

    async def put(
        self,
        endpoint: str,
        data: Any,
        response_type: type[T] | None = None,
        *,
        cancel: asyncio.Event | None = None,
    ) -> Result[T]:
        return await self._execute(
            HttpMethod.PUT,
            lambda: self.inner.put(endpoint, data, response_type, cancel=cancel),
            cancel,
        )

    async def delete(
        self,
        endpoint: str,
        *,
        cancel: asyncio.Event | None = None,
    ) -> Result[None]:
        return await self._execute(
            HttpMethod.DELETE,
            lambda: self.inner.delete(endpoint, cancel=cancel),
            cancel,
        )

    async def _execute(
        self,
        method: HttpMethod,
        operation: Callable[[], Awaitable[Result[T]]],
        cancel: asyncio.Event | None,
    ) -> Result[T]:
        """Run ``operation``, retrying transient failures with backoff."""
        if not self.policy.allows(method):
            return await operation()

        last_result: Result[T] | None = None
        for attempt in range(self.max_retries + 1):
            if attempt > 0:
                delay = self.base_delay * (2 ** (attempt - 1))
                logger.warning(
                    f"Retry {attempt}/{self.max_retries} after {delay:.2f}s: "
                    f"{last_result.error if last_result else ''}"
                )
                await self._wait(delay, cancel)

            last_result = await operation()
            if last_result.is_success or not self.policy.is_retryable(last_result):
                return last_result

        return last_result or Result.failure("Unknown error after retries")

    @staticmethod
    async def _wait(delay: float, cancel: asyncio.Event | None) -> None:
        """Sleep for ``delay`` seconds; raise if ``cancel`` is set meanwhile."""
        if cancel is None:
            await asyncio.sleep(delay)
            return
        try:
            await asyncio.wait_for(cancel.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return
        raise OperationCancelledError("Operation cancelled while waiting to retry")
