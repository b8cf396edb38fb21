"""Tests for API retry logic."""

import asyncio
import time

import pytest

from src.api.base import HttpMethod, OperationCancelledError
from src.api.retry import RetryingClient, RetryPolicy, _is_retryable
from src.config import ClientSettings
from src.models import Post
from src.result import ErrorType, Result


class FakeClient:
    """Fake API client that returns queued results."""

    def __init__(self, responses: list):
        self.responses = list(responses)
        self.call_count = 0

    async def _next(self):
        self.call_count += 1
        return self.responses.pop(0)

    async def get(self, endpoint, response_type, *, cancel=None):
        return await self._next()

    async def get_list(self, endpoint, item_type, *, cancel=None):
        return await self._next()

    async def post(self, endpoint, data, response_type=None, *, cancel=None):
        return await self._next()

    async def put(self, endpoint, data, response_type=None, *, cancel=None):
        return await self._next()

    async def delete(self, endpoint, *, cancel=None):
        return await self._next()


POST = Post(id=1, user_id=1, title="hello", body="world")
OK = Result.success(POST)
TIMED_OUT = Result.failure("Request timed out.", ErrorType.TIMEOUT)
RATE_LIMITED = Result.failure("Rate limit exceeded. Please try again later.")


def make_settings(max_retries: int = 2, retry_delay_ms: int = 10) -> ClientSettings:
    return ClientSettings(
        base_url="https://api.test",
        max_retries=max_retries,
        retry_delay_ms=retry_delay_ms,
    )


@pytest.fixture
def recorded_delays(monkeypatch) -> list[float]:
    """Replace the backoff wait with one that only records the delay."""
    delays: list[float] = []

    async def fake_wait(delay, cancel):
        delays.append(delay)

    monkeypatch.setattr(RetryingClient, "_wait", staticmethod(fake_wait))
    return delays


class TestIsRetryable:
    def test_timeout_is_retryable(self):
        assert _is_retryable("Connection timeout") is True

    def test_timed_out_is_retryable(self):
        assert _is_retryable("Request timed out.") is True

    def test_rate_limit_is_retryable(self):
        assert _is_retryable("Rate limit exceeded. Please try again later.") is True

    def test_429_is_retryable(self):
        assert _is_retryable("API error: 429 - Too Many Requests") is True

    def test_503_is_retryable(self):
        assert _is_retryable("API error: 503 - Service Unavailable") is True

    def test_502_is_retryable(self):
        assert _is_retryable("API error: 502 - Bad Gateway") is True

    def test_match_is_case_insensitive(self):
        assert _is_retryable("REQUEST TIMED OUT") is True

    def test_500_not_retryable(self):
        assert _is_retryable("API error: 500 - Internal Server Error") is False

    def test_not_found_not_retryable(self):
        assert _is_retryable("Resource not found: posts/999") is False

    def test_validation_not_retryable(self):
        assert _is_retryable("Validation error") is False

    def test_cancelled_not_retryable(self):
        assert _is_retryable("Request was cancelled.") is False

    def test_missing_message_not_retryable(self):
        assert _is_retryable(None) is False


class TestRetryPolicy:
    def test_default_retries_idempotent_methods_only(self):
        policy = RetryPolicy()

        assert policy.allows(HttpMethod.GET)
        assert policy.allows(HttpMethod.PUT)
        assert policy.allows(HttpMethod.DELETE)
        assert not policy.allows(HttpMethod.POST)

    def test_timeout_classification_is_retryable_without_marker(self):
        result = Result.failure("upstream stalled", ErrorType.TIMEOUT)

        assert RetryPolicy().is_retryable(result) is True

    def test_success_is_never_retryable(self):
        assert RetryPolicy().is_retryable(OK) is False

    def test_custom_error_types(self):
        policy = RetryPolicy(retryable_error_types=frozenset({ErrorType.NETWORK}))

        assert policy.is_retryable(Result.failure("connection reset", ErrorType.NETWORK))
        assert not policy.is_retryable(Result.failure("upstream stalled", ErrorType.TIMEOUT))


class TestRetryingClient:
    @pytest.mark.asyncio
    async def test_success_no_retry(self):
        inner = FakeClient([OK])
        client = RetryingClient(inner, make_settings())

        result = await client.get("posts/1", Post)

        assert result == OK
        assert inner.call_count == 1

    @pytest.mark.asyncio
    async def test_retries_on_retryable_error_then_succeeds(self, recorded_delays):
        inner = FakeClient([TIMED_OUT, OK])
        client = RetryingClient(inner, make_settings())

        result = await client.get("posts/1", Post)

        assert result.is_success
        assert result.value == POST
        assert inner.call_count == 2

    @pytest.mark.asyncio
    async def test_rate_limit_exhausts_all_attempts(self, recorded_delays):
        inner = FakeClient([RATE_LIMITED] * 3)
        client = RetryingClient(inner, make_settings(max_retries=2, retry_delay_ms=100))

        result = await client.get("posts/1", Post)

        assert inner.call_count == 3
        assert recorded_delays == [0.1, 0.2]
        assert result is RATE_LIMITED

    @pytest.mark.asyncio
    async def test_returns_last_failure_unmodified(self, recorded_delays):
        last = Result.failure("API error: 503 - Service Unavailable")
        inner = FakeClient([TIMED_OUT, RATE_LIMITED, last])
        client = RetryingClient(inner, make_settings())

        result = await client.get_list("posts", Post)

        assert result is last

    @pytest.mark.asyncio
    async def test_non_retryable_error_fails_immediately(self, recorded_delays):
        failure = Result.failure("Validation error", ErrorType.VALIDATION)
        inner = FakeClient([failure])
        client = RetryingClient(inner, make_settings(max_retries=3))

        result = await client.get("posts/1", Post)

        assert result is failure
        assert inner.call_count == 1
        assert recorded_delays == []

    @pytest.mark.asyncio
    async def test_not_found_is_not_retried(self, recorded_delays):
        failure = Result.failure("Resource not found: posts/999", ErrorType.NOT_FOUND)
        inner = FakeClient([failure])
        client = RetryingClient(inner, make_settings(max_retries=3))

        result = await client.get("posts/999", Post)

        assert result.has_error_type(ErrorType.NOT_FOUND)
        assert inner.call_count == 1

    @pytest.mark.asyncio
    async def test_zero_retries_means_no_retry(self, recorded_delays):
        inner = FakeClient([TIMED_OUT])
        client = RetryingClient(inner, make_settings(max_retries=0))

        result = await client.get("posts/1", Post)

        assert result is TIMED_OUT
        assert inner.call_count == 1

    @pytest.mark.asyncio
    async def test_post_is_never_retried(self, recorded_delays):
        inner = FakeClient([TIMED_OUT, OK])
        client = RetryingClient(inner, make_settings(max_retries=3))

        result = await client.post("posts", POST)

        assert result is TIMED_OUT
        assert inner.call_count == 1

    @pytest.mark.asyncio
    async def test_post_retried_when_policy_allows(self, recorded_delays):
        policy = RetryPolicy(retry_methods=frozenset(HttpMethod))
        inner = FakeClient([TIMED_OUT, OK])
        client = RetryingClient(inner, make_settings(), policy=policy)

        result = await client.post("posts", POST)

        assert result.is_success
        assert inner.call_count == 2

    @pytest.mark.asyncio
    async def test_put_is_retried(self, recorded_delays):
        inner = FakeClient([RATE_LIMITED, OK])
        client = RetryingClient(inner, make_settings())

        result = await client.put("posts/1", POST)

        assert result.is_success
        assert inner.call_count == 2

    @pytest.mark.asyncio
    async def test_delete_is_retried(self, recorded_delays):
        inner = FakeClient([TIMED_OUT, Result.success()])
        client = RetryingClient(inner, make_settings())

        result = await client.delete("posts/1")

        assert result.is_success
        assert result.value is None
        assert inner.call_count == 2

    @pytest.mark.asyncio
    async def test_put_can_be_excluded_by_policy(self, recorded_delays):
        policy = RetryPolicy(retry_methods=frozenset({HttpMethod.GET}))
        inner = FakeClient([TIMED_OUT, OK])
        client = RetryingClient(inner, make_settings(), policy=policy)

        result = await client.put("posts/1", POST)

        assert result is TIMED_OUT
        assert inner.call_count == 1

    @pytest.mark.asyncio
    async def test_backoff_delay_increases(self):
        inner = FakeClient([TIMED_OUT, TIMED_OUT, OK])
        client = RetryingClient(inner, make_settings(max_retries=2, retry_delay_ms=50))

        start = time.monotonic()
        await client.get("posts/1", Post)
        elapsed = time.monotonic() - start

        assert elapsed >= 0.14

    @pytest.mark.asyncio
    async def test_cancel_during_backoff_stops_promptly(self):
        inner = FakeClient([TIMED_OUT, OK])
        client = RetryingClient(inner, make_settings(max_retries=3, retry_delay_ms=5000))
        cancel = asyncio.Event()
        asyncio.get_running_loop().call_later(0.05, cancel.set)

        start = time.monotonic()
        with pytest.raises(OperationCancelledError):
            await client.get("posts/1", Post, cancel=cancel)
        elapsed = time.monotonic() - start

        assert elapsed < 1.0
        assert inner.call_count == 1

    @pytest.mark.asyncio
    async def test_cancelled_result_is_not_retried(self, recorded_delays):
        cancelled = Result.failure("Request was cancelled.")
        inner = FakeClient([cancelled])
        client = RetryingClient(inner, make_settings(max_retries=3))

        result = await client.get("posts/1", Post, cancel=asyncio.Event())

        assert result is cancelled
        assert inner.call_count == 1

    @pytest.mark.asyncio
    async def test_task_cancellation_propagates(self):
        inner = FakeClient([TIMED_OUT, OK])
        client = RetryingClient(inner, make_settings(max_retries=3, retry_delay_ms=5000))

        task = asyncio.create_task(client.get("posts/1", Post))
        await asyncio.sleep(0.05)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert inner.call_count == 1
