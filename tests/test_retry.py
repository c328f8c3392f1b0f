from __future__ import annotations

import pytest

from lunos_sdk.config import ClientConfig
from lunos_sdk.errors import ErrorKind, LunosError
from lunos_sdk.retry import RetryPolicy, run_with_retry

from .conftest import SleepRecorder


def test_backoff_sequence_is_capped() -> None:
    policy = RetryPolicy(max_retries=5, base_delay_ms=1000, max_delay_ms=10000)
    assert [policy.delay_ms(i) for i in range(5)] == [1000, 2000, 4000, 8000, 10000]


def test_linear_backoff_when_not_exponential() -> None:
    policy = RetryPolicy(base_delay_ms=300, exponential=False)
    assert [policy.delay_ms(i) for i in range(3)] == [300, 300, 300]


@pytest.mark.asyncio
async def test_retries_until_budget_spent_and_waits_between_attempts() -> None:
    attempts = {"count": 0}
    sleeper = SleepRecorder()

    async def operation() -> None:
        attempts["count"] += 1
        raise LunosError(ErrorKind.SERVER_ERROR, "boom", status=503)

    policy = RetryPolicy(max_retries=5, base_delay_ms=1000)
    with pytest.raises(LunosError):
        await run_with_retry(operation, policy, sleep=sleeper)

    assert attempts["count"] == 6
    assert sleeper.calls == [1.0, 2.0, 4.0, 8.0, 10.0]


@pytest.mark.asyncio
async def test_succeeds_after_transient_failures() -> None:
    attempts = {"count": 0}
    retries: list = []

    async def operation() -> str:
        attempts["count"] += 1
        if attempts["count"] < 3:
            raise LunosError.network("connection reset")
        return "ok"

    result = await run_with_retry(
        operation,
        RetryPolicy(max_retries=3, base_delay_ms=100),
        sleep=SleepRecorder(),
        on_retry=lambda retry, delay, error: retries.append((retry, delay)),
    )

    assert result == "ok"
    assert retries == [(0, 100), (1, 200)]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        LunosError(ErrorKind.AUTHENTICATION, "bad key", status=401),
        LunosError.validation("bad request shape"),
        LunosError.cancellation(),
    ],
)
async def test_terminal_errors_are_not_retried(error: LunosError) -> None:
    attempts = {"count": 0}
    sleeper = SleepRecorder()

    async def operation() -> None:
        attempts["count"] += 1
        raise error

    with pytest.raises(LunosError) as info:
        await run_with_retry(operation, RetryPolicy(max_retries=10), sleep=sleeper)

    assert info.value is error
    assert attempts["count"] == 1
    assert sleeper.calls == []


def test_status_outside_retryable_set_is_not_retryable() -> None:
    policy = RetryPolicy()
    assert not policy.is_retryable(LunosError(ErrorKind.NOT_FOUND, "missing", status=404))
    assert policy.is_retryable(LunosError(ErrorKind.GENERIC, "timeout", status=408))
    widened = RetryPolicy(retryable_status_codes=frozenset({404}))
    assert widened.is_retryable(LunosError(ErrorKind.NOT_FOUND, "missing", status=404))


def test_policy_from_client_config() -> None:
    config = ClientConfig(api_key="test-api-key-0001", max_retries=4, retry_delay_ms=250)
    policy = RetryPolicy.from_config(config)

    assert policy.max_attempts == 5
    assert policy.delay_ms(0) == 250
    assert policy.max_delay_ms == 10000
