"""Bounded retry with exponential backoff."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING, Awaitable, Callable, FrozenSet, Optional, TypeVar

from .errors import ErrorKind, LunosError
from .transport import CancellationToken, sleep_or_cancel

if TYPE_CHECKING:
    from .config import ClientConfig

T = TypeVar("T")

DEFAULT_RETRYABLE_STATUS_CODES: FrozenSet[int] = frozenset({408, 429, 500, 502, 503, 504})
NON_RETRYABLE_KINDS: FrozenSet[ErrorKind] = frozenset({ErrorKind.AUTHENTICATION, ErrorKind.VALIDATION})

RetryHook = Callable[[int, int, LunosError], None]


@dataclass(frozen=True)
class RetryPolicy:
    max_retries: int = 3
    base_delay_ms: int = 1000
    max_delay_ms: int = 10000
    exponential: bool = True
    retryable_status_codes: FrozenSet[int] = DEFAULT_RETRYABLE_STATUS_CODES

    @classmethod
    def from_config(cls, config: "ClientConfig") -> "RetryPolicy":
        return cls(max_retries=config.max_retries, base_delay_ms=config.retry_delay_ms)

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def delay_ms(self, attempt: int) -> int:
        """Delay before retry number ``attempt`` (0 for the first retry)."""
        if not self.exponential:
            return min(self.base_delay_ms, self.max_delay_ms)
        return min(self.base_delay_ms * (2**attempt), self.max_delay_ms)

    def is_retryable(self, error: LunosError) -> bool:
        if error.kind in NON_RETRYABLE_KINDS:
            return False
        if error.kind is ErrorKind.NETWORK:
            return not error.cancelled
        return error.status in self.retryable_status_codes


async def run_with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    *,
    cancel_token: Optional[CancellationToken] = None,
    on_retry: Optional[RetryHook] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Run ``operation`` until it succeeds or the retry budget is spent.

    Errors that the policy does not consider retryable propagate on first
    occurrence; otherwise the last error propagates once ``max_retries + 1``
    attempts have failed. ``on_retry`` receives the retry index, the delay in
    milliseconds and the error that triggered it.
    """
    attempt = 0
    while True:
        try:
            return await operation()
        except LunosError as exc:
            if not policy.is_retryable(exc) or attempt >= policy.max_retries:
                raise
            delay = policy.delay_ms(attempt)
            if on_retry is not None:
                on_retry(attempt, delay, exc)
            await sleep_or_cancel(delay / 1000, cancel_token, sleep)
            attempt += 1


__all__ = ["RetryPolicy", "run_with_retry", "DEFAULT_RETRYABLE_STATUS_CODES"]
