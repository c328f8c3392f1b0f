"""HTTP transport, cancellation tokens and live byte streams."""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import AsyncIterator, Awaitable, Callable, Dict, Optional, TypeVar

import httpx

from .errors import LunosError

logger = logging.getLogger("lunos_sdk.transport")

T = TypeVar("T")


class CancellationToken:
    """Caller-owned abort handle that can be shared across several calls."""

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.reason: Optional[str] = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: Optional[str] = None) -> None:
        if self._event.is_set():
            return
        self.reason = reason
        self._event.set()

    async def wait(self) -> None:
        await self._event.wait()

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise LunosError.cancellation(self.reason)


async def race_cancellation(awaitable: Awaitable[T], token: Optional[CancellationToken]) -> T:
    """Await ``awaitable`` unless ``token`` fires first.

    Losing the race cancels the pending work and raises a cancelled
    NetworkError. A response produced after the token fired is closed.
    """
    if token is None:
        return await awaitable
    if token.cancelled:
        if inspect.iscoroutine(awaitable):
            awaitable.close()
        raise LunosError.cancellation(token.reason)

    task = asyncio.ensure_future(awaitable)
    waiter = asyncio.ensure_future(token.wait())
    try:
        await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        waiter.cancel()
        if not task.done():
            task.cancel()

    if task.done() and not task.cancelled() and not token.cancelled:
        return task.result()

    for outcome in await asyncio.gather(task, return_exceptions=True):
        if isinstance(outcome, httpx.Response):
            await outcome.aclose()
    raise LunosError.cancellation(token.reason)


async def sleep_or_cancel(
    seconds: float,
    token: Optional[CancellationToken],
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> None:
    await race_cancellation(sleep(seconds), token)


async def _next_chunk(iterator: AsyncIterator[bytes]) -> Optional[bytes]:
    try:
        return await iterator.__anext__()
    except StopAsyncIteration:
        return None


class ByteStream:
    """Live response body of a streaming call.

    Iterate it exactly once; the underlying response is released when the
    iteration ends, fails, or the consumer calls :meth:`aclose`.
    """

    def __init__(self, response: httpx.Response, cancel_token: Optional[CancellationToken] = None) -> None:
        self._response = response
        self._token = cancel_token
        self._consumed = False
        self._closed = False

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def headers(self) -> httpx.Headers:
        return self._response.headers

    @property
    def content_type(self) -> str:
        return self._response.headers.get("content-type", "")

    @property
    def closed(self) -> bool:
        return self._closed

    async def __aiter__(self) -> AsyncIterator[bytes]:
        if self._consumed:
            raise RuntimeError("Stream has already been consumed")
        self._consumed = True
        iterator = self._response.aiter_bytes()
        try:
            while True:
                try:
                    chunk = await race_cancellation(_next_chunk(iterator), self._token)
                except httpx.HTTPError as exc:
                    raise LunosError.network(f"Stream read failed: {exc}") from exc
                if chunk is None:
                    break
                if chunk:
                    yield chunk
        finally:
            await self.aclose()

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._response.aclose()

    async def __aenter__(self) -> "ByteStream":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


class HttpTransport:
    """Issues single HTTP requests; never retries."""

    def __init__(self, base_url: str, *, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self._client = httpx.AsyncClient(base_url=base_url, transport=transport)

    async def send(
        self,
        method: str,
        path: str,
        *,
        headers: Dict[str, str],
        content: Optional[bytes] = None,
        timeout: Optional[float] = None,
        cancel_token: Optional[CancellationToken] = None,
        stream: bool = False,
    ) -> httpx.Response:
        request = self._client.build_request(method, path, headers=headers, content=content, timeout=timeout)
        logger.debug("%s %s stream=%s timeout=%s", method, request.url, stream, timeout)
        try:
            return await race_cancellation(self._client.send(request, stream=stream), cancel_token)
        except httpx.TimeoutException as exc:
            raise LunosError.network(f"Request timed out after {timeout}s") from exc
        except httpx.HTTPError as exc:
            raise LunosError.network(f"Network error: {exc}") from exc

    async def aclose(self) -> None:
        await self._client.aclose()


__all__ = ["ByteStream", "CancellationToken", "HttpTransport", "race_cancellation", "sleep_or_cancel"]
