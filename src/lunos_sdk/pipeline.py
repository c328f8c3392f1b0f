"""Request pipeline shared by every capability service."""

from __future__ import annotations

import asyncio
import dataclasses
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx

from .config import ClientConfig, RequestOptions
from .errors import ErrorKind, LunosError, classify_response
from .fallback import original_model, should_fallback, substitute_model
from .retry import RetryPolicy, run_with_retry
from .transport import ByteStream, HttpTransport

logger = logging.getLogger("lunos_sdk.pipeline")

DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class RequestDescriptor:
    path: str
    method: str = "POST"
    body: Optional[bytes] = None
    options: RequestOptions = field(default_factory=RequestOptions)

    @classmethod
    def for_json(
        cls,
        path: str,
        payload: Any,
        *,
        method: str = "POST",
        options: Optional[RequestOptions] = None,
    ) -> "RequestDescriptor":
        body = json.dumps(payload, separators=(",", ":")).encode("utf-8")
        return cls(path=path, method=method, body=body, options=options or RequestOptions())


@dataclass(frozen=True)
class RawResponse:
    buffer: bytes
    content_type: str


class RequestPipeline:
    """Adds auth, identity and timeouts to requests and runs them through retry and fallback."""

    def __init__(
        self,
        config: ClientConfig,
        transport: Optional[HttpTransport] = None,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._config = config
        self._transport = transport or HttpTransport(config.base_url, transport=config.transport)
        self._sleep = sleep

    @property
    def config(self) -> ClientConfig:
        return self._config

    def build_headers(self, options: RequestOptions) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._config.api_key}",
        }
        headers.update(self._config.headers)
        headers.update(options.headers)
        app_id = options.app_id or self._config.app_id
        if app_id:
            headers["X-App-ID"] = app_id
        return headers

    async def sleep(self, seconds: float) -> None:
        await self._sleep(seconds)

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy.from_config(self._config)

    def _timeout_seconds(self, options: RequestOptions) -> float:
        timeout_ms = options.timeout_ms or self._config.timeout_ms
        return timeout_ms / 1000

    def _trace(self, message: str, *args: Any) -> None:
        logger.log(logging.INFO if self._config.debug else logging.DEBUG, message, *args)

    async def _send(self, descriptor: RequestDescriptor, *, stream: bool = False) -> httpx.Response:
        """One attempt under a fresh deadline covering the send and any buffered body read."""
        timeout = self._timeout_seconds(descriptor.options)
        try:
            return await asyncio.wait_for(self._attempt(descriptor, timeout, stream), timeout)
        except asyncio.TimeoutError as exc:
            raise LunosError.network(f"Request timed out after {timeout}s") from exc

    async def _attempt(self, descriptor: RequestDescriptor, timeout: float, stream: bool) -> httpx.Response:
        options = descriptor.options
        response = await self._transport.send(
            descriptor.method,
            descriptor.path,
            headers=self.build_headers(options),
            content=descriptor.body,
            timeout=timeout,
            cancel_token=options.cancel_token,
            stream=stream,
        )
        if response.is_success:
            return response
        try:
            await response.aread()
        except httpx.HTTPError as exc:
            raise LunosError.network(f"Failed to read error response: {exc}") from exc
        finally:
            await response.aclose()
        raise classify_response(response)

    @staticmethod
    def _read_json(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise LunosError(
                ErrorKind.GENERIC,
                "Response body is not valid JSON",
                status=response.status_code,
            ) from exc

    def _fallback_model(self, descriptor: RequestDescriptor) -> Optional[str]:
        return descriptor.options.fallback_model or self._config.fallback_model

    def _fallback_descriptor(self, descriptor: RequestDescriptor, model: str) -> Optional[RequestDescriptor]:
        body = substitute_model(descriptor.body, model)
        if body is None:
            logger.warning("Cannot apply fallback model %s: request body has no JSON object", model)
            return None
        return dataclasses.replace(descriptor, body=body)

    async def request_json(self, descriptor: RequestDescriptor) -> Any:
        """Buffered JSON call with retry and model fallback."""
        policy = self.retry_policy()

        async def attempt(current: RequestDescriptor = descriptor) -> Any:
            return self._read_json(await self._send(current))

        def on_retry(retry: int, delay_ms: int, error: LunosError) -> None:
            self._trace(
                "Request to %s failed (%s), retrying in %sms (attempt %s/%s)",
                descriptor.path,
                error.message,
                delay_ms,
                retry + 1,
                policy.max_attempts,
            )

        try:
            return await run_with_retry(
                attempt,
                policy,
                cancel_token=descriptor.options.cancel_token,
                on_retry=on_retry,
                sleep=self._sleep,
            )
        except LunosError as exc:
            model = self._fallback_model(descriptor)
            if not should_fallback(exc, model):
                raise
            fallback = self._fallback_descriptor(descriptor, model)
            if fallback is None:
                raise
            self._trace("Trying with fallback model: %s", model)
            try:
                result = await attempt(fallback)
            except LunosError as fallback_exc:
                self._trace("Fallback model %s also failed: %s", model, fallback_exc.message)
                raise fallback_exc from exc
            self._trace(
                "Successfully used fallback model: %s (original: %s)",
                model,
                original_model(descriptor.body),
            )
            return result

    async def request_raw(self, descriptor: RequestDescriptor) -> RawResponse:
        """Single attempt returning the raw body and its media type."""
        response = await self._send(descriptor)
        content_type = response.headers.get("content-type") or DEFAULT_CONTENT_TYPE
        return RawResponse(buffer=response.content, content_type=content_type)

    async def _open_stream(self, descriptor: RequestDescriptor) -> ByteStream:
        response = await self._send(descriptor, stream=True)
        if response.headers.get("content-length") == "0":
            await response.aclose()
            raise LunosError(ErrorKind.GENERIC, "No response body for streaming request")
        return ByteStream(response, descriptor.options.cancel_token)

    async def request_stream(self, descriptor: RequestDescriptor) -> ByteStream:
        """Single attempt returning the live body; one fallback attempt on model errors."""
        try:
            return await self._open_stream(descriptor)
        except LunosError as exc:
            model = self._fallback_model(descriptor)
            if not should_fallback(exc, model):
                raise
            fallback = self._fallback_descriptor(descriptor, model)
            if fallback is None:
                raise
            self._trace("Trying with fallback model for streaming: %s", model)
            try:
                stream = await self._open_stream(fallback)
            except LunosError as fallback_exc:
                self._trace("Fallback model %s also failed for streaming: %s", model, fallback_exc.message)
                raise fallback_exc from exc
            self._trace(
                "Successfully used fallback model for streaming: %s (original: %s)",
                model,
                original_model(descriptor.body),
            )
            return stream

    async def aclose(self) -> None:
        await self._transport.aclose()


__all__ = ["RawResponse", "RequestDescriptor", "RequestPipeline", "DEFAULT_CONTENT_TYPE"]
