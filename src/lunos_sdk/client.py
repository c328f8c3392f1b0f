"""Python client for the Lunos multi-provider AI API."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx

from .config import ClientConfig
from .pipeline import RequestPipeline
from .services import AudioService, ChatService, EmbeddingService, ImageService, ModelService, VideoService


class LunosClient:
    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        **overrides: Any,
    ) -> None:
        if config is None:
            config = ClientConfig(**overrides)
        elif overrides:
            config = config.replace(**overrides)
        self._config = config
        self._sleep = sleep
        self._pipeline = RequestPipeline(config, sleep=sleep)
        self.chat = ChatService(self._pipeline)
        self.image = ImageService(self._pipeline)
        self.audio = AudioService(self._pipeline)
        self.embedding = EmbeddingService(self._pipeline)
        self.models = ModelService(self._pipeline)
        self.video = VideoService(self._pipeline)

    async def __aenter__(self) -> "LunosClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return f"LunosClient(base_url={self._config.base_url!r}, debug={self._config.debug})"

    @property
    def config(self) -> ClientConfig:
        return self._config

    def with_config(self, **overrides: Any) -> "LunosClient":
        """Return a new client built from this configuration plus ``overrides``."""
        return LunosClient(self._config.replace(**overrides), sleep=self._sleep)

    def with_api_key(self, api_key: str) -> "LunosClient":
        return self.with_config(api_key=api_key)

    def with_base_url(self, base_url: str) -> "LunosClient":
        return self.with_config(base_url=base_url)

    def with_debug(self, debug: bool = True) -> "LunosClient":
        return self.with_config(debug=debug)

    def with_timeout(self, timeout_ms: int) -> "LunosClient":
        return self.with_config(timeout_ms=timeout_ms)

    def with_retry_config(self, max_retries: int, retry_delay_ms: int) -> "LunosClient":
        return self.with_config(max_retries=max_retries, retry_delay_ms=retry_delay_ms)

    def with_fallback_model(self, fallback_model: str) -> "LunosClient":
        return self.with_config(fallback_model=fallback_model)

    def with_app_id(self, app_id: str) -> "LunosClient":
        return self.with_config(app_id=app_id)

    def with_headers(self, headers: Dict[str, str]) -> "LunosClient":
        return self.with_config(headers={**self._config.headers, **headers})

    def with_transport(self, transport: httpx.AsyncBaseTransport) -> "LunosClient":
        return self.with_config(transport=transport)

    async def get_usage(self) -> Any:
        return await self.chat.get_usage()

    async def get_account(self) -> Any:
        return await self.chat.get_account()

    async def aclose(self) -> None:
        await self._pipeline.aclose()


__all__ = ["LunosClient"]
