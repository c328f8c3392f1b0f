"""Configuration objects for the Lunos Python SDK."""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import httpx

from .errors import LunosError
from .transport import CancellationToken

DEFAULT_BASE_URL = "https://api.lunos.tech"

TIMEOUT_RANGE_MS = (1000, 300000)
RETRIES_RANGE = (0, 10)
RETRY_DELAY_RANGE_MS = (100, 10000)


def validate_timeout(timeout_ms: Any) -> None:
    low, high = TIMEOUT_RANGE_MS
    if isinstance(timeout_ms, bool) or not isinstance(timeout_ms, (int, float)) or not low <= timeout_ms <= high:
        raise LunosError.validation(f"Timeout must be a number between {low} and {high} milliseconds")


def _validate_base_url(base_url: Any) -> None:
    if not base_url or not isinstance(base_url, str):
        raise LunosError.validation("Base URL is required")
    try:
        url = httpx.URL(base_url)
    except (httpx.InvalidURL, TypeError) as exc:
        raise LunosError.validation("Invalid base URL format") from exc
    if url.scheme not in ("http", "https") or not url.host:
        raise LunosError.validation("Invalid base URL format")


@dataclass(frozen=True)
class ClientConfig:
    api_key: str
    base_url: str = DEFAULT_BASE_URL
    timeout_ms: int = 30000
    max_retries: int = 3
    retry_delay_ms: int = 1000
    fallback_model: Optional[str] = None
    app_id: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)
    debug: bool = False
    transport: Optional[httpx.AsyncBaseTransport] = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.api_key, str) or not self.api_key.strip():
            raise LunosError.validation("API key is required")
        if len(self.api_key) < 10:
            raise LunosError.validation("API key appears to be invalid (too short)")
        _validate_base_url(self.base_url)
        validate_timeout(self.timeout_ms)

        low, high = RETRIES_RANGE
        if isinstance(self.max_retries, bool) or not isinstance(self.max_retries, int) or not low <= self.max_retries <= high:
            raise LunosError.validation(f"Retries must be a number between {low} and {high}")
        low, high = RETRY_DELAY_RANGE_MS
        if (
            isinstance(self.retry_delay_ms, bool)
            or not isinstance(self.retry_delay_ms, (int, float))
            or not low <= self.retry_delay_ms <= high
        ):
            raise LunosError.validation(f"Retry delay must be a number between {low} and {high} milliseconds")

        if self.fallback_model is not None and (
            not isinstance(self.fallback_model, str) or not self.fallback_model.strip()
        ):
            raise LunosError.validation("Fallback model must be a non-empty string")

        # snapshot owns its header mapping
        object.__setattr__(self, "headers", dict(self.headers or {}))

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000

    def replace(self, **overrides: Any) -> "ClientConfig":
        """Return a new validated snapshot with ``overrides`` applied."""
        return dataclasses.replace(self, **overrides)

    @classmethod
    def from_env(cls, **overrides: Any) -> "ClientConfig":
        values: Dict[str, Any] = {
            "api_key": os.environ.get("LUNOS_API_KEY", ""),
            "base_url": os.environ.get("LUNOS_BASE_URL", DEFAULT_BASE_URL),
            "timeout_ms": int(os.environ.get("LUNOS_TIMEOUT_MS", "30000")),
            "max_retries": int(os.environ.get("LUNOS_MAX_RETRIES", "3")),
            "retry_delay_ms": int(os.environ.get("LUNOS_RETRY_DELAY_MS", "1000")),
            "fallback_model": os.environ.get("LUNOS_FALLBACK_MODEL") or None,
            "app_id": os.environ.get("LUNOS_APP_ID") or None,
            "debug": os.environ.get("LUNOS_DEBUG", "").strip().lower() in ("1", "true", "yes", "on"),
        }
        values.update(overrides)
        return cls(**values)


@dataclass(frozen=True)
class RequestOptions:
    """Per-call overrides. Unset fields fall back to the client configuration."""

    timeout_ms: Optional[int] = None
    headers: Dict[str, str] = field(default_factory=dict)
    fallback_model: Optional[str] = None
    app_id: Optional[str] = None
    cancel_token: Optional[CancellationToken] = None

    def __post_init__(self) -> None:
        if self.timeout_ms is not None:
            validate_timeout(self.timeout_ms)
        object.__setattr__(self, "headers", dict(self.headers or {}))


__all__ = ["ClientConfig", "RequestOptions", "DEFAULT_BASE_URL"]
