from __future__ import annotations

import json
from typing import Any, Callable, List

import httpx
import pytest

from lunos_sdk.config import ClientConfig
from lunos_sdk.pipeline import RequestPipeline

API_KEY = "test-api-key-0001"
BASE_URL = "https://api.example.com"


class SleepRecorder:
    def __init__(self) -> None:
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def make_config(handler: Callable[[httpx.Request], Any], **overrides: Any) -> ClientConfig:
    values: dict = {
        "api_key": API_KEY,
        "base_url": BASE_URL,
        "retry_delay_ms": 100,
        "transport": httpx.MockTransport(handler),
    }
    values.update(overrides)
    return ClientConfig(**values)


def make_pipeline(handler: Callable[[httpx.Request], Any], sleep: SleepRecorder | None = None, **overrides: Any) -> RequestPipeline:
    return RequestPipeline(make_config(handler, **overrides), sleep=sleep or SleepRecorder())


def body_of(request: httpx.Request) -> dict:
    return json.loads(request.content)


def sse(*events: str) -> bytes:
    return "".join(f"data: {event}\n\n" for event in events).encode("utf-8")


def delta(content: str) -> str:
    return json.dumps({"choices": [{"index": 0, "delta": {"content": content}}]})


@pytest.fixture()
def sleeper() -> SleepRecorder:
    return SleepRecorder()
