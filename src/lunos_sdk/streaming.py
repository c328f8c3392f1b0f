"""Server-Sent-Events decoding for streamed chat completions."""

from __future__ import annotations

import codecs
import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, AsyncIterable, AsyncIterator, Callable, List, Optional

logger = logging.getLogger("lunos_sdk.streaming")

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"

ParseErrorHook = Callable[[str, Exception], None]


class DecoderState(str, Enum):
    AWAITING_DATA = "awaiting_data"
    DECODING = "decoding"
    TERMINATED = "terminated"
    ERRORED = "errored"


@dataclass(frozen=True)
class StreamFrame:
    terminal: bool = False
    payload: Any = None

    @property
    def content(self) -> Optional[str]:
        """Text delta at ``choices[0].delta.content``, if present."""
        if not isinstance(self.payload, dict):
            return None
        choices = self.payload.get("choices")
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            return None
        delta = choices[0].get("delta")
        if not isinstance(delta, dict):
            return None
        content = delta.get("content")
        return content if isinstance(content, str) else None


@dataclass(frozen=True)
class StreamResult:
    content: Optional[str]
    completed: bool
    frames: int
    parse_failures: int = 0


async def _close(stream: AsyncIterable[bytes]) -> None:
    aclose = getattr(stream, "aclose", None)
    if aclose is not None:
        await aclose()


class SSEDecoder:
    """Single-use decoder turning a byte stream into ``StreamFrame`` objects.

    Lines are reassembled across chunk boundaries, including multi-byte UTF-8
    sequences split between chunks. Only ``data: `` lines carry payload; the
    ``[DONE]`` sentinel terminates decoding. A ``data:`` line that is not valid
    JSON is skipped and counted in :attr:`parse_failures`.
    """

    def __init__(self, *, on_parse_error: Optional[ParseErrorHook] = None) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._pending = ""
        self._on_parse_error = on_parse_error
        self._consumed = False
        self.state = DecoderState.AWAITING_DATA
        self.parse_failures = 0
        self.saw_done = False

    @property
    def terminated(self) -> bool:
        return self.state is DecoderState.TERMINATED

    @property
    def pending(self) -> str:
        return self._pending

    def feed(self, chunk: bytes) -> List[StreamFrame]:
        if self.state in (DecoderState.TERMINATED, DecoderState.ERRORED):
            return []
        self.state = DecoderState.DECODING
        self._pending += self._decoder.decode(chunk)
        lines = self._pending.split("\n")
        self._pending = lines.pop()
        frames = self._process(lines)
        if self.state is DecoderState.DECODING:
            self.state = DecoderState.AWAITING_DATA
        return frames

    def flush(self) -> List[StreamFrame]:
        """Decode whatever is left once the upstream has no more bytes."""
        if self.state in (DecoderState.TERMINATED, DecoderState.ERRORED):
            return []
        tail = self._pending + self._decoder.decode(b"", final=True)
        self._pending = ""
        frames = self._process(tail.split("\n"))
        self.state = DecoderState.TERMINATED
        return frames

    def _process(self, lines: List[str]) -> List[StreamFrame]:
        frames: List[StreamFrame] = []
        for raw in lines:
            line = raw.rstrip("\r")
            if not line.strip() or not line.startswith(DATA_PREFIX):
                continue
            data = line[len(DATA_PREFIX):]
            if data == DONE_SENTINEL:
                self.state = DecoderState.TERMINATED
                self.saw_done = True
                frames.append(StreamFrame(terminal=True))
                break
            try:
                payload = json.loads(data)
            except json.JSONDecodeError as exc:
                self.parse_failures += 1
                logger.debug("Failed to parse stream chunk: %s", exc)
                if self._on_parse_error is not None:
                    self._on_parse_error(data, exc)
                continue
            frames.append(StreamFrame(payload=payload))
        return frames

    async def iter_frames(self, stream: AsyncIterable[bytes]) -> AsyncIterator[StreamFrame]:
        """Yield payload frames in arrival order; the terminal frame is not yielded."""
        if self._consumed:
            raise RuntimeError("SSEDecoder instances are single-use")
        self._consumed = True
        try:
            async for chunk in stream:
                for frame in self.feed(chunk):
                    if frame.terminal:
                        return
                    yield frame
            for frame in self.flush():
                if frame.terminal:
                    return
                yield frame
        except Exception:
            self.state = DecoderState.ERRORED
            raise
        finally:
            await _close(stream)


async def process_stream(
    stream: AsyncIterable[bytes],
    *,
    on_chunk: Optional[Callable[[StreamFrame], None]] = None,
    accumulate: bool = False,
    decoder: Optional[SSEDecoder] = None,
) -> StreamResult:
    decoder = decoder or SSEDecoder()
    parts: List[str] = []
    count = 0
    async for frame in decoder.iter_frames(stream):
        count += 1
        if on_chunk is not None:
            on_chunk(frame)
        if accumulate and frame.content:
            parts.append(frame.content)
    return StreamResult(
        content="".join(parts) if accumulate else None,
        completed=decoder.terminated,
        frames=count,
        parse_failures=decoder.parse_failures,
    )


async def stream_to_string(
    stream: AsyncIterable[bytes],
    on_chunk: Optional[Callable[[str], None]] = None,
) -> str:
    def forward(frame: StreamFrame) -> None:
        if on_chunk is not None and frame.content:
            on_chunk(frame.content)

    result = await process_stream(stream, on_chunk=forward, accumulate=True)
    return result.content or ""


async def iter_content(stream: AsyncIterable[bytes]) -> AsyncIterator[str]:
    async for frame in SSEDecoder().iter_frames(stream):
        if frame.content:
            yield frame.content


__all__ = [
    "DecoderState",
    "SSEDecoder",
    "StreamFrame",
    "StreamResult",
    "iter_content",
    "process_stream",
    "stream_to_string",
]
