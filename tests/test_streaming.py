from __future__ import annotations

from typing import List

import pytest

from lunos_sdk.errors import LunosError
from lunos_sdk.streaming import DecoderState, SSEDecoder, StreamFrame, iter_content, process_stream, stream_to_string

from .conftest import delta, sse


class ChunkSource:
    """Async byte source that records whether it was released."""

    def __init__(self, chunks: List[bytes], error: Exception | None = None) -> None:
        self._chunks = list(chunks)
        self._error = error
        self.closed = False
        self.served = 0

    def __aiter__(self) -> "ChunkSource":
        return self

    async def __anext__(self) -> bytes:
        if self._chunks:
            self.served += 1
            return self._chunks.pop(0)
        if self._error is not None:
            raise self._error
        raise StopAsyncIteration

    async def aclose(self) -> None:
        self.closed = True


def split_at(data: bytes, *points: int) -> List[bytes]:
    bounds = [0, *points, len(data)]
    return [data[a:b] for a, b in zip(bounds, bounds[1:])]


HI_STREAM = sse(delta("Hi"), "[DONE]")


@pytest.mark.asyncio
@pytest.mark.parametrize("point", range(1, len(HI_STREAM)))
async def test_any_split_point_yields_single_frame(point: int) -> None:
    decoder = SSEDecoder()
    source = ChunkSource(split_at(HI_STREAM, point))
    frames = [frame async for frame in decoder.iter_frames(source)]

    assert [frame.content for frame in frames] == ["Hi"]
    assert decoder.terminated
    assert decoder.saw_done
    assert source.closed


@pytest.mark.asyncio
async def test_byte_by_byte_delivery() -> None:
    source = ChunkSource([bytes([b]) for b in HI_STREAM])
    result = await process_stream(source, accumulate=True)

    assert result.content == "Hi"
    assert result.completed
    assert result.frames == 1


@pytest.mark.asyncio
async def test_accumulates_deltas_in_order() -> None:
    chunks: List[str] = []
    source = ChunkSource([sse(delta("A"), delta("B")), sse(delta("C"), "[DONE]")])

    text = await stream_to_string(source, on_chunk=chunks.append)

    assert text == "ABC"
    assert chunks == ["A", "B", "C"]


@pytest.mark.asyncio
async def test_multibyte_character_split_across_chunks() -> None:
    data = sse(delta("héllo ✓"), "[DONE]")
    index = data.index("✓".encode("utf-8")) + 1
    source = ChunkSource(split_at(data, index))

    assert await stream_to_string(source) == "héllo ✓"


@pytest.mark.asyncio
async def test_invalid_json_line_is_skipped_and_counted() -> None:
    failures: List[str] = []
    decoder = SSEDecoder(on_parse_error=lambda data, exc: failures.append(data))
    source = ChunkSource([b"data: {not json}\n\n", sse(delta("ok"), "[DONE]")])

    result = await process_stream(source, accumulate=True, decoder=decoder)

    assert result.content == "ok"
    assert result.parse_failures == 1
    assert failures == ["{not json}"]


@pytest.mark.asyncio
async def test_non_data_lines_and_crlf_are_ignored() -> None:
    payload = (
        b": keep-alive\r\n"
        b"event: message\r\n"
        b"data: " + delta("x").encode("utf-8") + b"\r\n\r\n"
        b"data: [DONE]\r\n\r\n"
    )
    assert await stream_to_string(ChunkSource([payload])) == "x"


@pytest.mark.asyncio
async def test_frames_without_content_are_passed_through() -> None:
    seen: List[StreamFrame] = []
    role_only = '{"choices":[{"delta":{"role":"assistant"}}]}'
    source = ChunkSource([sse(role_only, delta("z"), "[DONE]")])

    result = await process_stream(source, on_chunk=seen.append, accumulate=True)

    assert result.frames == 2
    assert seen[0].content is None
    assert seen[0].payload["choices"][0]["delta"]["role"] == "assistant"
    assert result.content == "z"


@pytest.mark.asyncio
async def test_done_stops_reading_and_releases_source() -> None:
    source = ChunkSource([sse(delta("a"), "[DONE]"), sse(delta("late"))])

    assert await stream_to_string(source) == "a"
    assert source.served == 1
    assert source.closed


@pytest.mark.asyncio
async def test_stream_without_sentinel_flushes_trailing_line() -> None:
    decoder = SSEDecoder()
    source = ChunkSource([b"data: " + delta("tail").encode("utf-8")])

    result = await process_stream(source, accumulate=True, decoder=decoder)

    assert result.content == "tail"
    assert not decoder.saw_done
    assert decoder.state is DecoderState.TERMINATED


@pytest.mark.asyncio
async def test_source_error_marks_decoder_errored() -> None:
    decoder = SSEDecoder()
    source = ChunkSource([sse(delta("a"))], error=LunosError.network("Stream read failed: reset"))

    with pytest.raises(LunosError):
        await process_stream(source, decoder=decoder)

    assert decoder.state is DecoderState.ERRORED
    assert source.closed


@pytest.mark.asyncio
async def test_decoder_is_single_use() -> None:
    decoder = SSEDecoder()
    await process_stream(ChunkSource([sse("[DONE]")]), decoder=decoder)

    with pytest.raises(RuntimeError):
        async for _ in decoder.iter_frames(ChunkSource([])):
            pass


def test_feed_after_termination_is_ignored() -> None:
    decoder = SSEDecoder()
    frames = decoder.feed(sse(delta("a"), "[DONE]"))

    assert [frame.terminal for frame in frames] == [False, True]
    assert decoder.feed(sse(delta("b"))) == []
    assert decoder.flush() == []


def test_partial_line_is_kept_pending() -> None:
    decoder = SSEDecoder()
    assert decoder.feed(b'data: {"choi') == []
    assert decoder.pending == 'data: {"choi'


@pytest.mark.asyncio
async def test_iter_content_yields_text_only() -> None:
    source = ChunkSource([sse(delta("one"), '{"choices":[]}', delta("two"), "[DONE]")])
    assert [text async for text in iter_content(source)] == ["one", "two"]
