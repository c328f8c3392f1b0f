"""Chat completions, buffered and streamed."""

from __future__ import annotations

from typing import Any, AsyncIterator, Callable, Dict, List, Mapping, Optional, Union

from ..config import RequestOptions
from ..errors import LunosError
from ..models import ChatCompletionRequest, ChatCompletionResponse, ChatMessage
from ..pipeline import RequestDescriptor
from ..streaming import SSEDecoder, StreamFrame, stream_to_string
from ..transport import ByteStream
from .base import BaseService, parse_response, validate_request

CHAT_COMPLETIONS_PATH = "/v1/chat/completions"

ChatRequestLike = Union[ChatCompletionRequest, Mapping[str, Any]]


class ChatService(BaseService):
    name = "chat"

    def _descriptor(
        self,
        request: ChatCompletionRequest,
        options: Optional[RequestOptions],
        *,
        stream: bool = False,
    ) -> RequestDescriptor:
        payload = request.to_payload()
        if stream:
            payload["stream"] = True
        return RequestDescriptor.for_json(
            CHAT_COMPLETIONS_PATH,
            payload,
            options=self._call_options(options, app_id=request.app_id, fallback_model=request.fallback_model),
        )

    async def create_completion(
        self,
        request: ChatRequestLike,
        *,
        options: Optional[RequestOptions] = None,
    ) -> ChatCompletionResponse:
        validated = validate_request(ChatCompletionRequest, request)
        self._log(
            "Creating chat completion model=%s messages=%s fallback_model=%s",
            validated.model,
            len(validated.messages),
            validated.fallback_model,
        )
        data = await self._pipeline.request_json(self._descriptor(validated, options))
        return parse_response(ChatCompletionResponse, data)

    async def create_completion_stream(
        self,
        request: ChatRequestLike,
        *,
        options: Optional[RequestOptions] = None,
    ) -> ByteStream:
        """Open a streamed completion and hand back the raw SSE byte stream."""
        validated = validate_request(ChatCompletionRequest, request)
        self._log(
            "Creating streaming chat completion model=%s messages=%s fallback_model=%s",
            validated.model,
            len(validated.messages),
            validated.fallback_model,
        )
        return await self._pipeline.request_stream(self._descriptor(validated, options, stream=True))

    async def stream_completion(
        self,
        request: ChatRequestLike,
        *,
        options: Optional[RequestOptions] = None,
        decoder: Optional[SSEDecoder] = None,
    ) -> AsyncIterator[StreamFrame]:
        stream = await self.create_completion_stream(request, options=options)
        async for frame in (decoder or SSEDecoder()).iter_frames(stream):
            yield frame

    async def stream_completion_to_string(
        self,
        request: ChatRequestLike,
        on_chunk: Optional[Callable[[str], None]] = None,
        *,
        options: Optional[RequestOptions] = None,
    ) -> str:
        stream = await self.create_completion_stream(request, options=options)
        return await stream_to_string(stream, on_chunk)

    async def chat(
        self,
        messages: List[Union[ChatMessage, Dict[str, Any]]],
        model: Optional[str] = None,
        **params: Any,
    ) -> ChatCompletionResponse:
        return await self.create_completion({"messages": messages, "model": model, **params})

    async def chat_with_user(self, user_message: str, model: Optional[str] = None, **params: Any) -> ChatCompletionResponse:
        return await self.chat([{"role": "user", "content": user_message}], model, **params)

    async def chat_with_system(
        self,
        system_message: str,
        user_message: str,
        model: Optional[str] = None,
        **params: Any,
    ) -> ChatCompletionResponse:
        messages = [
            {"role": "system", "content": system_message},
            {"role": "user", "content": user_message},
        ]
        return await self.chat(messages, model, **params)

    async def get_generation(self, generation_id: str, *, options: Optional[RequestOptions] = None) -> Any:
        if not generation_id or not isinstance(generation_id, str):
            raise LunosError.validation("Generation ID is required")
        self._log("Getting generation id=%s", generation_id)
        descriptor = RequestDescriptor(
            path=f"/v1/chat/generation/{generation_id}",
            method="GET",
            options=options or RequestOptions(),
        )
        return await self._pipeline.request_json(descriptor)

    async def get_usage(self, *, options: Optional[RequestOptions] = None) -> Any:
        return await self._pipeline.request_json(
            RequestDescriptor(path="/v1/usage", method="GET", options=options or RequestOptions())
        )

    async def get_account(self, *, options: Optional[RequestOptions] = None) -> Any:
        return await self._pipeline.request_json(
            RequestDescriptor(path="/v1/account", method="GET", options=options or RequestOptions())
        )


__all__ = ["ChatService", "CHAT_COMPLETIONS_PATH"]
