"""Pydantic models describing capability requests and responses."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, confloat, conint, constr, field_validator

NonEmptyStr = constr(min_length=1)
PositiveInt = conint(ge=1)

ChatRole = Literal["system", "user", "assistant", "function", "tool"]
ImageSize = Literal["256x256", "512x512", "1024x1024", "1792x1024", "1024x1792"]
EditSize = Literal["256x256", "512x512", "1024x1024"]
ImageResponseFormat = Literal["url", "b64_json"]
Voice = Literal["alloy", "echo", "fable", "onyx", "nova", "shimmer"]
AudioFormat = Literal["mp3", "opus", "aac", "flac"]
JobStatus = Literal["pending", "processing", "completed", "failed"]


def _require_text(value: Any, message: str) -> Any:
    if isinstance(value, str) and not value.strip():
        raise ValueError(message)
    return value


class BaseRequest(BaseModel):
    """Fields shared by every request.

    ``app_id`` is routed to the ``X-App-ID`` header and never serialized into
    the JSON body.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    model: Optional[str] = None
    user: Optional[str] = None
    app_id: Optional[str] = Field(default=None, alias="appId", exclude=True)

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Usage(BaseModel):
    model_config = ConfigDict(extra="allow")

    prompt_tokens: int = 0
    completion_tokens: Optional[int] = None
    total_tokens: int = 0


# Chat


class FunctionCall(BaseModel):
    name: str
    arguments: str


class ToolCall(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    type: Literal["function"] = "function"
    function: FunctionCall


class ChatMessage(BaseModel):
    model_config = ConfigDict(extra="allow")

    role: ChatRole
    content: Union[NonEmptyStr, List[Dict[str, Any]]]
    name: Optional[str] = None
    function_call: Optional[FunctionCall] = None
    tool_calls: Optional[List[ToolCall]] = None

    @field_validator("content")
    @classmethod
    def _content_not_blank(cls, value: Any) -> Any:
        if isinstance(value, list) and not value:
            raise ValueError("Each message must have a role and content")
        return _require_text(value, "Each message must have a role and content")


class ChatCompletionRequest(BaseRequest):
    messages: List[ChatMessage] = Field(..., min_length=1)
    max_tokens: Optional[PositiveInt] = None
    temperature: Optional[confloat(ge=0, le=2)] = None
    top_p: Optional[confloat(ge=0, le=1)] = None
    n: Optional[PositiveInt] = None
    stream: Optional[bool] = None
    stop: Optional[Union[str, List[str]]] = None
    presence_penalty: Optional[confloat(ge=-2, le=2)] = None
    frequency_penalty: Optional[confloat(ge=-2, le=2)] = None
    logit_bias: Optional[Dict[str, float]] = None
    logprobs: Optional[bool] = None
    top_logprobs: Optional[conint(ge=0, le=20)] = None
    response_format: Optional[Dict[str, Any]] = None
    seed: Optional[int] = None
    tools: Optional[List[Dict[str, Any]]] = None
    tool_choice: Optional[Union[str, Dict[str, Any]]] = None
    fallback_model: Optional[NonEmptyStr] = Field(default=None, exclude=True)


class ResponseMessage(BaseModel):
    model_config = ConfigDict(extra="allow")

    role: str = "assistant"
    content: Optional[str] = None
    tool_calls: Optional[List[Dict[str, Any]]] = None


class ChatChoice(BaseModel):
    model_config = ConfigDict(extra="allow")

    index: int = 0
    message: ResponseMessage
    finish_reason: Optional[str] = None


class ChatCompletionResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    object: str = "chat.completion"
    created: Optional[int] = None
    model: Optional[str] = None
    choices: List[ChatChoice] = Field(default_factory=list)
    usage: Optional[Usage] = None

    @property
    def text(self) -> str:
        if not self.choices:
            return ""
        return self.choices[0].message.content or ""


# Images


class ImageGenerationRequest(BaseRequest):
    prompt: NonEmptyStr
    n: Optional[conint(ge=1, le=10)] = None
    size: Optional[ImageSize] = None
    width: Optional[conint(ge=256, le=1792)] = None
    height: Optional[conint(ge=256, le=1792)] = None
    quality: Optional[Literal["standard", "hd"]] = None
    response_format: Optional[ImageResponseFormat] = None
    style: Optional[Literal["vivid", "natural"]] = None
    seed: Optional[int] = None

    @field_validator("prompt")
    @classmethod
    def _prompt_not_blank(cls, value: str) -> str:
        return _require_text(value, "Prompt is required and cannot be empty")


class ImageEditRequest(BaseRequest):
    image: NonEmptyStr
    mask: Optional[str] = None
    prompt: NonEmptyStr
    n: Optional[conint(ge=1, le=10)] = None
    size: Optional[EditSize] = None
    response_format: Optional[ImageResponseFormat] = None


class ImageVariationRequest(BaseRequest):
    image: NonEmptyStr
    n: Optional[conint(ge=1, le=10)] = None
    size: Optional[EditSize] = None
    response_format: Optional[ImageResponseFormat] = None


class ImageData(BaseModel):
    model_config = ConfigDict(extra="allow")

    url: Optional[str] = None
    b64_json: Optional[str] = None
    revised_prompt: Optional[str] = None


class ImageGenerationResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    object: str = "list"
    created: Optional[int] = None
    model: Optional[str] = None
    data: List[ImageData] = Field(default_factory=list)


# Audio


class AudioGenerationRequest(BaseRequest):
    input: constr(min_length=1, max_length=4096)
    voice: Optional[Voice] = None
    response_format: Optional[AudioFormat] = None
    speed: Optional[confloat(ge=0.25, le=4.0)] = None

    @field_validator("input")
    @classmethod
    def _input_not_blank(cls, value: str) -> str:
        return _require_text(value, "Input text is required and cannot be empty")


class AudioGenerationResponse(BaseModel):
    audio_buffer: bytes
    content_type: str
    filename: str
    duration: Optional[float] = None


class AudioTranscriptionRequest(BaseRequest):
    """``file`` is raw audio bytes or an already base64-encoded string."""

    file: Union[bytes, NonEmptyStr]
    language: Optional[str] = None
    response_format: Optional[Literal["json", "text", "srt", "verbose_json", "vtt"]] = None
    temperature: Optional[confloat(ge=0, le=1)] = None
    timestamp_granularities: Optional[List[Literal["word", "segment"]]] = None
    prompt: Optional[str] = None

    @field_validator("file")
    @classmethod
    def _file_not_empty(cls, value: Any) -> Any:
        if isinstance(value, bytes) and not value:
            raise ValueError("Audio file is required")
        return value


class TranscriptionSegment(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: int
    start: float
    end: float
    text: str


class AudioTranscriptionResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    text: str = ""
    language: Optional[str] = None
    duration: Optional[float] = None
    segments: Optional[List[TranscriptionSegment]] = None


# Embeddings


class EmbeddingRequest(BaseRequest):
    input: Union[NonEmptyStr, List[NonEmptyStr]]
    encoding_format: Optional[Literal["float", "base64"]] = None
    dimensions: Optional[PositiveInt] = None

    @field_validator("input")
    @classmethod
    def _input_not_blank(cls, value: Any) -> Any:
        if isinstance(value, list):
            if not value:
                raise ValueError("Input array cannot be empty")
            for text in value:
                _require_text(text, "All input texts must be non-empty strings")
            return value
        return _require_text(value, "Input text cannot be empty")


class EmbeddingData(BaseModel):
    model_config = ConfigDict(extra="allow")

    object: str = "embedding"
    embedding: Union[List[float], str]
    index: int = 0


class EmbeddingResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    object: str = "list"
    model: Optional[str] = None
    data: List[EmbeddingData] = Field(default_factory=list)
    usage: Optional[Usage] = None


# Model catalog


class ModelPricing(BaseModel):
    model_config = ConfigDict(extra="allow")

    input: float = 0.0
    output: float = 0.0


class ModelInfo(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str
    name: Optional[str] = None
    provider: Optional[str] = None
    owned_by: Optional[str] = None
    parameters: Optional[Dict[str, Any]] = None
    price_per_million_tokens: Optional[ModelPricing] = Field(default=None, alias="pricePerMillionTokens")
    capabilities: List[str] = Field(default_factory=list)
    status: Optional[str] = None
    description: Optional[str] = None
    created: Optional[int] = None


# Video


class VideoParameters(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    aspect_ratio: Optional[Literal["16:9"]] = Field(default=None, alias="aspectRatio")
    negative_prompt: Optional[str] = Field(default=None, alias="negativePrompt")


class VideoGenerationRequest(BaseRequest):
    model: NonEmptyStr = "google/veo-3.0-generate-preview"
    prompt: NonEmptyStr
    parameters: Optional[VideoParameters] = None
    response_format: Optional[Literal["mp4"]] = None

    @field_validator("prompt")
    @classmethod
    def _prompt_not_blank(cls, value: str) -> str:
        return _require_text(value, "Prompt is required and cannot be empty")


class VideoGenerationResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    operation_name: Optional[str] = None
    status: JobStatus = "pending"
    object: Optional[str] = None
    created: Optional[int] = None
    model: Optional[str] = None


class VideoGenerationStatus(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    status: JobStatus
    video_url: Optional[str] = None
    error: Optional[str] = None


__all__ = [
    "AudioGenerationRequest",
    "AudioGenerationResponse",
    "AudioTranscriptionRequest",
    "AudioTranscriptionResponse",
    "BaseRequest",
    "ChatCompletionRequest",
    "ChatCompletionResponse",
    "ChatMessage",
    "EmbeddingRequest",
    "EmbeddingResponse",
    "ImageEditRequest",
    "ImageGenerationRequest",
    "ImageGenerationResponse",
    "ImageVariationRequest",
    "ModelInfo",
    "Usage",
    "VideoGenerationRequest",
    "VideoGenerationResponse",
    "VideoGenerationStatus",
    "VideoParameters",
]
