"""Text-to-speech and transcription."""

from __future__ import annotations

import time
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from ..config import RequestOptions
from ..files import PathLike, buffer_to_base64, extension_for_content_type, save_buffer_to_file
from ..models import (
    AudioGenerationRequest,
    AudioGenerationResponse,
    AudioTranscriptionRequest,
    AudioTranscriptionResponse,
)
from ..pipeline import RequestDescriptor
from .base import BaseService, parse_response, validate_request


class AudioService(BaseService):
    name = "audio"

    async def generate_audio(
        self,
        request: Union[AudioGenerationRequest, Mapping[str, Any]],
        *,
        options: Optional[RequestOptions] = None,
    ) -> AudioGenerationResponse:
        """Synthesize speech; the body comes back as raw audio bytes."""
        validated = validate_request(AudioGenerationRequest, request)
        self._log(
            "Generating audio input=%r voice=%s app_id=%s",
            validated.input[:50],
            validated.voice,
            validated.app_id,
        )
        descriptor = RequestDescriptor.for_json(
            "/v1/audio/generations",
            validated.to_payload(),
            options=self._call_options(options, app_id=validated.app_id),
        )
        raw = await self._pipeline.request_raw(descriptor)
        extension = extension_for_content_type(raw.content_type)
        return AudioGenerationResponse(
            audio_buffer=raw.buffer,
            content_type=raw.content_type,
            filename=f"audio_{int(time.time() * 1000)}.{extension}",
        )

    async def generate_audio_to_file(
        self,
        request: Union[AudioGenerationRequest, Mapping[str, Any]],
        path: PathLike,
        *,
        options: Optional[RequestOptions] = None,
    ) -> Path:
        result = await self.generate_audio(request, options=options)
        return save_buffer_to_file(result.audio_buffer, path)

    async def text_to_speech(
        self,
        text: str,
        voice: Optional[str] = None,
        model: Optional[str] = None,
        **params: Any,
    ) -> AudioGenerationResponse:
        return await self.generate_audio({"input": text, "voice": voice, "model": model, **params})

    async def transcribe_audio(
        self,
        request: Union[AudioTranscriptionRequest, Mapping[str, Any]],
        *,
        options: Optional[RequestOptions] = None,
    ) -> AudioTranscriptionResponse:
        validated = validate_request(AudioTranscriptionRequest, request)
        self._log("Transcribing audio model=%s language=%s", validated.model, validated.language)
        payload = validated.model_dump(mode="json", by_alias=True, exclude_none=True, exclude={"file"})
        if isinstance(validated.file, bytes):
            payload["file"] = buffer_to_base64(validated.file)
        else:
            payload["file"] = validated.file
        descriptor = RequestDescriptor.for_json(
            "/v1/audio/transcriptions",
            payload,
            options=self._call_options(options, app_id=validated.app_id),
        )
        return parse_response(AudioTranscriptionResponse, await self._pipeline.request_json(descriptor))


__all__ = ["AudioService"]
