"""Video generation jobs."""

from __future__ import annotations

import time
from typing import Any, Mapping, Optional, Union

from ..config import RequestOptions
from ..errors import ErrorKind, LunosError
from ..models import VideoGenerationRequest, VideoGenerationResponse, VideoGenerationStatus
from ..pipeline import RequestDescriptor
from .base import BaseService, parse_response, validate_request

VIDEO_GENERATIONS_PATH = "/v1/video/generations"


class VideoService(BaseService):
    name = "video"

    async def generate_video(
        self,
        request: Union[VideoGenerationRequest, Mapping[str, Any]],
        *,
        options: Optional[RequestOptions] = None,
    ) -> VideoGenerationResponse:
        validated = validate_request(VideoGenerationRequest, request)
        self._log("Generating video model=%s app_id=%s", validated.model, validated.app_id)
        descriptor = RequestDescriptor.for_json(
            VIDEO_GENERATIONS_PATH,
            validated.to_payload(),
            options=self._call_options(options, app_id=validated.app_id),
        )
        return parse_response(VideoGenerationResponse, await self._pipeline.request_json(descriptor))

    async def get_video_status(
        self,
        operation_id: str,
        app_id: Optional[str] = None,
        *,
        options: Optional[RequestOptions] = None,
    ) -> VideoGenerationStatus:
        if not operation_id or not isinstance(operation_id, str):
            raise LunosError.validation("Operation ID is required")
        self._log("Checking video status operation_id=%s", operation_id)
        descriptor = RequestDescriptor(
            path=f"{VIDEO_GENERATIONS_PATH}/{operation_id}",
            method="GET",
            options=self._call_options(options, app_id=app_id),
        )
        return parse_response(VideoGenerationStatus, await self._pipeline.request_json(descriptor))

    async def generate_video_and_wait(
        self,
        request: Union[VideoGenerationRequest, Mapping[str, Any]],
        poll_interval: float = 10.0,
        max_wait: float = 300.0,
    ) -> VideoGenerationStatus:
        """Start a job and poll its status until it completes, fails or ``max_wait`` seconds pass."""
        validated = validate_request(VideoGenerationRequest, request)
        started = time.monotonic()
        job = await self.generate_video(validated)
        self._log("Video generation started operation_id=%s", job.id)

        while time.monotonic() - started < max_wait:
            status = await self.get_video_status(job.id, validated.app_id)
            if status.status == "completed":
                self._log("Video generation completed operation_id=%s url=%s", job.id, status.video_url)
                return status
            if status.status == "failed":
                raise LunosError(
                    ErrorKind.GENERIC,
                    f"Video generation failed: {status.error or 'Unknown error'}",
                    details=status.model_dump(),
                )
            await self._pipeline.sleep(poll_interval)

        raise LunosError(ErrorKind.GENERIC, f"Video generation timeout after {max_wait}s")


__all__ = ["VideoService"]
