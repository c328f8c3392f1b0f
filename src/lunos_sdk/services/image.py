"""Image generation, editing and variations."""

from __future__ import annotations

from typing import Any, Mapping, Optional, Union

from ..config import RequestOptions
from ..errors import LunosError
from ..models import ImageEditRequest, ImageGenerationRequest, ImageGenerationResponse, ImageVariationRequest
from ..pipeline import RequestDescriptor
from .base import BaseService, parse_response, validate_request


class ImageService(BaseService):
    name = "image"

    async def _post(self, path: str, request, options: Optional[RequestOptions]) -> ImageGenerationResponse:
        descriptor = RequestDescriptor.for_json(
            path,
            request.to_payload(),
            options=self._call_options(options, app_id=request.app_id),
        )
        return parse_response(ImageGenerationResponse, await self._pipeline.request_json(descriptor))

    async def generate_image(
        self,
        request: Union[ImageGenerationRequest, Mapping[str, Any]],
        *,
        options: Optional[RequestOptions] = None,
    ) -> ImageGenerationResponse:
        validated = validate_request(ImageGenerationRequest, request)
        self._log("Generating image model=%s app_id=%s", validated.model, validated.app_id)
        return await self._post("/v1/image/generations", validated, options)

    async def edit_image(
        self,
        request: Union[ImageEditRequest, Mapping[str, Any]],
        *,
        options: Optional[RequestOptions] = None,
    ) -> ImageGenerationResponse:
        validated = validate_request(ImageEditRequest, request)
        self._log("Editing image model=%s", validated.model)
        return await self._post("/v1/image/edits", validated, options)

    async def create_image_variation(
        self,
        request: Union[ImageVariationRequest, Mapping[str, Any]],
        *,
        options: Optional[RequestOptions] = None,
    ) -> ImageGenerationResponse:
        validated = validate_request(ImageVariationRequest, request)
        self._log("Creating image variation model=%s", validated.model)
        return await self._post("/v1/image/variations", validated, options)

    async def generate_multiple(self, prompt: str, count: int, **params: Any) -> ImageGenerationResponse:
        if count < 1 or count > 10:
            raise LunosError.validation("Count must be between 1 and 10")
        return await self.generate_image({"prompt": prompt, "n": count, **params})


__all__ = ["ImageService"]
