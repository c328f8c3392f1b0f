"""Text embeddings."""

from __future__ import annotations

from typing import Any, List, Mapping, Optional, Union

from ..config import RequestOptions
from ..errors import ErrorKind, LunosError
from ..models import EmbeddingRequest, EmbeddingResponse
from ..pipeline import RequestDescriptor
from .base import BaseService, parse_response, validate_request


class EmbeddingService(BaseService):
    name = "embedding"

    async def create_embedding(
        self,
        request: Union[EmbeddingRequest, Mapping[str, Any]],
        *,
        options: Optional[RequestOptions] = None,
    ) -> EmbeddingResponse:
        validated = validate_request(EmbeddingRequest, request)
        inputs = validated.input if isinstance(validated.input, list) else [validated.input]
        self._log("Creating embedding model=%s inputs=%s", validated.model, len(inputs))
        descriptor = RequestDescriptor.for_json(
            "/v1/embeddings",
            validated.to_payload(),
            options=self._call_options(options, app_id=validated.app_id),
        )
        return parse_response(EmbeddingResponse, await self._pipeline.request_json(descriptor))

    async def embed_text(self, text: str, model: Optional[str] = None) -> List[float]:
        response = await self.create_embedding({"input": text, "model": model, "encoding_format": "float"})
        if not response.data:
            raise LunosError(ErrorKind.GENERIC, "Embedding response contained no data")
        return _as_vector(response.data[0].embedding)

    async def embed_multiple(self, texts: List[str], model: Optional[str] = None) -> List[List[float]]:
        response = await self.create_embedding({"input": texts, "model": model, "encoding_format": "float"})
        ordered = sorted(response.data, key=lambda item: item.index)
        return [_as_vector(item.embedding) for item in ordered]


def _as_vector(embedding: Union[List[float], str]) -> List[float]:
    if isinstance(embedding, str):
        raise LunosError(ErrorKind.GENERIC, "Expected float embeddings but received base64 data")
    return embedding


__all__ = ["EmbeddingService"]
