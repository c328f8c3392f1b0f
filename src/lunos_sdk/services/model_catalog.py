"""Model discovery."""

from __future__ import annotations

from typing import Any, List, Optional

from ..config import RequestOptions
from ..errors import LunosError
from ..models import ModelInfo
from ..pipeline import RequestDescriptor
from .base import BaseService, parse_response


class ModelService(BaseService):
    name = "models"

    async def get_models(self, *, options: Optional[RequestOptions] = None) -> List[ModelInfo]:
        self._log("Getting all models")
        data: Any = await self._pipeline.request_json(
            RequestDescriptor(path="/public/models", method="GET", options=options or RequestOptions())
        )
        # Accept both a bare list and an OpenAI-style {"data": [...]} envelope
        if isinstance(data, dict):
            data = data.get("data", [])
        return [parse_response(ModelInfo, item) for item in data or []]

    async def get_model_by_id(self, model_id: str) -> Optional[ModelInfo]:
        if not model_id or not isinstance(model_id, str):
            raise LunosError.validation("Model ID is required")
        for model in await self.get_models():
            if model.id == model_id:
                return model
        return None

    async def get_models_by_capability(self, capability: str) -> List[ModelInfo]:
        if not capability or not isinstance(capability, str):
            raise LunosError.validation("Capability is required")
        return [model for model in await self.get_models() if capability in model.capabilities]

    async def search_models(self, query: str) -> List[ModelInfo]:
        if not query or not isinstance(query, str):
            raise LunosError.validation("Search query is required")
        needle = query.lower()
        matches = []
        for model in await self.get_models():
            haystack = " ".join(filter(None, [model.id, model.name, model.provider, model.owned_by, model.description]))
            if needle in haystack.lower():
                matches.append(model)
        return matches


__all__ = ["ModelService"]
