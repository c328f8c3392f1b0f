"""Shared plumbing for capability services."""

from __future__ import annotations

import dataclasses
import logging
from typing import Any, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from ..config import RequestOptions
from ..errors import ErrorKind, LunosError
from ..pipeline import RequestPipeline

M = TypeVar("M", bound=BaseModel)


def _describe(exc: ValidationError) -> str:
    first = exc.errors(include_url=False)[0]
    message = str(first.get("msg", "Invalid request"))
    if message.startswith("Value error, "):
        return message[len("Value error, "):]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {message}" if location else message


def validate_request(model_cls: Type[M], request: Union[M, Mapping[str, Any]]) -> M:
    """Coerce ``request`` into ``model_cls`` or raise a Validation error."""
    if isinstance(request, model_cls):
        return request
    try:
        return model_cls.model_validate(request)
    except ValidationError as exc:
        raise LunosError.validation(_describe(exc), details=exc.errors(include_url=False, include_context=False)) from exc


def parse_response(model_cls: Type[M], data: Any) -> M:
    try:
        return model_cls.model_validate(data)
    except ValidationError as exc:
        raise LunosError(
            ErrorKind.GENERIC,
            f"Unexpected {model_cls.__name__} payload: {_describe(exc)}",
            details=exc.errors(include_url=False, include_context=False),
        ) from exc


class BaseService:
    name = "base"

    def __init__(self, pipeline: RequestPipeline) -> None:
        self._pipeline = pipeline
        self._logger = logging.getLogger(f"lunos_sdk.services.{self.name}")

    def _log(self, message: str, *args: Any) -> None:
        level = logging.INFO if self._pipeline.config.debug else logging.DEBUG
        self._logger.log(level, message, *args)

    @staticmethod
    def _call_options(
        options: Optional[RequestOptions],
        *,
        app_id: Optional[str] = None,
        fallback_model: Optional[str] = None,
    ) -> RequestOptions:
        options = options or RequestOptions()
        return dataclasses.replace(
            options,
            app_id=options.app_id or app_id,
            fallback_model=options.fallback_model or fallback_model,
        )


__all__ = ["BaseService", "parse_response", "validate_request"]
