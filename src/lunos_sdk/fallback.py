"""Model fallback decisions and request body substitution."""

from __future__ import annotations

import json
from typing import Optional

from .errors import ErrorKind, LunosError

MODEL_ERROR_KEYWORDS = (
    "model",
    "model not found",
    "model unavailable",
    "model error",
    "invalid model",
    "model not available",
    "model temporarily unavailable",
)


def is_model_error(error: BaseException) -> bool:
    message = str(error).lower()
    return any(keyword in message for keyword in MODEL_ERROR_KEYWORDS)


def should_fallback(error: LunosError, fallback_model: Optional[str]) -> bool:
    if not fallback_model:
        return False
    if error.kind in (ErrorKind.AUTHENTICATION, ErrorKind.VALIDATION):
        return False
    if error.cancelled:
        return False
    return is_model_error(error)


def substitute_model(body: Optional[bytes], model: str) -> Optional[bytes]:
    """Return ``body`` with its ``model`` field replaced, or None if it is not a JSON object."""
    if not body:
        return None
    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    if not isinstance(payload, dict):
        return None
    payload["model"] = model
    return json.dumps(payload, separators=(",", ":")).encode("utf-8")


def original_model(body: Optional[bytes]) -> Optional[str]:
    if not body:
        return None
    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    return payload.get("model") if isinstance(payload, dict) else None


__all__ = ["MODEL_ERROR_KEYWORDS", "is_model_error", "should_fallback", "substitute_model", "original_model"]
