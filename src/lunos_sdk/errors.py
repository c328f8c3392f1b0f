"""Error taxonomy and HTTP response classification."""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Dict, Optional

import httpx


class ErrorKind(str, Enum):
    AUTHENTICATION = "authentication"
    RATE_LIMIT = "rate_limit"
    VALIDATION = "validation"
    BAD_REQUEST = "bad_request"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    SERVER_ERROR = "server_error"
    NETWORK = "network"
    GENERIC = "generic"


DEFAULT_CODES: Dict[ErrorKind, Optional[str]] = {
    ErrorKind.AUTHENTICATION: "AUTHENTICATION_ERROR",
    ErrorKind.RATE_LIMIT: "RATE_LIMIT_ERROR",
    ErrorKind.VALIDATION: "VALIDATION_ERROR",
    ErrorKind.BAD_REQUEST: "BAD_REQUEST",
    ErrorKind.FORBIDDEN: "FORBIDDEN",
    ErrorKind.NOT_FOUND: "NOT_FOUND",
    ErrorKind.SERVER_ERROR: "SERVER_ERROR",
    ErrorKind.NETWORK: "NETWORK_ERROR",
    ErrorKind.GENERIC: None,
}

STATUS_KINDS: Dict[int, ErrorKind] = {
    400: ErrorKind.BAD_REQUEST,
    401: ErrorKind.AUTHENTICATION,
    403: ErrorKind.FORBIDDEN,
    404: ErrorKind.NOT_FOUND,
    429: ErrorKind.RATE_LIMIT,
    500: ErrorKind.SERVER_ERROR,
    502: ErrorKind.SERVER_ERROR,
    503: ErrorKind.SERVER_ERROR,
    504: ErrorKind.SERVER_ERROR,
}


class LunosError(Exception):
    """Single error type raised by the SDK.

    ``kind`` is the discriminant callers branch on. The remaining fields are
    populated depending on the kind: ``retry_after`` only for rate limits,
    ``cancelled`` only for network errors raised by an explicit cancellation
    token, ``status`` is 0 for failures that never produced an HTTP response.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        status: int = 0,
        code: Optional[str] = None,
        details: Any = None,
        retry_after: Optional[int] = None,
        cancelled: bool = False,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status = status
        self.code = code if code is not None else DEFAULT_CODES[kind]
        self.details = details
        self.retry_after = retry_after
        self.cancelled = cancelled

    def __repr__(self) -> str:
        return f"LunosError(kind={self.kind.value!r}, status={self.status}, message={self.message!r})"

    @classmethod
    def validation(cls, message: str, details: Any = None) -> "LunosError":
        return cls(ErrorKind.VALIDATION, message, status=400, details=details)

    @classmethod
    def network(cls, message: str, *, cancelled: bool = False) -> "LunosError":
        return cls(ErrorKind.NETWORK, message, cancelled=cancelled)

    @classmethod
    def cancellation(cls, reason: Optional[str] = None) -> "LunosError":
        return cls.network(reason or "Request was cancelled", cancelled=True)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "kind": self.kind.value,
            "message": self.message,
            "status": self.status,
            "code": self.code,
        }
        if self.details is not None:
            payload["details"] = self.details
        if self.retry_after is not None:
            payload["retry_after"] = self.retry_after
        if self.cancelled:
            payload["cancelled"] = True
        return payload


def _parse_retry_after(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


def classify_response(response: httpx.Response) -> LunosError:
    """Map a non-2xx response whose body has been read to a ``LunosError``."""
    status = response.status_code
    details: Any = None
    code: Optional[str] = None
    try:
        data = json.loads(response.content)
    except (json.JSONDecodeError, UnicodeDecodeError):
        message = f"HTTP {status}: {response.reason_phrase}"
    else:
        error = data.get("error") if isinstance(data, dict) else None
        if isinstance(error, dict):
            details = error
            message = error.get("message") or f"HTTP {status}"
            if isinstance(error.get("code"), str):
                code = error["code"]
        else:
            details = error
            message = f"HTTP {status}"

    kind = STATUS_KINDS.get(status, ErrorKind.GENERIC)
    if kind is ErrorKind.RATE_LIMIT:
        return LunosError(
            kind,
            message,
            status=status,
            details=details,
            retry_after=_parse_retry_after(response.headers.get("retry-after")),
        )
    if kind is ErrorKind.GENERIC:
        return LunosError(kind, message, status=status, code=code, details=details)
    return LunosError(kind, message, status=status, details=details)


__all__ = ["ErrorKind", "LunosError", "classify_response"]
