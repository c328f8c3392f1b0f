from __future__ import annotations

import httpx
import pytest

from lunos_sdk.errors import ErrorKind, LunosError, classify_response


def make_response(status: int, **kwargs) -> httpx.Response:
    return httpx.Response(status, request=httpx.Request("GET", "https://api.example.com/v1/x"), **kwargs)


@pytest.mark.parametrize(
    "status, kind",
    [
        (400, ErrorKind.BAD_REQUEST),
        (401, ErrorKind.AUTHENTICATION),
        (403, ErrorKind.FORBIDDEN),
        (404, ErrorKind.NOT_FOUND),
        (429, ErrorKind.RATE_LIMIT),
        (500, ErrorKind.SERVER_ERROR),
        (502, ErrorKind.SERVER_ERROR),
        (503, ErrorKind.SERVER_ERROR),
        (504, ErrorKind.SERVER_ERROR),
        (408, ErrorKind.GENERIC),
        (418, ErrorKind.GENERIC),
    ],
)
def test_status_code_mapping(status: int, kind: ErrorKind) -> None:
    error = classify_response(make_response(status, json={"error": {"message": "nope"}}))
    assert error.kind is kind
    assert error.status == status
    assert error.message == "nope"


def test_message_falls_back_to_status_text_when_body_is_not_json() -> None:
    error = classify_response(make_response(502, text="<html>bad gateway</html>"))
    assert error.message == "HTTP 502: Bad Gateway"
    assert error.code == "SERVER_ERROR"


def test_message_falls_back_to_status_when_json_has_no_message() -> None:
    error = classify_response(make_response(500, json={"detail": "x"}))
    assert error.message == "HTTP 500"


def test_rate_limit_captures_retry_after() -> None:
    error = classify_response(make_response(429, json={"error": {"message": "slow down"}}, headers={"retry-after": "7"}))
    assert error.kind is ErrorKind.RATE_LIMIT
    assert error.retry_after == 7


def test_rate_limit_ignores_unparseable_retry_after() -> None:
    error = classify_response(make_response(429, headers={"retry-after": "Wed, 21 Oct 2015 07:28:00 GMT"}))
    assert error.retry_after is None


def test_generic_keeps_status_code_and_details() -> None:
    error = classify_response(make_response(418, json={"error": {"message": "teapot", "code": "TEAPOT"}}))
    assert error.kind is ErrorKind.GENERIC
    assert error.status == 418
    assert error.code == "TEAPOT"
    assert error.details == {"message": "teapot", "code": "TEAPOT"}


def test_to_dict_is_structured() -> None:
    error = LunosError.cancellation()
    assert error.to_dict() == {
        "kind": "network",
        "message": "Request was cancelled",
        "status": 0,
        "code": "NETWORK_ERROR",
        "cancelled": True,
    }
