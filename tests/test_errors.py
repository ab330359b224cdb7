"""Tests for the exception → HTTP response mapping."""

from __future__ import annotations

import json

from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException

from app.errors import (
    CommandLaunchError,
    CommandTimeoutError,
    MissingFieldError,
    ToolError,
    error_response,
)


def _decode(resp):
    return resp.status_code, json.loads(resp.body)


def test_missing_field():
    assert _decode(error_response(MissingFieldError("license_file is required"))) == (
        400,
        {"error": "license_file is required"},
    )


def test_timeout():
    assert _decode(error_response(CommandTimeoutError())) == (408, {"error": "Command timeout"})


def test_launch_error():
    status, body = _decode(error_response(CommandLaunchError("Permission denied: /opt/w")))
    assert status == 500
    assert body == {"error": "Permission denied: /opt/w"}


def test_tool_error_passes_output_through():
    status, body = _decode(error_response(ToolError(4, "out", "err")))
    assert status == 500
    assert body == {
        "error": "License Wizard exited with code 4",
        "returncode": 4,
        "stdout": "out",
        "stderr": "err",
    }


def test_request_validation_is_400():
    exc = RequestValidationError(
        [{"loc": ("body", "host"), "msg": "Input should be a valid string", "type": "string_type"}],
    )
    status, body = _decode(error_response(exc))
    assert status == 400
    assert body == {"error": "host: Input should be a valid string"}


def test_http_exception_keeps_status():
    status, body = _decode(error_response(HTTPException(status_code=404, detail="Not Found")))
    assert (status, body) == (404, {"error": "Not Found"})


def test_unexpected_exception_is_500():
    assert _decode(error_response(ValueError("boom"))) == (500, {"error": "boom"})
