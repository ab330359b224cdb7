"""Error taxonomy and the single exception → HTTP response mapping."""

from __future__ import annotations

from typing import Any, Optional

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.utils.logging import get_logger

log = get_logger(__name__)


class LicenseWizardError(Exception):
    """Base class for failures that map onto a specific HTTP status."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_body(self) -> dict[str, Any]:
        return {"error": self.message}


class MissingFieldError(LicenseWizardError):
    """A required request field or upload is absent. Raised before spawning."""

    status_code = status.HTTP_400_BAD_REQUEST


class CommandTimeoutError(LicenseWizardError):
    """The wizard ran past the configured wall-clock bound and was killed."""

    status_code = status.HTTP_408_REQUEST_TIMEOUT

    def __init__(
        self, message: str = "Command timeout", *, command_args: Optional[list[str]] = None,
    ) -> None:
        super().__init__(message)
        self.command_args = command_args or []


class CommandLaunchError(LicenseWizardError):
    """The wizard executable could not be started at all."""


class ToolError(LicenseWizardError):
    """The wizard exited non-zero and strict exit-code handling is on."""

    def __init__(self, returncode: Optional[int], stdout: str, stderr: str) -> None:
        super().__init__(f"License Wizard exited with code {returncode}")
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr

    def to_body(self) -> dict[str, Any]:
        return {
            "error": self.message,
            "returncode": self.returncode,
            "stdout": self.stdout,
            "stderr": self.stderr,
        }


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path"))
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "Invalid request"


def error_response(exc: Exception) -> JSONResponse:
    """Translate any exception into the JSON error body and status code."""
    if isinstance(exc, LicenseWizardError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())
    if isinstance(exc, RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": _validation_message(exc)},
        )
    if isinstance(exc, StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": str(exc)},
    )


async def handle_exception(request: Request, exc: Exception) -> JSONResponse:
    """FastAPI exception handler shared by every error type."""
    response = error_response(exc)
    log.warning(
        "request.failed",
        method=request.method,
        path=request.url.path,
        status=response.status_code,
        error=str(exc),
        error_type=type(exc).__name__,
        exc_info=not isinstance(
            exc, (LicenseWizardError, RequestValidationError, StarletteHTTPException),
        ),
    )
    return response
