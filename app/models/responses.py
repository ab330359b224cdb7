"""Common API request and response models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from app.models.commands import CommandResult


class ServiceInfo(BaseModel):
    message: str
    version: str
    docs: str


class HealthResponse(BaseModel):
    status: str
    version: str


class WizardHealthResponse(BaseModel):
    path: str
    available: bool


class HostRequest(BaseModel):
    """Optional body for the online update/return/activate-request calls."""

    host: Optional[str] = None


class ActivateRequest(HostRequest):
    # Optional here so a missing value surfaces as our own 400 message
    serial_number: Optional[str] = None


class CommandResponse(BaseModel):
    success: bool
    returncode: Optional[int] = None
    stdout: str = ""
    stderr: str = ""
    file_path: Optional[str] = None
    file_name: Optional[str] = None

    @classmethod
    def from_result(
        cls,
        result: CommandResult,
        *,
        file_path: Optional[str] = None,
        file_name: Optional[str] = None,
    ) -> "CommandResponse":
        # Only request-generation endpoints echo the file, keep it unset elsewhere
        extra = {}
        if file_path is not None:
            extra["file_path"] = file_path
        if file_name is not None:
            extra["file_name"] = file_name
        return cls(
            success=result.success,
            returncode=result.exit_code,
            stdout=result.stdout,
            stderr=result.stderr,
            **extra,
        )


class ErrorResponse(BaseModel):
    error: str


class ToolErrorResponse(ErrorResponse):
    returncode: Optional[int] = None
    stdout: str = ""
    stderr: str = ""
