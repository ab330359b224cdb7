"""License Wizard endpoints.

Each route assembles the wizard arguments for one operation and relays the
result. Errors propagate to the shared handler in ``app.errors``.
"""

from __future__ import annotations

from typing import Optional, Sequence
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile
from starlette.concurrency import run_in_threadpool

from app.auth import require_api_key
from app.config import settings
from app.errors import MissingFieldError, ToolError
from app.models.commands import CommandResult
from app.models.responses import (
    ActivateRequest,
    CommandResponse,
    ErrorResponse,
    HostRequest,
    ToolErrorResponse,
)
from app.services.files import file_store
from app.services.wizard_runner import wizard_runner
from app.utils.logging import get_logger

log = get_logger(__name__)

router = APIRouter(
    prefix="/licenses",
    tags=["licenses"],
    dependencies=[Depends(require_api_key)],
    responses={
        400: {"model": ErrorResponse},
        408: {"model": ErrorResponse},
        500: {"model": ToolErrorResponse},
    },
)

_relay_opts = dict(response_model=CommandResponse, response_model_exclude_unset=True)


# ── helpers ───────────────────────────────────────────────────────────────


def _relay(result: CommandResult, **echo: str) -> CommandResponse:
    """Turn a runner result into the response body."""
    if not result.success and settings.strict_exit_codes:
        raise ToolError(result.exit_code, result.stdout, result.stderr)
    return CommandResponse.from_result(result, **echo)


def _host_args(host: Optional[str]) -> list[str]:
    return ["--host", host] if host else []


def _has_file(upload: Optional[UploadFile]) -> bool:
    return upload is not None and bool(upload.filename)


async def _run_with_uploads(
    flag: str, *uploads: UploadFile, leading: Sequence[str] = (),
) -> CommandResponse:
    async with file_store.staged(*uploads) as paths:
        result = await wizard_runner.run([flag, *leading, *paths])
    return _relay(result)


def _attachment(content: bytes, filename: str) -> Response:
    quoted = quote(filename)
    if quoted != filename:
        disposition = f"attachment; filename*=utf-8''{quoted}"
    else:
        disposition = f'attachment; filename="{filename}"'
    return Response(
        content=content,
        media_type="application/octet-stream",
        headers={"Content-Disposition": disposition},
    )


async def _request_file(kind: str, license_id: str, extra: list[str] | None = None) -> Response:
    """Have the wizard write a request file and hand it back as a download.

    Falls back to the JSON result when the wizard fails or writes nothing.
    The file is read into memory and the temporary copy deleted before the
    response goes out, so a dropped client leaves nothing behind.
    """
    tmp = file_store.request_path(kind)
    download_name = f"{kind}_request_{license_id}.req"
    try:
        result = await wizard_runner.run([f"--{kind}-request", license_id, tmp, *(extra or [])])
        if result.success and tmp.is_file():
            content = await run_in_threadpool(tmp.read_bytes)
            log.info("licenses.request_file", kind=kind, license_id=license_id, size=len(content))
            return _attachment(content, download_name)
        return _relay(result, file_path=str(tmp), file_name=download_name)
    finally:
        file_store.discard(tmp)



# ── listing ───────────────────────────────────────────────────────────────


@router.get("", **_relay_opts)
async def list_licenses() -> CommandResponse:
    """List all licenses known to the wizard."""
    return _relay(await wizard_runner.run(["--list"]))


# ── activation ────────────────────────────────────────────────────────────


@router.post("/activate-request/{license_id}", **_relay_opts)
async def activate_request(license_id: str, req: Optional[HostRequest] = None) -> Response:
    """Generate an initial activation request file."""
    host = req.host if req else None
    return await _request_file("activate", license_id, _host_args(host))


@router.post("/activate", **_relay_opts)
async def activate(req: Optional[ActivateRequest] = None) -> CommandResponse:
    """Activate a license online by serial number."""
    if req is None or not req.serial_number:
        raise MissingFieldError("serial_number is required")
    result = await wizard_runner.run(["--activate", req.serial_number, *_host_args(req.host)])
    return _relay(result)


@router.post("/activate-offline", **_relay_opts)
async def activate_offline(
    license_file: Optional[UploadFile] = File(None),
) -> CommandResponse:
    """Activate a license from an uploaded license file."""
    if not _has_file(license_file):
        raise MissingFieldError("license_file is required")
    return await _run_with_uploads("--activate-offline", license_file)


@router.post("/activate-response", **_relay_opts)
async def activate_response(
    serial_number: Optional[str] = Form(None),
    request_file: Optional[UploadFile] = File(None),
    license_file: Optional[UploadFile] = File(None),
) -> CommandResponse:
    """Submit the activation response for a previously generated request."""
    if not serial_number or not _has_file(request_file) or not _has_file(license_file):
        raise MissingFieldError(
            "serial_number, request_file, and license_file are required",
        )
    return await _run_with_uploads(
        "--activate-response", request_file, license_file, leading=(serial_number,),
    )


# ── update ────────────────────────────────────────────────────────────────


@router.post("/update-response", **_relay_opts)
async def update_response(
    license_file: Optional[UploadFile] = File(None),
) -> CommandResponse:
    """Apply an uploaded update response."""
    if not _has_file(license_file):
        raise MissingFieldError("license_file is required")
    return await _run_with_uploads("--update-response", license_file)


@router.post("/{license_id}/update-request", **_relay_opts)
async def update_request(license_id: str) -> Response:
    """Generate an update request file for *license_id*."""
    return await _request_file("update", license_id)


@router.post("/{license_id}/update", **_relay_opts)
async def update(license_id: str, req: Optional[HostRequest] = None) -> CommandResponse:
    """Update a license online."""
    host = req.host if req else None
    return _relay(await wizard_runner.run(["--update", license_id, *_host_args(host)]))


# ── return ────────────────────────────────────────────────────────────────


@router.post("/return-response", **_relay_opts)
async def return_response(
    license_file: Optional[UploadFile] = File(None),
) -> CommandResponse:
    """Apply an uploaded return response."""
    if not _has_file(license_file):
        raise MissingFieldError("license_file is required")
    return await _run_with_uploads("--return-response", license_file)


@router.post("/{license_id}/return-request", **_relay_opts)
async def return_request(license_id: str) -> Response:
    """Generate a return request file for *license_id*."""
    return await _request_file("return", license_id)


@router.post("/{license_id}/return", **_relay_opts)
async def return_license(license_id: str, req: Optional[HostRequest] = None) -> CommandResponse:
    """Return a license online."""
    host = req.host if req else None
    return _relay(await wizard_runner.run(["--return", license_id, *_host_args(host)]))


# ── delete ────────────────────────────────────────────────────────────────


@router.delete("/{license_id}", **_relay_opts)
async def delete_license(license_id: str) -> CommandResponse:
    """Delete a license from the local store."""
    return _relay(await wizard_runner.run(["--delete", license_id]))
