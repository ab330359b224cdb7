"""Service metadata and health-check endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app import __version__
from app.auth import require_api_key
from app.models.responses import HealthResponse, ServiceInfo, WizardHealthResponse
from app.services.wizard_runner import wizard_runner

router = APIRouter(tags=["health"])


@router.get("/", response_model=ServiceInfo)
async def service_info() -> ServiceInfo:
    return ServiceInfo(
        message="Guardant License Wizard API",
        version=__version__,
        docs="/docs",
    )


@router.get("/health", response_model=HealthResponse)
async def service_health() -> HealthResponse:
    """Basic liveness probe (no auth required)."""
    return HealthResponse(status="ok", version=__version__)


@router.get(
    "/health/wizard",
    response_model=WizardHealthResponse,
    dependencies=[Depends(require_api_key)],
)
async def wizard_health() -> WizardHealthResponse:
    """Report whether the configured wizard executable can be launched."""
    return WizardHealthResponse(path=wizard_runner.path, available=wizard_runner.available)
