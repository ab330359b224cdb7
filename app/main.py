"""FastAPI application entry-point."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app import __version__
from app.config import settings
from app.errors import LicenseWizardError, handle_exception
from app.routers import health, licenses
from app.services.files import file_store
from app.utils.logging import get_logger, setup_logging

log = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown hooks."""
    setup_logging()
    file_store.ensure_dirs()
    log.info(
        "service.start",
        port=settings.port,
        wizard_path=settings.license_wizard_path,
        timeout=settings.command_timeout_seconds,
    )
    yield
    log.info("service.stop")


app = FastAPI(
    title="Guardant License Wizard API",
    description="REST interface to the Guardant License Wizard console tool",
    version=__version__,
    lifespan=lifespan,
)

app.add_exception_handler(LicenseWizardError, handle_exception)
app.add_exception_handler(RequestValidationError, handle_exception)
app.add_exception_handler(StarletteHTTPException, handle_exception)
app.add_exception_handler(Exception, handle_exception)

app.include_router(health.router)
app.include_router(licenses.router)


def run() -> None:
    """Serve the API with uvicorn using the configured host and port."""
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)
