"""Application settings loaded from environment variables."""

from __future__ import annotations

import sys
import tempfile

from pydantic import Field
from pydantic_settings import BaseSettings

WINDOWS_WIZARD_PATH = (
    "C:\\Program Files (x86)\\Guardant\\Software Licensing Kit"
    "\\redistribute\\license_activation\\license_wizard.exe"
)
POSIX_WIZARD_PATH = "/opt/guardant/license_wizard"


def default_wizard_path() -> str:
    """Where the License Wizard installs itself on this platform."""
    if sys.platform == "win32":
        return WINDOWS_WIZARD_PATH
    return POSIX_WIZARD_PATH


class Settings(BaseSettings):
    """All configuration is driven by environment variables.

    Built once at startup and handed to the services that need it; the
    instance is frozen so nothing rereads or mutates it per request.
    """

    # External tool
    license_wizard_path: str = Field(default_factory=default_wizard_path)
    command_timeout_seconds: float = 30.0

    # Non-zero exit codes become HTTP 500 instead of a 200 with success=false
    strict_exit_codes: bool = False

    # File staging
    upload_dir: str = "uploads"
    request_dir: str = Field(default_factory=tempfile.gettempdir)

    # API key (blank disables the check)
    license_api_key: str = ""

    # HTTP server
    host: str = "0.0.0.0"
    port: int = 3000

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "frozen": True,
    }


# Singleton – import this from anywhere
settings = Settings()
