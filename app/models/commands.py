"""Command-related data structures."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class CommandResult(BaseModel):
    """Buffered outcome of one License Wizard invocation."""

    success: bool
    exit_code: Optional[int] = None
    stdout: str = ""
    stderr: str = ""
    elapsed_time: float = 0.0

    model_config = {"frozen": True}
