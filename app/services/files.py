"""Staging for uploaded license files and wizard-generated request files.

Nothing written here is meant to outlive the request that created it.
"""

from __future__ import annotations

import os
import shutil
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional
from uuid import uuid4

from fastapi import UploadFile
from starlette.concurrency import run_in_threadpool

from app.config import Settings, settings
from app.utils.logging import get_logger

log = get_logger(__name__)


class LicenseFileStore:
    """Owns the upload and request-file directories."""

    def __init__(self, cfg: Settings | None = None) -> None:
        self._cfg = cfg or settings
        self.upload_dir = Path(self._cfg.upload_dir)
        self.request_dir = Path(self._cfg.request_dir)

    def ensure_dirs(self) -> None:
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        self.request_dir.mkdir(parents=True, exist_ok=True)

    # ── uploads ───────────────────────────────────────────────────────

    async def stage(self, upload: UploadFile) -> Path:
        """Copy *upload* into the upload directory under a random name."""
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        path = self.upload_dir / uuid4().hex
        await upload.seek(0)
        await run_in_threadpool(_copy_to, upload, path)
        log.debug("files.staged", filename=upload.filename, path=str(path))
        return path

    @asynccontextmanager
    async def staged(self, *uploads: UploadFile) -> AsyncIterator[list[Path]]:
        """Stage every upload for the duration of the block.

        The staged copies are removed on every exit path, including when
        staging itself fails halfway through.
        """
        paths: list[Path] = []
        try:
            for upload in uploads:
                paths.append(await self.stage(upload))
            yield paths
        finally:
            for path in paths:
                self.discard(path)

    # ── generated request files ───────────────────────────────────────

    def request_path(self, kind: str) -> Path:
        """Fresh path for a request file the wizard will write."""
        self.request_dir.mkdir(parents=True, exist_ok=True)
        return self.request_dir / f"{kind}_request_{uuid4().hex}.req"

    # ── cleanup ───────────────────────────────────────────────────────

    def discard(self, path: Optional[os.PathLike | str]) -> None:
        """Delete *path* if it exists. Failures are logged, never raised."""
        if path is None:
            return
        try:
            os.unlink(path)
        except FileNotFoundError:
            pass
        except OSError as exc:
            log.debug("files.discard_failed", path=str(path), error=str(exc))


def _copy_to(upload: UploadFile, path: Path) -> None:
    with open(path, "wb") as fh:
        shutil.copyfileobj(upload.file, fh)


# ── Singleton instance ────────────────────────────────────────────────────

file_store = LicenseFileStore()
