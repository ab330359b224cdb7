"""License Wizard command runner.

Spawns the wizard once per call in console mode, buffers its output and
enforces a wall-clock timeout. Runs on the event loop through
``asyncio.create_subprocess_exec`` so concurrent requests never block each
other while a child process is alive.
"""

from __future__ import annotations

import asyncio
import os
import signal
import time
from typing import Sequence

from app.config import Settings, settings
from app.errors import CommandLaunchError, CommandTimeoutError
from app.models.commands import CommandResult
from app.utils.logging import get_logger

log = get_logger(__name__)

CONSOLE_FLAG = "--console"

# Upper bound on reaping a killed process
REAP_TIMEOUT_SECONDS = 5.0

# Own process group on POSIX so a timeout kill also reaches helpers the wizard forks
_SPAWN_OPTS = {"start_new_session": True} if os.name == "posix" else {}


class LicenseWizardRunner:
    """Runs the external License Wizard executable."""

    def __init__(self, cfg: Settings | None = None) -> None:
        self._cfg = cfg or settings

    @property
    def path(self) -> str:
        return self._cfg.license_wizard_path

    @property
    def available(self) -> bool:
        """True if the configured executable exists and may be executed."""
        return os.path.isfile(self.path) and os.access(self.path, os.X_OK)

    def build_argv(self, args: Sequence[object]) -> list[str]:
        return [self.path, CONSOLE_FLAG, *(str(a) for a in args)]

    async def run(self, args: Sequence[object]) -> CommandResult:
        """Invoke the wizard with *args* and wait for it to finish.

        A non-zero exit is returned as an unsuccessful result. Only a launch
        failure or a timeout raises.
        """
        argv = self.build_argv(args)
        timeout = self._cfg.command_timeout_seconds
        log.debug("wizard.exec", argv=argv, timeout=timeout)

        start = time.monotonic()
        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                **_SPAWN_OPTS,
            )
        except OSError as exc:
            message = exc.strerror or str(exc)
            log.error("wizard.launch_failed", path=self.path, error=message)
            raise CommandLaunchError(f"{message}: {self.path}") from exc

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout)
        except asyncio.TimeoutError:
            await _kill(proc)
            log.warning(
                "wizard.timeout",
                args=argv[2:],
                pid=proc.pid,
                timeout=timeout,
            )
            raise CommandTimeoutError(command_args=argv[2:]) from None
        except asyncio.CancelledError:
            await _kill(proc)
            raise

        elapsed = time.monotonic() - start
        rc = proc.returncode
        log.info("wizard.done", args=argv[2:], rc=rc, elapsed=round(elapsed, 3))
        return CommandResult(
            success=rc == 0,
            exit_code=rc,
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
            elapsed_time=elapsed,
        )


async def _kill(proc: asyncio.subprocess.Process) -> None:
    """Force-kill *proc* and everything it spawned, then reap it.

    On POSIX the wizard leads its own process group, so the whole group is
    killed; a forked helper would otherwise hold the output pipes open.
    """
    try:
        if os.name == "posix":
            # The group id stays reserved while any member lives, even once the
            # wizard itself has been reaped
            os.killpg(proc.pid, signal.SIGKILL)
        elif proc.returncode is None:
            proc.kill()
    except (ProcessLookupError, PermissionError):
        pass
    try:
        await asyncio.wait_for(proc.wait(), REAP_TIMEOUT_SECONDS)
    except asyncio.TimeoutError:
        log.error("wizard.reap_timeout", pid=proc.pid)


# ── Singleton instance ────────────────────────────────────────────────────

wizard_runner = LicenseWizardRunner()
