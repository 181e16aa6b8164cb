"""External-process runner used by the static-analysis collaborators.

:class:`CommandRunner` runs a shell command asynchronously under a deadline
and captures its output.  A non-zero exit status is returned, not raised:
linters and type checkers exit non-zero precisely when they have something
to report.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

from quality_gates.domain.exceptions import CommandError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    """Captured output of one external process."""

    command: str
    returncode: int
    stdout: str
    stderr: str

    @property
    def output(self) -> str:
        """Combined stdout and stderr."""
        if self.stderr and self.stdout:
            return f"{self.stdout}\n{self.stderr}"
        return self.stdout or self.stderr


class CommandRunner:
    """Run shell commands from a working directory with a per-command timeout.

    Parameters
    ----------
    cwd:
        Working directory for every command.  Defaults to the process cwd.
    timeout:
        Seconds before a command is killed and :class:`CommandError` raised.
    """

    def __init__(self, cwd: str | Path | None = None, timeout: float = 120.0) -> None:
        self._cwd = str(cwd) if cwd is not None else None
        self._timeout = timeout

    async def run(self, command: str) -> CommandResult:
        """Run *command* and return its captured output.

        Raises
        ------
        CommandError
            If the process cannot be started or exceeds the timeout.
        """
        logger.debug("CommandRunner: running %r (cwd=%s)", command, self._cwd)
        try:
            proc = await asyncio.create_subprocess_shell(
                command,
                cwd=self._cwd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise CommandError(f"could not start: {exc}", command=command) from exc

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), self._timeout)
        except asyncio.TimeoutError as exc:
            proc.kill()
            await proc.wait()
            raise CommandError(
                f"timed out after {self._timeout:.0f}s", command=command
            ) from exc

        result = CommandResult(
            command=command,
            returncode=proc.returncode if proc.returncode is not None else -1,
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
        )
        logger.debug("CommandRunner: %r exited with %d", command, result.returncode)
        return result
