"""Running external commands with bounded timeouts.

Every external call made by voom goes through ``run_command`` so failures
surface the same way: non-zero exit raises a ``CollaboratorCommandFailure``
subclass carrying the arguments and captured output, and an expired timeout
raises ``CommandTimeoutError`` instead of hanging.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

from voom.exceptions import CollaboratorCommandFailure, CommandTimeoutError, GitCommandError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT: float = 300.0


@dataclass(frozen=True)
class CommandResult:
    """Captured outcome of a finished command."""

    args: tuple[str, ...]
    exit_code: int
    stdout: str
    stderr: str

    @property
    def lines(self) -> list[str]:
        return [line for line in self.stdout.splitlines() if line]


def run_command(
    args: list[str],
    *,
    cwd: Path | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    check: bool = True,
    error_cls: type[CollaboratorCommandFailure] = GitCommandError,
) -> CommandResult:
    """Run ``args`` and capture its text output.

    Args:
        args: Program and arguments.
        cwd: Working directory.
        timeout: Seconds before the process is killed.
        check: Raise on non-zero exit when True.
        error_cls: Exception raised on non-zero exit.

    Raises:
        CommandTimeoutError: When ``timeout`` expires.
        CollaboratorCommandFailure: (``error_cls``) on non-zero exit with
            ``check`` set, or when the program cannot be started.
    """
    logger.debug("Running %s", " ".join(args))
    try:
        proc = subprocess.run(
            args,
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as exc:
        raise CommandTimeoutError(
            f"{args[0]} timed out after {timeout:g}s: {' '.join(args[1:])}",
            args=list(args), timeout=timeout,
        ) from exc
    except OSError as exc:
        raise error_cls(
            f"Cannot run {args[0]}: {exc}", args=list(args), exit_code=None,
            stdout="", stderr=str(exc),
        ) from exc

    result = CommandResult(
        args=tuple(args), exit_code=proc.returncode,
        stdout=proc.stdout or "", stderr=proc.stderr or "",
    )
    if check and result.exit_code != 0:
        raise error_cls(
            f"{args[0]} exited with {result.exit_code}: {' '.join(args[1:])}",
            args=list(args), exit_code=result.exit_code,
            stdout=result.stdout, stderr=result.stderr.strip(),
        )
    return result
