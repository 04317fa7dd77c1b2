"""Subprocess helpers.

Every host-side and in-container command goes through :func:`run_command` so
tests can replace a single function instead of patching :mod:`subprocess`.
"""

from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

import structlog

from .errors import Cancelled, CommandFailed

log = structlog.get_logger()


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a finished subprocess."""

    args: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""


def lookup_executable(name: str) -> str | None:
    """Return the absolute path of *name* on ``PATH`` or ``None``."""
    return shutil.which(name)


def run_command(
    args: Sequence[str],
    *,
    cwd: Path | str | None = None,
    timeout: float | None = None,
    capture: bool = True,
) -> CommandResult:
    """Run *args* and wait for it to finish.

    Args:
        args: Program followed by its arguments.
        cwd: Optional working directory on the host.
        timeout: Seconds before the process is killed.
        capture: Capture stdout/stderr as text. Undecodable bytes are
            replaced rather than raising. When ``False`` the child
            inherits the parent's streams, which is what container builds
            use so progress stays visible.

    Returns:
        :class:`CommandResult` for a zero exit status.

    Raises:
        CommandFailed: Non-zero exit status or the program could not be run.
        Cancelled: The timeout expired or the call was interrupted.
    """
    argv = [str(a) for a in args]
    log.debug("process.run", args=argv, cwd=str(cwd) if cwd else None)
    try:
        proc = subprocess.run(
            argv,
            cwd=cwd,
            timeout=timeout,
            capture_output=capture,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
        )
    except subprocess.TimeoutExpired as exc:
        log.error("process.timeout", args=argv, timeout=timeout)
        raise Cancelled(f"{argv[0]} timed out after {timeout}s") from exc
    except KeyboardInterrupt as exc:
        raise Cancelled(f"{argv[0]} interrupted") from exc
    except OSError as exc:
        log.error("process.spawn_failed", args=argv, error=str(exc))
        raise CommandFailed(argv, None, stderr=str(exc)) from exc

    stdout = proc.stdout or ""
    stderr = proc.stderr or ""
    if proc.returncode != 0:
        log.error("process.failed", args=argv, returncode=proc.returncode)
        raise CommandFailed(argv, proc.returncode, stdout, stderr)
    return CommandResult(tuple(argv), proc.returncode, stdout, stderr)
