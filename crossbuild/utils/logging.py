"""
Package-level logging configuration.

* Rich console output (colourised, nicely formatted).
* Rotating **JSON** log file inside ``<project>/crossbuild/logs/`` when a
  project directory is known (or ``$CROSSBUILD_LOG_DIR`` when set).
* Optional plain-text mirror controlled via ``--save-logfile`` on the CLI.

The public helper :func:`setup_logging` wires everything and should be the
sole entry-point used by sub-commands.
"""

from __future__ import annotations

import atexit
import logging
import logging.handlers
import os
from pathlib import Path
from typing import Optional

import structlog
from rich.logging import RichHandler
from structlog.dev import ConsoleRenderer as StructlogConsoleRenderer
from structlog.stdlib import LoggerFactory

__all__ = ["setup_logging"]


# --------------------------------------------------------------------------- #
# Internal helpers – file-based handlers                                      #
# --------------------------------------------------------------------------- #
def _json_file_handler(log_root: Path | None, level: int) -> logging.Handler:
    """Return a rotating *JSON* file handler.

    Args:
        log_root: Project directory; determines the log directory when
            ``CROSSBUILD_LOG_DIR`` is not set.
        level: Log-level for the handler.

    Returns:
        Handler writing ``crossbuild.log`` under ``$CROSSBUILD_LOG_DIR``,
        ``<log_root>/crossbuild/logs`` or ``~/.cache/crossbuild/logs`` when
        neither is available.
    """
    env_dir = os.environ.get("CROSSBUILD_LOG_DIR")

    if env_dir:
        logdir = Path(env_dir).expanduser()
    elif log_root is not None:
        logdir = log_root / "crossbuild" / "logs"
    else:
        logdir = Path.home() / ".cache" / "crossbuild" / "logs"
    logdir.mkdir(parents=True, exist_ok=True)

    handler = logging.handlers.RotatingFileHandler(
        filename=logdir / "crossbuild.log",
        maxBytes=5_000_000,  # ~5 MB before rollover
        backupCount=3,
        encoding="utf-8",
    )
    handler.setLevel(level)
    return handler


def _plain_text_file_handler(
    path: Optional[Path], level: int
) -> logging.Handler | None:
    """Return a plain-text file handler or *None* when *path* is *None*."""
    if path is None:
        return None

    path = path.expanduser().resolve()
    path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(path, encoding="utf-8", mode="a")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    # Ensure the buffer is flushed on interpreter exit.
    atexit.register(handler.close)
    return handler


# --------------------------------------------------------------------------- #
# Public API – main entry-point                                               #
# --------------------------------------------------------------------------- #
def setup_logging(
    *,
    log_root: Path | None = None,
    verbose: bool = False,
    debug: bool = False,
    extra_text_log: Optional[Path] = None,
) -> None:
    """Configure rich console logging and optional file mirrors.

    Args:
        log_root: Project directory used to determine the JSON log location.
        verbose: Emit INFO-level messages to the console.
        debug: Emit DEBUG-level messages plus rich tracebacks.
        extra_text_log: Optional path for a plain-text mirror of console output.
    """
    console_lvl = (
        logging.DEBUG if debug else logging.INFO if verbose else logging.WARNING
    )
    file_lvl = logging.DEBUG if debug else logging.INFO

    handlers: list[logging.Handler] = [
        RichHandler(
            level=console_lvl,
            rich_tracebacks=True,
            tracebacks_show_locals=False,
            markup=False,
        ),
        _json_file_handler(log_root, file_lvl),
    ]

    txt_handler = _plain_text_file_handler(extra_text_log, console_lvl)
    if txt_handler:
        handlers.append(txt_handler)

    # The CLI may be invoked more than once per interpreter (tests), so the
    # root configuration is replaced rather than appended to.
    logging.basicConfig(
        level=logging.DEBUG,
        handlers=handlers,
        format="%(message)s",
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            (
                StructlogConsoleRenderer(colors=False)
                if verbose or debug
                else structlog.processors.JSONRenderer()
            ),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(min(console_lvl, file_lvl)),
        logger_factory=LoggerFactory(),
        cache_logger_on_first_use=False,
    )
