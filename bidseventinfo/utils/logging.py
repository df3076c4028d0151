"""
Package-level logging configuration.

* Rich console output (colourised, nicely formatted).
* Rotating log file inside ``$BIDSEVENTINFO_LOG_DIR`` when set, otherwise
  ``<dataset>/code/logs`` or the package-local ``logs/`` folder.
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
def _rotating_file_handler(dataset_root: Path | None, level: int) -> logging.Handler:
    """Return a rotating file handler.

    Args:
        dataset_root: Dataset root; determines the log directory when
            ``BIDSEVENTINFO_LOG_DIR`` is not set.
        level: Log-level for the handler.

    Returns:
        Handler writing ``bidseventinfo.log`` under the resolved directory.
    """
    env_dir = os.environ.get("BIDSEVENTINFO_LOG_DIR")

    if env_dir:
        logdir = Path(env_dir).expanduser()
    elif dataset_root is not None:
        logdir = dataset_root / "code" / "logs"
    else:
        logdir = Path(__file__).resolve().parents[1] / "logs"
    logdir.mkdir(parents=True, exist_ok=True)

    handler = logging.handlers.RotatingFileHandler(
        filename=logdir / "bidseventinfo.log",
        maxBytes=1_000_000,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    )
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
    # Flush the buffer on interpreter exit.
    atexit.register(handler.close)
    return handler


# --------------------------------------------------------------------------- #
# Public API – main entry-point                                               #
# --------------------------------------------------------------------------- #
def setup_logging(
    *,
    dataset_root: Path | None = None,
    verbose: bool = False,
    debug: bool = False,
    extra_text_log: Optional[Path] = None,
) -> None:
    """Configure rich console logging and file mirrors.

    Args:
        dataset_root: Dataset root used to determine the log location.
        verbose: Emit INFO-level messages to the console.
        debug: Emit DEBUG-level messages plus rich tracebacks with locals.
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
            tracebacks_show_locals=debug,
            markup=False,
        ),
        _rotating_file_handler(dataset_root, file_lvl),
    ]

    txt_handler = _plain_text_file_handler(extra_text_log, console_lvl)
    if txt_handler:
        handlers.append(txt_handler)

    # Root logger stays at DEBUG; handlers filter.
    logging.basicConfig(
        level=logging.DEBUG,
        handlers=handlers,
        format="%(message)s",
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            (
                StructlogConsoleRenderer()
                if verbose or debug
                else structlog.processors.JSONRenderer()
            ),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(console_lvl),
        logger_factory=LoggerFactory(),
    )
