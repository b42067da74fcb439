"""
Logging setup shared by the CLI and anyone embedding the interpreter.

Console output goes through rich's RichHandler on stderr so it never mixes
with the outbox on stdout. A log file, when asked for, captures everything.

Log files: ``<log_dir>/<name>_YYYYMMDD_HHMMSS.log`` or the explicit path.
"""

from __future__ import annotations
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from .config import LOG_NAME

__all__ = ['setup_logging', 'verbosity_to_level']

FILE_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(funcName)s:%(lineno)d | %(message)s"


def verbosity_to_level(verbose: int) -> int:
    """-v count → console level: 0 WARNING, 1 INFO, 2+ DEBUG."""
    if verbose <= 0:
        return logging.WARNING
    if verbose == 1:
        return logging.INFO
    return logging.DEBUG


def setup_logging(
    name: str = LOG_NAME,
    console_level: int = logging.WARNING,
    log_dir: Optional[Path] = None,
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """Configure and return the package logger.

    Handlers attach to `name`; module loggers such as
    `hrm_interpreter.parser` propagate up to it. Calling it again replaces
    the handlers from the previous call.
    """
    logger = logging.getLogger(name)
    # Drop handlers from an earlier call.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.DEBUG)

    # ── File handler: captures everything (DEBUG+) ──
    if log_file is None and log_dir is not None:
        ts = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = Path(log_dir) / f"{name}_{ts}.log"
    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_file), encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(fh)

    # ── Console handler: stderr, WARNING+ unless -v ──
    ch = RichHandler(
        console=Console(stderr=True),
        level=console_level,
        show_time=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    logger.addHandler(ch)

    logger.debug("Logger initialized: %s (console level %s, file %s)",
                 name, logging.getLevelName(console_level), log_file)
    return logger
