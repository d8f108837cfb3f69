"""Utility functions for Relman logging and release tracking."""

import logging
import os
import sys
import uuid
from logging import Handler
from logging.handlers import RotatingFileHandler
from typing import Optional

from relman.core.paths import RelmanPaths


def make_release_id() -> str:
    """Generate a short 8-character UUID for release run tracking."""
    return str(uuid.uuid4())[:8]


def _get_log_level() -> int:
    """Get log level from RELMAN_LOG_LEVEL environment variable.

    Supports: DEBUG, INFO, WARNING, ERROR (case-insensitive).
    Defaults to INFO if not set or invalid.

    Returns:
        Logging level constant
    """
    level_str = os.environ.get("RELMAN_LOG_LEVEL", "INFO").upper()
    level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
    }
    return level_map.get(level_str, logging.INFO)


def setup_logger(
    release_id: str,
    command: str = "prepare",
    console_level: Optional[str] = None,
    use_rotating: bool = False,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
) -> logging.Logger:
    """Set up the ``relman`` logger to write to the console and a run log file.

    The console level follows RELMAN_LOG_LEVEL (default INFO); the file
    always captures DEBUG. Records from every ``relman.*`` module logger
    propagate to these handlers.

    Args:
        release_id: ID of this release run
        command: CLI command being run (prepare, perform, clean)
        console_level: Console level name; defaults to RELMAN_LOG_LEVEL
        use_rotating: If True, use RotatingFileHandler instead of FileHandler
        max_bytes: Maximum file size before rotation (only if use_rotating=True)
        backup_count: Number of backup files to keep (only if use_rotating=True)

    Returns:
        Configured logger instance
    """
    RelmanPaths.ensure_directories()

    # Log file: <data dir>/logs/<release_id>/<command>/execution.log
    log_dir = RelmanPaths.get_logs_dir() / release_id / command
    log_dir.mkdir(parents=True, exist_ok=True, mode=0o755)
    log_file = log_dir / "execution.log"

    logger = logging.getLogger("relman")
    logger.setLevel(logging.DEBUG)

    # Clear any existing handlers to avoid duplicates
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()

    file_handler: Handler
    if use_rotating:
        file_handler = RotatingFileHandler(
            log_file, maxBytes=max_bytes, backupCount=backup_count, mode="a"
        )
    else:
        file_handler = logging.FileHandler(log_file, mode="a")

    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(levelname)s - %(name)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
        )
    )
    logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stdout)
    if console_level:
        console_handler.setLevel(getattr(logging, console_level.upper(), logging.INFO))
    else:
        console_handler.setLevel(_get_log_level())
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(console_handler)

    logger.debug("Relman logger initialized - ID: %s, command: %s", release_id, command)
    logger.debug("Log file: %s", log_file)

    return logger


def log_release_event(
    logger: logging.Logger, phase: str, status: str, details: Optional[str] = None
) -> None:
    """Log a structured release event.

    Args:
        logger: Logger instance to use
        phase: Release phase or operation name (e.g., "scm-tag", "perform")
        status: Event status (e.g., "started", "completed", "failed")
        details: Optional additional details
    """
    message = f"[{phase}] {status}"
    if details:
        message += f" - {details}"

    if status == "failed":
        logger.error(message)
    elif status in ("started", "completed", "skipped"):
        logger.info(message)
    else:
        logger.debug(message)
