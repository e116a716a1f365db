"""
Unified output system using Loguru.
Routes user-facing messages to both the log file and the terminal.
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from .config import get_data_dir

# Whether log() echoes to the terminal (set by setup_loguru)
_console_output = True


def get_log_file_path() -> Path:
    """Get the default path to the log file."""
    return get_data_dir() / "camelot-sort.log"


def setup_loguru(
    log_file: Optional[Path] = None,
    level: str = "INFO",
    console_output: bool = True,
    verbose: bool = False,
) -> Path:
    """
    Configure loguru with a rotating file sink.

    Args:
        log_file: Path to log file (default: ~/.local/share/camelot-sort/camelot-sort.log)
        level: Minimum level for file logging (DEBUG, INFO, WARNING, ERROR)
        console_output: Echo log() messages to stdout
        verbose: Also stream loguru diagnostics to stderr at DEBUG level

    Returns:
        The log file path in use
    """
    global _console_output

    log_file = log_file or get_log_file_path()
    log_file.parent.mkdir(parents=True, exist_ok=True)

    # Remove default handler
    logger.remove()

    logger.add(
        log_file,
        rotation="10 MB",
        retention=5,  # Keep 5 backup files
        level=level.upper(),
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} | {message}",
        encoding="utf-8",
        enqueue=False,  # Synchronous writes (thread-safe but blocking)
    )

    if verbose:
        logger.add(sys.stderr, level="DEBUG", format="{level}: {message}")

    _console_output = console_output
    logger.info(f"Loguru initialized: {log_file} (level={level})")
    return log_file


def log(message: str, level: str = "info") -> None:
    """
    Unified logging: writes to the log file AND prints for the user.

    Use this instead of print() for user-facing messages that should also be logged.

    Args:
        message: User-facing message (can include emojis)
        level: Log level (debug, info, warning, error)
    """
    log_func = getattr(logger, level)
    log_func(message)

    if _console_output and level != "debug":
        stream = sys.stderr if level in ("warning", "error") else sys.stdout
        print(message, file=stream)
