"""
Logging Setup.

Routes every module logger to a size-rotated file and, optionally, to the
console. Directory, rotation size and backup count come from ``AppConfig``;
the defaults here only apply when a caller passes nothing.
"""

import logging
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional, Union

from trashmap.app.constants import (
    DEFAULT_LOG_BACKUPS,
    DEFAULT_LOG_DIR,
    DEFAULT_LOG_MAX_MB,
    LOG_FILENAME,
)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that flood DEBUG output
NOISY_LOGGERS = ("urllib3", "PIL")


class SafeRotatingFileHandler(RotatingFileHandler):
    """
    Rotating file handler that survives a refused rename on Windows.

    When another process still holds the log open, rollover raises
    PermissionError there; the handler keeps appending to the current file and
    tries again on the next record past the size limit.
    """

    def doRollover(self) -> None:
        try:
            super().doRollover()
        except PermissionError:
            if sys.platform != "win32":
                raise


def _open_log_file(
    log_dir: Path, max_bytes: int, backup_count: int
) -> Optional[SafeRotatingFileHandler]:
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        return SafeRotatingFileHandler(
            log_dir / LOG_FILENAME,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
    except OSError as e:
        sys.stderr.write(f"File logging disabled, cannot open {log_dir}: {e}\n")
        return None


def setup_logging(
    debug_mode: bool = False,
    log_to_console: bool = True,
    log_dir: Union[str, Path] = DEFAULT_LOG_DIR,
    max_bytes: int = DEFAULT_LOG_MAX_MB * 1024 * 1024,
    backup_count: int = DEFAULT_LOG_BACKUPS,
) -> Optional[Path]:
    """
    Installs the application's handlers on the root logger.

    Calling again replaces the handlers from the previous call; the old log
    file is closed so it can be rotated or deleted.

    Args:
        debug_mode: DEBUG level when True, INFO otherwise.
        log_to_console: Also log to stderr.
        log_dir: Directory of the log file, created if missing.
        max_bytes: Size at which the log file rotates.
        backup_count: Number of rotated files to keep.

    Returns:
        Optional[Path]: The log file, or None if it could not be opened.
    """
    level = logging.DEBUG if debug_mode else logging.INFO
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers: List[logging.Handler] = []
    file_handler = _open_log_file(Path(log_dir), max_bytes, backup_count)
    if file_handler is not None:
        handlers.append(file_handler)
    if log_to_console:
        handlers.append(logging.StreamHandler())

    root = logging.getLogger()
    for old in list(root.handlers):
        root.removeHandler(old)
        if isinstance(old, SafeRotatingFileHandler):
            old.close()
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(level)
        root.addHandler(handler)
    root.setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    log_path = Path(file_handler.baseFilename) if file_handler else None
    logging.getLogger(__name__).info(
        f"TrashMap session started {datetime.now():%Y-%m-%d %H:%M:%S} "
        f"(level {logging.getLevelName(level)}, log file {log_path})"
    )
    return log_path


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def shutdown_logging() -> None:
    """Flushes and closes every handler, releasing the log file."""
    logging.shutdown()
