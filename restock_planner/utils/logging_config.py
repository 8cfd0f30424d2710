"""
Logging setup for applications embedding restock_planner.

Library modules only call logging.getLogger(__name__); handlers are
installed once, by the entry point (see restock_planner.cli), on the
"restock_planner" logger so every package module is covered:

- Rotating daily file in <planner home>/logs: warnings and errors
- Console: critical only, or progress messages with --verbose
"""
import logging
import logging.handlers
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

APP_LOGGER_NAME = "restock_planner"
LOG_FILE_PATTERN = "{app_name}_{day}.log"
LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 3


def _default_log_dir() -> Path:
    from ..config import get_home_dir
    return get_home_dir() / "logs"


def _file_handler(log_path: Path, app_name: str, level: int) -> logging.Handler:
    log_file = log_path / LOG_FILE_PATTERN.format(app_name=app_name, day=datetime.now().strftime("%Y%m%d"))
    handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    return handler


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setLevel(level)
    if level >= logging.CRITICAL:
        handler.setFormatter(logging.Formatter("CRITICAL: %(message)s"))
    else:
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    return handler


def setup_logging(
    log_dir: Optional[Union[str, Path]] = None,
    app_name: str = APP_LOGGER_NAME,
    file_level: int = logging.WARNING,
    console_level: int = logging.CRITICAL,
) -> logging.Logger:
    """
    Install file and console handlers on the planner logger.

    Calling it again is a no-op: the first configuration wins.

    Args:
        log_dir: Directory for log files (created if missing).
                 Defaults to <planner home>/logs, see config.get_home_dir()
        app_name: Logger name; the default covers every package module
        file_level: Minimum level written to the log file
        console_level: Minimum level echoed to stderr

    Returns:
        Configured logger instance
    """
    log_path = Path(log_dir) if log_dir is not None else _default_log_dir()
    log_path.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(app_name)
    logger.setLevel(logging.DEBUG)

    if logger.handlers:
        return logger

    logger.addHandler(_file_handler(log_path, app_name, file_level))
    logger.addHandler(_console_handler(console_level))
    return logger


def get_logger(name: str = APP_LOGGER_NAME) -> logging.Logger:
    """Get a logger under the planner namespace."""
    return logging.getLogger(name)
