"""
Logging setup for Agency Pulse.

Every module logger writes through the same two handlers: stdout, and a
log file that rolls over at midnight and keeps LOG_RETENTION_DAYS files.
Timestamps are rendered in agency time (Central) so log lines line up with
entry dates and the 6 PM lock.

Environment:
    LOG_LEVEL            default INFO
    LOG_TO_FILE          "false" disables the file handler
    LOG_DIR              default <project>/logs
    LOG_RETENTION_DAYS   default 14
    LOG_TIMEZONE         default America/Chicago

Usage:
    from scripts.lib.logger import setup_logger
    logger = setup_logger(__name__)
    logger.info("Aggregation started")
"""
import logging
import os
import sys
from datetime import datetime
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Dict, Optional
from zoneinfo import ZoneInfo

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
DEFAULT_LOG_DIR = PROJECT_ROOT / "logs"
LOG_FILE_NAME = "agency_pulse.log"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S %Z"

# Shared handlers, keyed "console" or by resolved log file path.
_handlers: Dict[str, logging.Handler] = {}
_configured = set()


class AgencyTimeFormatter(logging.Formatter):
    """Formats record timestamps in a fixed zone instead of server local time."""

    def __init__(self, tz_name: str = None):
        super().__init__(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
        self.tz = ZoneInfo(tz_name or os.getenv("LOG_TIMEZONE", "America/Chicago"))

    def formatTime(self, record, datefmt=None):
        stamp = datetime.fromtimestamp(record.created, self.tz)
        return stamp.strftime(datefmt or self.datefmt)


def _file_enabled(log_to_file: Optional[bool]) -> bool:
    if log_to_file is not None:
        return log_to_file
    return os.getenv("LOG_TO_FILE", "true").lower() != "false"


def _console_handler() -> logging.Handler:
    handler = _handlers.get("console")
    if handler is None:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(AgencyTimeFormatter())
        _handlers["console"] = handler
    return handler


def _file_handler(log_dir: Optional[Path]) -> logging.Handler:
    target_dir = Path(log_dir or os.getenv("LOG_DIR") or DEFAULT_LOG_DIR)
    path = str((target_dir / LOG_FILE_NAME).resolve())
    handler = _handlers.get(path)
    if handler is None:
        target_dir.mkdir(parents=True, exist_ok=True)
        handler = TimedRotatingFileHandler(
            path,
            when="midnight",
            backupCount=int(os.getenv("LOG_RETENTION_DAYS", "14")),
            encoding="utf-8",
        )
        handler.setFormatter(AgencyTimeFormatter())
        _handlers[path] = handler
    return handler


def setup_logger(
    name: str,
    level: str = None,
    log_to_file: bool = None,
    log_dir: Path = None,
) -> logging.Logger:
    """
    Return the named logger wired to the shared handlers.

    Args:
        name: Logger name (typically __name__ from calling module).
        level: Level name. Defaults to LOG_LEVEL or INFO.
        log_to_file: Also write to the rolling log file. Defaults to LOG_TO_FILE.
        log_dir: Directory for the log file. Defaults to LOG_DIR or project_root/logs.

    A logger is wired once; later calls return it unchanged.
    """
    logger = logging.getLogger(name)
    if name in _configured:
        return logger

    level = level or os.getenv("LOG_LEVEL", "INFO")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    logger.addHandler(_console_handler())
    if _file_enabled(log_to_file):
        logger.addHandler(_file_handler(log_dir))

    _configured.add(name)
    return logger


def release_logger(name: str) -> None:
    """
    Detach the shared handlers from one logger so it can be set up again.

    A file handler no other configured logger writes to is closed and
    forgotten.
    """
    logger = logging.getLogger(name)
    for handler in list(logger.handlers):
        if handler in _handlers.values():
            logger.removeHandler(handler)
    _configured.discard(name)

    in_use = {
        id(h) for n in _configured for h in logging.getLogger(n).handlers
    }
    for key, handler in list(_handlers.items()):
        if key != "console" and id(handler) not in in_use:
            handler.close()
            del _handlers[key]
