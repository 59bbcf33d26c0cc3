"""Logging to the console and to a rotating JSON log file."""

from __future__ import annotations

import gzip
import json
import logging
import logging.handlers
import os
import shutil
import sys
import time
from datetime import datetime
from pathlib import Path

LOGGER_NAME = "filestreambot"
LOG_FILE = "app.log"
MAX_BYTES = 10 * 1024 * 1024
BACKUP_COUNT = 3
MAX_AGE_SECONDS = 7 * 24 * 3600

_COLORS = {
    logging.DEBUG: "\033[35m",
    logging.INFO: "\033[34m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[31m",
}
_RESET = "\033[0m"


class _ConsoleFormatter(logging.Formatter):
    def __init__(self) -> None:
        super().__init__(datefmt="%d/%m/%Y %I:%M %p")

    def format(self, record: logging.LogRecord) -> str:
        color = _COLORS.get(record.levelno, "")
        level = f"{color}{record.levelname}{_RESET}"
        line = f"{self.formatTime(record, self.datefmt)}\t{level}\t{record.name}\t{record.getMessage()}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "level": record.levelname.lower(),
            "ts": datetime.fromtimestamp(record.created).astimezone().isoformat(timespec="milliseconds"),
            "logger": record.name,
            "caller": f"{record.filename}:{record.lineno}",
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["error"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def _prune_old(directory: Path) -> None:
    cutoff = time.time() - MAX_AGE_SECONDS
    for backup in directory.glob(f"{LOG_FILE}.*.gz"):
        if backup.stat().st_mtime < cutoff:
            backup.unlink()


def _gzip_rotator(source: str, dest: str) -> None:
    with open(source, "rb") as src, gzip.open(dest, "wb") as dst:
        shutil.copyfileobj(src, dst)
    os.remove(source)
    _prune_old(Path(dest).parent)


def init_logger(debug_mode: bool = False, log_dir: str | os.PathLike[str] = "logs") -> logging.Logger:
    """Configure and return the application logger."""
    directory = Path(log_dir)
    directory.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(logging.DEBUG if debug_mode else logging.INFO)
    console.setFormatter(_ConsoleFormatter())

    file_handler = logging.handlers.RotatingFileHandler(
        directory / LOG_FILE, maxBytes=MAX_BYTES, backupCount=BACKUP_COUNT, encoding="utf-8"
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(_JsonFormatter())
    file_handler.namer = lambda name: name + ".gz"
    file_handler.rotator = _gzip_rotator

    logger.addHandler(console)
    logger.addHandler(file_handler)
    return logger