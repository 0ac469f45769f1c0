"""
Dual-sink logging for the OSC display server.

Logs go to stdout and to a rotating log file. The thread name is part of
the format because messages are dispatched on transport worker threads.
"""

import sys
import logging
import logging.handlers
from pathlib import Path
from typing import List, Optional


# Log file candidates, first writable one wins
LOG_FILE_PATHS = [
    "/var/log/osc_display.log",
    "/tmp/osc_display.log",
]

DEFAULT_FORMAT = "%(asctime)s - %(threadName)s - %(name)s - %(levelname)s - %(message)s"
MAX_LOG_BYTES = 2 * 1024 * 1024
LOG_BACKUPS = 3


def _writable_log_path(candidates: List[str]) -> Optional[str]:
    for path in candidates:
        try:
            Path(path).parent.mkdir(parents=True, exist_ok=True)
            with open(path, 'a'):
                pass
            return path
        except OSError:
            continue
    return None


def setup_logging(verbose: bool = False,
                  log_file: Optional[str] = None,
                  log_format: str = DEFAULT_FORMAT) -> logging.Logger:
    """
    Configure console and file logging.

    Args:
        verbose: DEBUG level if True, otherwise INFO (every dispatched
            message is logged at DEBUG)
        log_file: Log file path. If None, the first writable entry of
            LOG_FILE_PATHS is used; file logging is skipped if none is.
        log_format: Format string for both sinks

    Returns:
        The osc_display package logger
    """
    level = logging.DEBUG if verbose else logging.INFO
    formatter = logging.Formatter(log_format)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    handlers: List[logging.Handler] = [console_handler]

    file_path = log_file or _writable_log_path(LOG_FILE_PATHS)
    if file_path:
        try:
            file_handler = logging.handlers.RotatingFileHandler(
                file_path, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS)
            file_handler.setFormatter(formatter)
            handlers.append(file_handler)
        except OSError as e:
            print(f"Warning: Could not setup file logging at {file_path}: {e}",
                  file=sys.stderr)

    logging.basicConfig(level=level, handlers=handlers, force=True)

    # pythonosc logs every unmatched datagram at DEBUG; keep it quieter
    logging.getLogger("pythonosc").setLevel(max(level, logging.INFO))

    logger = logging.getLogger("osc_display")
    logger.setLevel(level)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name (typically __name__)."""
    return logging.getLogger(name)
