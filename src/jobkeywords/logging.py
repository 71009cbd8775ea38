"""Logging for jobkeywords.

One named logger, ``jobkeywords``, writes to stderr.  Module loggers
(``logging.getLogger(__name__)``) are its children and propagate into
it.  A run can additionally persist its log to a timestamped file, whose
records carry the thread name so extractor-pool and scoring-arbiter
activity can be told apart after the fact.

The Ollama SDK logs every HTTP request through ``httpx``; those loggers
are held at WARNING so one scored fragment is not two lines of noise.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime
from pathlib import Path

DEFAULT_LOG_DIR = "data/logs"

_STDERR_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(threadName)s] %(message)s"
_LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

_QUIET_LOGGERS = ("httpx", "httpcore")

logger = logging.getLogger("jobkeywords")
logger.setLevel(logging.INFO)

stderr_handler = logging.StreamHandler(sys.stderr)
stderr_handler.setLevel(logging.INFO)
stderr_handler.setFormatter(logging.Formatter(_STDERR_FORMAT, datefmt=_LOG_DATEFMT))
logger.addHandler(stderr_handler)

for _name in _QUIET_LOGGERS:
    logging.getLogger(_name).setLevel(logging.WARNING)


def _lower_logger_level(level: int) -> None:
    if level < logger.level:
        logger.setLevel(level)


def set_verbose(verbose: bool = True) -> None:
    """Show DEBUG records on stderr (``run --verbose``)."""
    level = logging.DEBUG if verbose else logging.INFO
    stderr_handler.setLevel(level)
    _lower_logger_level(level)


def configure_file_logging(
    log_dir: str = DEFAULT_LOG_DIR,
    *,
    level: int = logging.INFO,
) -> logging.FileHandler:
    """Also write records to ``<log_dir>/jobkeywords_<timestamp>.log``.

    Creates *log_dir* if needed.  Returns the handler so callers (or
    tests) can detach it.
    """
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y-%m-%dT%H-%M-%S")
    file_handler = logging.FileHandler(log_path / f"jobkeywords_{timestamp}.log", encoding="utf-8")
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_LOG_DATEFMT))

    _lower_logger_level(level)
    logger.addHandler(file_handler)
    logger.debug("Writing log file %s", file_handler.baseFilename)
    return file_handler


__all__ = ["configure_file_logging", "logger", "set_verbose"]
