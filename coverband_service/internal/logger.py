"""
Logging utilities for internal use.

Usage:
    from coverband_service.internal.logger import get_logger
    log = get_logger(__name__)

Every logger returned by ``get_logger`` is rate limited: a given call site
(pathname and line number) emits at most one record every
``COVERBAND_LOGGING_RATE`` seconds (default 60, 0 disables the limit). The
number of records dropped in between is appended to the next one that goes
through, e.g.::

    WARNING Coverband: error while saving coverage: timed out [12 skipped]

Loggers set to DEBUG are never rate limited, so that verbose mode shows every
request made to the collector.
"""

import collections
import logging
import os
import time
from typing import DefaultDict
from typing import Tuple


ROOT_LOGGER_NAME = "coverband_service"


def get_logger(name: str) -> logging.Logger:
    """
    Retrieve or create a ``Logger`` instance with consistent behavior for internal use.
    """
    logger = logging.getLogger(name)
    # addFilter will only add the filter if it is not already present
    logger.addFilter(log_filter)
    logger.propagate = True
    return logger


def configure(verbose: bool) -> None:
    """Enable debug logging for the whole package when running verbose."""
    if verbose:
        logging.getLogger(ROOT_LOGGER_NAME).setLevel(logging.DEBUG)


# Keeps track of a log line current time bucket and the number of log lines skipped
class LoggingBucket:
    def __init__(self, bucket: float, skipped: int):
        self.bucket = bucket
        self.skipped = skipped

    def __repr__(self):
        return f"LoggingBucket({self.bucket}, {self.skipped})"

    def is_sampled(self, record: logging.LogRecord, rate: float) -> bool:
        current = time.monotonic()
        if current - self.bucket >= rate:
            self.bucket = current
            record.skipped = self.skipped
            self.skipped = 0
            return True
        self.skipped += 1
        return False


_MINF = float("-inf")

_buckets: DefaultDict[Tuple[str, int], LoggingBucket] = collections.defaultdict(lambda: LoggingBucket(_MINF, 0))

_rate_limit = int(os.getenv("COVERBAND_LOGGING_RATE", default=60))


def log_filter(record: logging.LogRecord) -> bool:
    """
    Decide whether a log record should be emitted (True) or skipped (False).
    """
    logger = logging.getLogger(record.name)
    if not _rate_limit or logger.getEffectiveLevel() == logging.DEBUG:
        return True
    key = (record.pathname, record.lineno)
    return _buckets[key].is_sampled(record, _rate_limit)


class CoverbandFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        skipped = getattr(record, "skipped", 0)
        if skipped:
            skip_str = f" [{skipped} skipped]"
        else:
            skip_str = ""
        return f"{record.levelname} {super().format(record)}{skip_str}"


# setup the default formatter for all coverband_service loggers
root_logger = logging.getLogger(ROOT_LOGGER_NAME)
if not root_logger.handlers:
    root_logger.addHandler(logging.StreamHandler())
    root_logger.handlers[0].setFormatter(CoverbandFormatter())
root_logger.propagate = True
