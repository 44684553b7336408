"""
Logging utilities for internal use.
Usage:
    from ddsampling.internal.logger import get_logger

    log = get_logger(__name__)
    log.warning("invalid sampling rule pattern %r", pattern)

Records are rate limited per call site: a given (pathname, lineno) emits at most
one record every ``DD_TRACE_LOGGING_RATE`` seconds (60 by default). Skipped
records are counted and reported on the next emitted record from the same site.
"""

import collections
import logging
import os
import time
from typing import DefaultDict
from typing import Tuple


SECOND = 1
MINUTE = 60 * SECOND


def get_logger(name: str) -> logging.Logger:
    """
    Retrieve or create a ``Logger`` instance configured with the call site rate limiter.
    """
    logger = logging.getLogger(name)
    # addFilter is a no-op if the filter is already attached
    logger.addFilter(log_filter)
    logger.propagate = True
    return logger


class LoggingBucket:
    """Time bucket of a call site and the number of records skipped in it."""

    __slots__ = ("bucket", "skipped")

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

# DEV: `DD_TRACE_LOGGING_RATE=0` disables rate limiting. This is read from the environment directly
#      because the settings module logs through this one.
_rate_limit = int(os.getenv("DD_TRACE_LOGGING_RATE", default=MINUTE))


def set_rate_limit(rate: int) -> None:
    global _rate_limit

    _rate_limit = rate
    _buckets.clear()


def log_filter(record: logging.LogRecord) -> bool:
    """Return True if the record should be emitted, False if it is rate limited."""
    logger = logging.getLogger(record.name)
    if not _rate_limit or logger.getEffectiveLevel() == logging.DEBUG:
        return True
    return _buckets[(record.pathname, record.lineno)].is_sampled(record, _rate_limit)


class DDFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        skipped = getattr(record, "skipped", 0)
        skip_str = f" [{skipped} skipped]" if skipped else ""
        return f"{record.levelname} {super().format(record)}{skip_str}"


# default handler for every ddsampling logger
root_logger = logging.getLogger("ddsampling")
if not root_logger.handlers:
    _handler = logging.StreamHandler()
    _handler.setFormatter(DDFormatter())
    root_logger.addHandler(_handler)
root_logger.propagate = True
