from __future__ import division

import threading
import time
from typing import Optional  # noqa:F401


class RateLimiter(object):
    """
    A token bucket rate limiter implementation

    The limiter caps the number of kept traces per ``time_window``. It is shared by
    every trace of the process, so all state changes happen under a lock.
    """

    __slots__ = (
        "_lock",
        "current_window_ns",
        "last_update_ns",
        "max_tokens",
        "prev_window_rate",
        "rate_limit",
        "time_window",
        "tokens",
        "tokens_allowed",
        "tokens_total",
    )

    def __init__(self, rate_limit: int, time_window: float = 1e9) -> None:
        """
        Constructor for RateLimiter

        :param rate_limit: The rate limit to apply for number of requests per time window.
            rate limit > 0 max number of requests to allow per time window,
            rate limit <= 0 leaves the limiter inactive
        :param time_window: The time window in nanoseconds, default is 1 second
        """
        self.rate_limit = rate_limit
        self.time_window = time_window
        self.tokens = rate_limit  # type: float
        self.max_tokens = rate_limit

        self.last_update_ns = time.monotonic_ns()

        self.current_window_ns = 0
        self.tokens_allowed = 0
        self.tokens_total = 0
        self.prev_window_rate = None  # type: Optional[float]

        self._lock = threading.Lock()

    def active(self) -> bool:
        """Whether the limiter caps anything at all."""
        return self.rate_limit > 0

    def allow(self) -> bool:
        """
        Check whether the current request is allowed or not

        This method consumes one token when the request is allowed.

        :returns: Whether the current request is allowed or not
        """
        now_ns = time.monotonic_ns()
        with self._lock:
            allowed = self._is_allowed(now_ns)
            self._update_rate_counts(allowed, now_ns)
        return allowed

    def _is_allowed(self, now_ns: int) -> bool:
        if not self.active():
            return True

        self._replenish(now_ns)

        if self.tokens >= 1:
            self.tokens -= 1
            return True
        return False

    def _replenish(self, now_ns: int) -> None:
        # If we are at the max, we do not need to add any more
        if self.tokens == self.max_tokens:
            self.last_update_ns = now_ns
            return

        elapsed = now_ns - self.last_update_ns
        self.last_update_ns = now_ns

        self.tokens = min(self.max_tokens, self.tokens + (elapsed / self.time_window) * self.rate_limit)

    def _update_rate_counts(self, allowed: bool, now_ns: int) -> None:
        # No tokens have been seen yet, start a new window
        if not self.current_window_ns:
            self.current_window_ns = now_ns

        # If more than one time window has past since the window started, start a new one
        elif now_ns - self.current_window_ns >= self.time_window:
            # Store previous window's rate to average with current for `current_rate`
            self.prev_window_rate = self._current_window_rate()
            self.tokens_allowed = 0
            self.tokens_total = 0
            self.current_window_ns = now_ns

        if allowed:
            self.tokens_allowed += 1
        self.tokens_total += 1

    def _current_window_rate(self) -> float:
        # No tokens have been seen, effectively 100% sample rate
        if not self.tokens_total:
            return 1.0
        return self.tokens_allowed / self.tokens_total

    def current_rate(self) -> float:
        """
        Return the effective sample rate of this rate limiter

        :returns: Effective sample rate value 0.0 <= rate <= 1.0
        """
        with self._lock:
            if self.prev_window_rate is None:
                return self._current_window_rate()
            return (self._current_window_rate() + self.prev_window_rate) / 2.0

    def __repr__(self):
        return "{}(rate_limit={!r}, tokens={!r}, last_update_ns={!r}, current_rate={!r})".format(
            self.__class__.__name__,
            self.rate_limit,
            self.tokens,
            self.last_update_ns,
            self.current_rate(),
        )

    __str__ = __repr__
