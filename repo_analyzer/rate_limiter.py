"""
Rate limiter for GitHub API requests.

Tracks the rate limit headers of each response and waits before the next
request when the remaining quota falls below a reserve.
"""

import logging
import threading
import time
from typing import Optional
from dataclasses import dataclass

import requests


logger = logging.getLogger(__name__)


@dataclass
class RateLimitStatus:
    """Current rate limit status."""
    remaining: int
    limit: int
    reset_at: int  # Unix timestamp


class RateLimiter:
    """
    Manages GitHub API rate limits.

    Respects:
    - 5000 requests/hour (authenticated)
    - 60 requests/hour (unauthenticated)

    One limiter may be shared by several concurrent analyses, so the cached
    status is guarded by a lock.
    """

    def __init__(self, buffer: int = 100, max_wait: float = 3600.0):
        """
        Initialize rate limiter.

        Args:
            buffer: Number of requests to keep in reserve
            max_wait: Upper bound on a single wait, in seconds
        """
        self.buffer = buffer
        self.max_wait = max_wait
        self.last_check = 0.0
        self.cached_status: Optional[RateLimitStatus] = None
        self._lock = threading.Lock()

    def check_rate_limit(self, response: requests.Response) -> Optional[RateLimitStatus]:
        """
        Extract rate limit info from GitHub API response headers.

        Responses without rate limit headers (raw content downloads) leave
        the cached status untouched.

        Args:
            response: requests.Response from GitHub API

        Returns:
            RateLimitStatus with current limits, or None if headers are absent
        """
        if "X-RateLimit-Remaining" not in response.headers:
            return None

        try:
            status = RateLimitStatus(
                remaining=int(response.headers.get("X-RateLimit-Remaining", 0)),
                limit=int(response.headers.get("X-RateLimit-Limit", 5000)),
                reset_at=int(response.headers.get("X-RateLimit-Reset", 0)),
            )
        except ValueError:
            logger.debug("Ignoring malformed rate limit headers: %s", dict(response.headers))
            return None

        with self._lock:
            self.cached_status = status
            self.last_check = time.time()

        return status

    def seconds_until_ready(self) -> float:
        """Seconds to wait before the next request (0 if none)."""
        with self._lock:
            status = self.cached_status
        if not status or status.remaining > self.buffer:
            return 0.0
        wait_seconds = status.reset_at - time.time() + 1
        return min(max(wait_seconds, 0.0), self.max_wait)

    def wait_if_needed(self) -> None:
        """
        Wait if rate limit is approaching.

        If remaining requests <= buffer, wait until reset time.
        """
        wait_seconds = self.seconds_until_ready()
        if wait_seconds > 0:
            logger.warning("Rate limit approaching. Waiting %.0f seconds...", wait_seconds)
            time.sleep(wait_seconds)

    def get_remaining_requests(self) -> Optional[int]:
        """Get remaining requests from cached status."""
        with self._lock:
            if self.cached_status:
                return self.cached_status.remaining
        return None

    def should_wait(self) -> bool:
        """Check if we should wait before making next request."""
        return self.seconds_until_ready() > 0
