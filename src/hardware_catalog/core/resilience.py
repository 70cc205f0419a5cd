"""
Retry and circuit-breaking state for the online registry.

A reconciliation only ever talks to one registry, so both helpers track a
single endpoint: the retry policy spaces out attempts within one fetch, and
the circuit breaker remembers failures across fetches so a dead registry
is skipped instead of delaying every final publish.
"""

import logging
import random
import time
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """Exponential backoff with ±25% jitter for transient registry failures."""

    base_delay: float = 0.5
    max_delay: float = 10.0
    max_retries: int = 3

    def delay(self, attempt: int) -> float:
        """Seconds to wait before retry number ``attempt + 1``."""
        capped = min(self.base_delay * (2**attempt), self.max_delay)
        return max(0.0, capped * (1 + 0.25 * (random.random() * 2 - 1)))

    def allows_retry(self, attempt: int) -> bool:
        return attempt < self.max_retries


class CircuitBreaker:
    """
    Failure counter for the registry endpoint.

    After ``failure_threshold`` consecutive failed fetches the circuit opens
    and fetches are refused for ``timeout`` seconds. The first check after the
    timeout closes it again and lets one fetch through.
    """

    def __init__(self, failure_threshold: int = 3, timeout: float = 300.0):
        self.failure_threshold = failure_threshold
        self.timeout = timeout
        self.failures = 0
        self.opened_at: float | None = None

    def record_failure(self) -> None:
        self.failures += 1
        if self.failures >= self.failure_threshold and self.opened_at is None:
            self.opened_at = time.monotonic()
            logger.warning(f"Registry circuit OPEN after {self.failures} failed fetches")

    def record_success(self) -> None:
        if self.opened_at is not None:
            logger.info("Registry circuit CLOSED")
        self.failures = 0
        self.opened_at = None

    @property
    def is_open(self) -> bool:
        if self.opened_at is None:
            return False
        if time.monotonic() - self.opened_at > self.timeout:
            logger.info("Registry circuit reset (timeout passed)")
            self.failures = 0
            self.opened_at = None
            return False
        return True
