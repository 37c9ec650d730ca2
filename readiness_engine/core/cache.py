"""Single-value time-based cache.

Services that memoize slow-changing reference data (rubric, stages) own a
TTLCache instance instead of module-level globals, so tests and callers can
inject their own clock and invalidate explicitly after writes.
"""

import threading
import time
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")


class TTLCache(Generic[T]):
    """Holds one loaded value until it is older than ``ttl_seconds``."""

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._value: Optional[T] = None
        self._loaded_at: Optional[float] = None
        self._lock = threading.Lock()

    def is_fresh(self) -> bool:
        """Whether a value is cached and younger than the TTL."""
        if self._loaded_at is None:
            return False
        return self._clock() - self._loaded_at < self.ttl_seconds

    def get_or_load(self, loader: Callable[[], T]) -> T:
        """
        Return the cached value, reloading it when missing or expired.

        Args:
            loader: Zero-argument callable producing a fresh value

        Returns:
            Cached or freshly loaded value

        Raises:
            Exception: Whatever the loader raises (nothing is cached then)
        """
        with self._lock:
            if self.is_fresh():
                return self._value  # type: ignore[return-value]

            value = loader()
            self._value = value
            self._loaded_at = self._clock()
            return value

    def invalidate(self) -> None:
        """Drop the cached value so the next read reloads."""
        with self._lock:
            self._value = None
            self._loaded_at = None
