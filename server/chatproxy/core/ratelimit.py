from __future__ import annotations
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from fastapi import Request

from chatproxy.config import get_settings
from chatproxy.core.errors import RateLimitError

# In-memory, per-process state. A restart clears every counter and lockout;
# multiple workers each keep their own buckets.

Clock = Callable[[], float]


def get_client_ip(request: Request) -> str:
    xff = request.headers.get("x-forwarded-for")
    if xff:
        # Take the first IP
        return xff.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    # Fallback to client host
    return request.client.host if request.client else "unknown"


@dataclass
class Window:
    count: int
    reset_time: float


def _sweep(entries: Dict[str, Window], now: float, inclusive: bool) -> None:
    """Drop every window that has run out."""
    expired = [
        key for key, w in entries.items()
        if now > w.reset_time or (inclusive and now == w.reset_time)
    ]
    for key in expired:
        del entries[key]


class FixedWindowRateLimiter:
    """Allow ``limit`` hits per key inside a fixed window of ``window_seconds``."""

    def __init__(
        self,
        limit: int,
        window_seconds: float,
        error: str = "Too many requests",
        message: str = "Please try again later.",
        clock: Clock = time.monotonic,
    ) -> None:
        self.limit = limit
        self.window_seconds = window_seconds
        self.error = error
        self.message = message
        self._clock = clock
        self._lock = threading.Lock()
        self._windows: Dict[str, Window] = {}
        # Expired windows of keys that never return are swept once per window
        self._next_sweep = clock() + window_seconds

    def hit(self, key: str) -> Window:
        """Count one request for ``key`` and raise ``RateLimitError`` once over the limit."""
        with self._lock:
            now = self._clock()
            if now >= self._next_sweep:
                _sweep(self._windows, now, inclusive=True)
                self._next_sweep = now + self.window_seconds
            window = self._windows.get(key)
            if window is None or now >= window.reset_time:
                window = Window(count=0, reset_time=now + self.window_seconds)
                self._windows[key] = window
            window.count += 1
            snapshot = Window(window.count, window.reset_time)

        if snapshot.count > self.limit:
            retry_after = max(1, math.ceil(snapshot.reset_time - now))
            raise RateLimitError(self.error, self.message, retry_after=retry_after)
        return snapshot

    def remaining(self, key: str) -> int:
        with self._lock:
            window = self._windows.get(key)
            if window is None or self._clock() >= window.reset_time:
                return self.limit
            return max(0, self.limit - window.count)

    def size(self) -> int:
        with self._lock:
            return len(self._windows)

    def reset(self, key: Optional[str] = None) -> None:
        with self._lock:
            if key is None:
                self._windows.clear()
            else:
                self._windows.pop(key, None)


class BruteForceGuard:
    """Track failed attempts per IP and block once ``max_attempts`` is reached."""

    def __init__(self, max_attempts: int = 5, window_seconds: float = 15 * 60, clock: Clock = time.monotonic) -> None:
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._attempts: Dict[str, Window] = {}
        self._next_sweep = clock() + window_seconds

    def _live(self, ip: str, now: float) -> Optional[Window]:
        if now >= self._next_sweep:
            _sweep(self._attempts, now, inclusive=False)
            self._next_sweep = now + self.window_seconds
        record = self._attempts.get(ip)
        if record is not None and now > record.reset_time:
            del self._attempts[ip]
            return None
        return record

    def is_blocked(self, ip: str) -> bool:
        with self._lock:
            record = self._live(ip, self._clock())
            return record is not None and record.count >= self.max_attempts

    def retry_after(self, ip: str) -> int:
        with self._lock:
            now = self._clock()
            record = self._live(ip, now)
            if record is None:
                return 0
            return max(1, math.ceil(record.reset_time - now))

    def record_failed_attempt(self, ip: str) -> int:
        with self._lock:
            now = self._clock()
            record = self._live(ip, now)
            if record is None:
                record = Window(count=0, reset_time=now + self.window_seconds)
                self._attempts[ip] = record
            record.count += 1
            return record.count

    def clear_failed_attempts(self, ip: str) -> None:
        with self._lock:
            self._attempts.pop(ip, None)

    def size(self) -> int:
        with self._lock:
            return len(self._attempts)

    def ensure_not_blocked(self, ip: str) -> None:
        if self.is_blocked(ip):
            raise RateLimitError(
                "Too many failed attempts",
                "Your IP has been temporarily blocked. Please try again later.",
                retry_after=self.retry_after(ip),
            )

    def reset(self) -> None:
        with self._lock:
            self._attempts.clear()


def _build_api_limiter() -> FixedWindowRateLimiter:
    settings = get_settings()
    return FixedWindowRateLimiter(settings.api_rate_limit, settings.api_rate_window_seconds)


def _build_chat_limiter() -> FixedWindowRateLimiter:
    settings = get_settings()
    return FixedWindowRateLimiter(
        settings.chat_rate_limit,
        settings.chat_rate_window_seconds,
        message="Too many chat requests, please slow down.",
    )


def _build_brute_force_guard() -> BruteForceGuard:
    settings = get_settings()
    return BruteForceGuard(settings.brute_force_max_attempts, settings.brute_force_window_seconds)


# Singletons
api_limiter = _build_api_limiter()
chat_limiter = _build_chat_limiter()
brute_force_guard = _build_brute_force_guard()


def enforce_chat_rate_limit(request: Request) -> None:
    """Route dependency for the chat endpoint."""
    chat_limiter.hit(get_client_ip(request))
