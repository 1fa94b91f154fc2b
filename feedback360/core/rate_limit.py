import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable

from feedback360.core.config import settings
from feedback360.core.errors import RateLimited

logger = logging.getLogger(__name__)


@dataclass
class _Attempts:
    count: int
    last_attempt: float


class LoginAttemptTracker:
    """
    Per-client failed login counter.

    After ``max_attempts`` failures every attempt from that client is refused
    until ``lockout_seconds`` have passed since the last failure. A success
    clears the client's entry. Oldest entries are evicted past ``capacity``.
    """

    def __init__(
        self,
        max_attempts: int = 5,
        lockout_seconds: int = 15 * 60,
        capacity: int = 10_000,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_attempts = max_attempts
        self.lockout_seconds = lockout_seconds
        self.capacity = capacity
        self._clock = clock
        self._attempts: "OrderedDict[str, _Attempts]" = OrderedDict()
        self._lock = threading.Lock()

    def check(self, key: str) -> None:
        """Raise RateLimited while ``key`` is locked out."""
        with self._lock:
            entry = self._attempts.get(key)
            if entry is None:
                return
            elapsed = self._clock() - entry.last_attempt
            if elapsed >= self.lockout_seconds:
                del self._attempts[key]
                return
            if entry.count >= self.max_attempts:
                remaining = int(self.lockout_seconds - elapsed + 0.999)
                logger.warning("Login locked out", extra={"client": key, "retry_after_seconds": remaining})
                raise RateLimited(remaining)

    def record_failure(self, key: str) -> int:
        with self._lock:
            entry = self._attempts.pop(key, None) or _Attempts(count=0, last_attempt=0.0)
            entry.count += 1
            entry.last_attempt = self._clock()
            self._attempts[key] = entry
            while len(self._attempts) > self.capacity:
                self._attempts.popitem(last=False)
            return entry.count

    def reset(self, key: str) -> None:
        with self._lock:
            self._attempts.pop(key, None)

    def __len__(self) -> int:
        return len(self._attempts)


_manager_login_tracker = LoginAttemptTracker(
    max_attempts=settings.MANAGER_LOGIN_MAX_ATTEMPTS,
    lockout_seconds=settings.MANAGER_LOGIN_LOCKOUT_SECONDS,
)


def get_manager_login_tracker() -> LoginAttemptTracker:
    return _manager_login_tracker
