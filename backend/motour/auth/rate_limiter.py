import time
import hashlib
from typing import Dict, Optional, Tuple
from datetime import datetime, timedelta
from collections import defaultdict
import threading

from motour.core.config import settings


class LoginRateLimiter:
    """Thread-safe failed-login tracker with lockout."""

    def __init__(self, attempts_limit: int, lockout_duration: timedelta, window_seconds: int = 300):
        self._lock = threading.Lock()
        self._attempts: Dict[str, list] = defaultdict(list)
        self._lockouts: Dict[str, datetime] = {}

        self.attempts_limit = attempts_limit
        self.lockout_duration = lockout_duration
        self.window_seconds = window_seconds

    def _clean_old_attempts(self, key: str):
        """Remove attempts older than the window."""
        cutoff = time.time() - self.window_seconds
        self._attempts[key] = [attempt for attempt in self._attempts[key] if attempt > cutoff]

    def _get_key(self, identifier: str, realm: str) -> str:
        return f"{realm}:{hashlib.sha256(identifier.lower().encode()).hexdigest()[:16]}"

    def check(self, identifier: str, realm: str = "user") -> Tuple[bool, Optional[datetime]]:
        """Return (allowed, locked_until) for the next login attempt."""
        with self._lock:
            key = self._get_key(identifier, realm)

            if key in self._lockouts:
                lockout_until = self._lockouts[key]
                if datetime.now() < lockout_until:
                    return False, lockout_until
                # Lockout expired
                del self._lockouts[key]
                self._attempts[key] = []

            self._clean_old_attempts(key)

            if len(self._attempts[key]) < self.attempts_limit:
                return True, None

            lockout_until = datetime.now() + self.lockout_duration
            self._lockouts[key] = lockout_until
            return False, lockout_until

    def record(self, identifier: str, success: bool, realm: str = "user"):
        """Record a login attempt; success clears the history."""
        with self._lock:
            key = self._get_key(identifier, realm)

            if success:
                self._attempts.pop(key, None)
                self._lockouts.pop(key, None)
            else:
                self._attempts[key].append(time.time())

    def reset(self):
        with self._lock:
            self._attempts.clear()
            self._lockouts.clear()


# Global rate limiter instance
login_rate_limiter = LoginRateLimiter(
    attempts_limit=settings.max_login_attempts,
    lockout_duration=timedelta(minutes=settings.lockout_duration_minutes)
)
