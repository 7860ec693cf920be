"""Short-lived cache of user preferences, keyed by user id."""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL_SECONDS = 5 * 60


class PreferencesCache:
    """
    Holds each user's preferences until `ttl_seconds` have elapsed.

    The clock is injected so expiry can be driven explicitly in tests; it must
    return seconds as a float (time.monotonic by default).
    """

    def __init__(self, ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS, clock: Callable[[], float] = time.monotonic):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def get(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Cached preferences for `user_id`, or None when missing or expired."""
        with self._lock:
            entry = self._entries.get(user_id)
            if entry is None:
                return None
            if self._clock() > entry['expires_at']:
                logger.debug(f"Preferences cache expired for user {user_id}.")
                del self._entries[user_id]
                return None
            return dict(entry['data'])

    def set(self, user_id: str, preferences: Dict[str, Any]) -> None:
        now = self._clock()
        with self._lock:
            self._entries[user_id] = {
                'data': dict(preferences),
                'stored_at': now,
                'expires_at': now + self.ttl_seconds,
            }

    def update(self, user_id: str, key: str, value: Any) -> None:
        """Changes a single preference. Does nothing if the user has no live entry."""
        cached = self.get(user_id)
        if cached is None:
            return
        cached[key] = value
        self.set(user_id, cached)

    def invalidate(self, user_id: Optional[str] = None) -> None:
        """Drops one user's entry, or every entry when `user_id` is None."""
        with self._lock:
            if user_id is None:
                self._entries.clear()
            else:
                self._entries.pop(user_id, None)

    def is_valid(self, user_id: str) -> bool:
        with self._lock:
            entry = self._entries.get(user_id)
            return entry is not None and self._clock() <= entry['expires_at']

    def info(self, user_id: str) -> Dict[str, Any]:
        with self._lock:
            entry = self._entries.get(user_id)
            if entry is None:
                return {'exists': False, 'expired': False}
            now = self._clock()
            return {
                'exists': True,
                'expired': now > entry['expires_at'],
                'age': now - entry['stored_at'],
            }
