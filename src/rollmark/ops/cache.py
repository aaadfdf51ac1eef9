"""Editor session cache management."""

import threading
from datetime import datetime, timedelta, timezone
from typing import Optional

from ..config import settings
from .engine import EditorSession


class SessionCache:
    """In-memory cache for editor sessions.

    Entries expire lazily: on lookup, or when ``cleanup_expired`` is called.
    """

    def __init__(self, default_ttl_seconds: Optional[int] = None):
        self._cache: dict[str, tuple[EditorSession, datetime]] = {}
        self._default_ttl = default_ttl_seconds or settings.session_ttl_seconds
        self._lock = threading.Lock()

    def store(self, session: EditorSession, ttl_seconds: Optional[int] = None) -> str:
        """
        Store a session in the cache.

        Args:
            session: The session to store
            ttl_seconds: Time to live in seconds (uses default if not specified)

        Returns:
            The session ID
        """
        ttl = ttl_seconds or self._default_ttl
        expires_at = datetime.now(timezone.utc) + timedelta(seconds=ttl)
        with self._lock:
            self._cache[session.session_id] = (session, expires_at)
        return session.session_id

    def get(self, session_id: str) -> Optional[EditorSession]:
        """
        Retrieve a session from the cache.

        Returns:
            The session if found and not expired, None otherwise
        """
        with self._lock:
            entry = self._cache.get(session_id)
            if entry is None:
                return None

            session, expires_at = entry
            if datetime.now(timezone.utc) > expires_at:
                del self._cache[session_id]
                return None

            return session

    def remove(self, session_id: str) -> bool:
        """Remove a session. Returns True if it was present."""
        with self._lock:
            return self._cache.pop(session_id, None) is not None

    def cleanup_expired(self) -> int:
        """
        Remove all expired sessions from the cache.

        Returns:
            Number of expired sessions removed
        """
        now = datetime.now(timezone.utc)
        with self._lock:
            expired_ids = [sid for sid, (_, expires_at) in self._cache.items() if now > expires_at]
            for sid in expired_ids:
                del self._cache[sid]
        return len(expired_ids)

    def clear(self):
        """Clear all sessions from the cache."""
        with self._lock:
            self._cache.clear()

    def size(self) -> int:
        """Get the current cache size."""
        with self._lock:
            return len(self._cache)
