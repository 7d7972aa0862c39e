from typing import Dict, Any, AsyncIterator, Optional, Union
from contextlib import asynccontextmanager
import asyncio
from datetime import datetime, timedelta, timezone
import structlog

from librarian.domain.models.session_state import PendingSession, Session

logger = structlog.get_logger(__name__)


class SessionStore:
    """In-memory keyed store for pending and active structuring sessions.

    Records idle for longer than ``ttl_seconds`` are evicted, either lazily
    on lookup or by the periodic sweep. A ttl of 0 disables eviction.
    Each token also gets its own lock so calls against one session run
    one at a time.
    """

    def __init__(self, ttl_seconds: int = 3600):
        self.ttl_seconds = ttl_seconds
        self.pending: Dict[str, PendingSession] = {}
        self.active: Dict[str, Session] = {}
        self._token_locks: Dict[str, asyncio.Lock] = {}
        self._lock = asyncio.Lock()

    @asynccontextmanager
    async def locked(self, session_token: str) -> AsyncIterator[None]:
        """Serialize calls against one token"""

        lock = self._token_locks.get(session_token)
        if lock is None:
            lock = self._token_locks[session_token] = asyncio.Lock()

        try:
            async with lock:
                yield
        finally:
            self._release_lock(session_token)

    def _is_expired(self, record: PendingSession, now: datetime) -> bool:
        if self.ttl_seconds <= 0:
            return False
        return now - record.last_activity > timedelta(seconds=self.ttl_seconds)

    def _get_live(self, table: Dict[str, Any], session_token: str):
        record = table.get(session_token)
        if record is None:
            return None

        if self._is_expired(record, datetime.now(timezone.utc)):
            del table[session_token]
            self._release_lock(session_token)
            logger.info("Session evicted on lookup", session_token=session_token)
            return None

        record.touch()
        return record

    def _release_lock(self, session_token: str):
        if session_token not in self.pending and session_token not in self.active:
            self._token_locks.pop(session_token, None)

    async def put_pending(self, pending: PendingSession) -> None:
        async with self._lock:
            self.pending[pending.session_token] = pending

    async def get_pending(self, session_token: str) -> Optional[PendingSession]:
        async with self._lock:
            return self._get_live(self.pending, session_token)

    async def promote(self, session: Session) -> None:
        """Replace the pending record of a token with its active session"""

        async with self._lock:
            self.pending.pop(session.session_token, None)
            self.active[session.session_token] = session

    async def get_active(self, session_token: str) -> Optional[Session]:
        async with self._lock:
            return self._get_live(self.active, session_token)

    async def get_any(self, session_token: str) -> Optional[Union[PendingSession, Session]]:
        """Get the active session for a token, else its pending record"""

        async with self._lock:
            return self._get_live(self.active, session_token) or self._get_live(self.pending, session_token)

    async def delete_active(self, session_token: str) -> bool:
        async with self._lock:
            removed = self.active.pop(session_token, None) is not None
            self._release_lock(session_token)
            return removed

    async def clear_expired(self) -> int:
        """Evict idle records and return how many were removed"""

        async with self._lock:
            now = datetime.now(timezone.utc)
            expired = 0
            for table in (self.pending, self.active):
                expired_tokens = [
                    token for token, record in table.items()
                    if self._is_expired(record, now)
                ]
                for token in expired_tokens:
                    del table[token]
                    self._release_lock(token)
                expired += len(expired_tokens)

            return expired

    async def evict_periodically(self, interval_seconds: float = 60):
        """Background sweep removing abandoned sessions"""

        while True:
            try:
                expired = await self.clear_expired()
                if expired:
                    logger.info("Evicted idle sessions", count=expired)
            except Exception as e:
                logger.error("Session eviction error", error=str(e))

            await asyncio.sleep(interval_seconds)

    async def get_stats(self) -> Dict[str, Any]:
        """Get store statistics"""

        async with self._lock:
            return {
                "pending_sessions": len(self.pending),
                "active_sessions": len(self.active),
                "ttl_seconds": self.ttl_seconds
            }

    async def clear(self):
        """Drop every session"""

        async with self._lock:
            self.pending.clear()
            self.active.clear()
            self._token_locks.clear()
