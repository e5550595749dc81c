"""In-memory session store with per-session serialization."""

import logging
import threading
import time
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, List, Optional

from .models import Session, Turn

logger = logging.getLogger(__name__)


class _SessionEntry:
    """A session plus the lock that serializes work on it."""

    __slots__ = ("session", "lock", "users")

    def __init__(self, session: Session):
        self.session = session
        self.lock = threading.RLock()
        self.users = 0  # callers holding or waiting for `lock`


class _Shard:
    """One slice of the session table. Its lock guards `entries` only."""

    def __init__(self):
        self.lock = threading.Lock()
        self.entries: Dict[str, _SessionEntry] = {}


class SessionMemoryStore:
    """
    Maps session identifiers to bounded, ordered turn histories.

    The table is split into shards so that looking up unrelated sessions
    rarely contends, and every session carries its own re-entrant lock.
    Shard locks are only held for dict bookkeeping, never while a session
    is being read or written, so work on one session never blocks another.

    Each session keeps at most ``window_size`` turns; older turns are
    evicted first. Sessions idle for longer than ``session_ttl_seconds``
    are dropped lazily.
    """

    DEFAULT_WINDOW = 20
    DEFAULT_SHARDS = 16

    def __init__(
        self,
        window_size: int = DEFAULT_WINDOW,
        session_ttl_seconds: Optional[float] = None,
        shard_count: int = DEFAULT_SHARDS,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Initialize session store.

        Args:
            window_size: Maximum number of turns kept per session
            session_ttl_seconds: Idle time after which a session expires (None = never)
            shard_count: Number of independently locked shards
            clock: Monotonic time source (injectable for tests)
        """
        if window_size < 1:
            raise ValueError("window_size must be at least 1")
        if shard_count < 1:
            raise ValueError("shard_count must be at least 1")

        self.window_size = window_size
        self.session_ttl_seconds = session_ttl_seconds
        self._clock = clock
        self._shards: List[_Shard] = [_Shard() for _ in range(shard_count)]

    def _shard_for(self, session_id: str) -> _Shard:
        return self._shards[hash(session_id) % len(self._shards)]

    def _checkout(self, session_id: str, create: bool) -> Optional[_SessionEntry]:
        """Find (or create) the entry for a session and mark it in use."""
        shard = self._shard_for(session_id)
        with shard.lock:
            now = self._clock()
            entry = shard.entries.get(session_id)

            if (
                entry is not None
                and entry.users == 0
                and entry.session.is_expired(now, self.session_ttl_seconds)
            ):
                del shard.entries[session_id]
                logger.info(f"Session expired: {session_id}")
                entry = None

            if entry is None:
                if not create:
                    return None
                self._purge_shard(shard, now)
                entry = _SessionEntry(Session(session_id=session_id, last_accessed=now))
                shard.entries[session_id] = entry
                logger.info(f"Created new session: {session_id}")

            entry.users += 1
            return entry

    def _checkin(self, session_id: str, entry: _SessionEntry) -> None:
        shard = self._shard_for(session_id)
        with shard.lock:
            entry.users -= 1

    def _purge_shard(self, shard: _Shard, now: float) -> int:
        """Drop idle sessions from a shard. Caller holds ``shard.lock``."""
        if self.session_ttl_seconds is None:
            return 0

        expired = [
            sid for sid, entry in shard.entries.items()
            if entry.users == 0 and entry.session.is_expired(now, self.session_ttl_seconds)
        ]
        for sid in expired:
            del shard.entries[sid]
        if expired:
            logger.info(f"Purged {len(expired)} expired session(s)")
        return len(expired)

    def _is_live(self, session_id: str, entry: _SessionEntry) -> bool:
        shard = self._shard_for(session_id)
        with shard.lock:
            return shard.entries.get(session_id) is entry

    @contextmanager
    def _locked(self, session_id: str, create: bool = True) -> Iterator[Optional[Session]]:
        while True:
            entry = self._checkout(session_id, create)
            if entry is None:
                yield None
                return

            entry.lock.acquire()
            if self._is_live(session_id, entry):
                break
            # Discarded while we waited; start over on the current entry
            entry.lock.release()
            self._checkin(session_id, entry)

        try:
            entry.session.last_accessed = self._clock()
            yield entry.session
            entry.session.last_accessed = self._clock()
        finally:
            entry.lock.release()
            self._checkin(session_id, entry)

    def session_lock(self, session_id: str):
        """
        Hold a session's lock across several operations.

        Used to linearize whole conversation turns: another caller using
        the same session waits until the block exits. The lock is
        re-entrant, so store methods can be called inside the block.

        Usage::

            with store.session_lock("abc") as session:
                store.append("abc", turn)
        """
        return self._locked(session_id)

    def get_or_create(self, session_id: str) -> Session:
        """Return the session for an identifier, creating an empty one if unseen."""
        with self._locked(session_id) as session:
            return session

    def append(self, session_id: str, turn: Turn) -> None:
        """
        Append a turn and enforce the memory window.

        Args:
            session_id: Session ID
            turn: Turn to append
        """
        with self._locked(session_id) as session:
            session.turns.append(turn)
            session.appended_count += 1

            overflow = len(session.turns) - self.window_size
            if overflow > 0:
                del session.turns[:overflow]
                logger.debug(f"Evicted {overflow} turn(s) from session {session_id}")

    def snapshot(self, session_id: str) -> List[Turn]:
        """Get a copy of the session's visible turns, oldest first."""
        with self._locked(session_id, create=False) as session:
            if session is None:
                return []
            return list(session.turns)

    def discard(self, session_id: str) -> bool:
        """Forget a session. Returns False if it did not exist."""
        entry = self._checkout(session_id, create=False)
        if entry is None:
            return False

        shard = self._shard_for(session_id)
        try:
            with entry.lock:
                with shard.lock:
                    if shard.entries.get(session_id) is entry:
                        del shard.entries[session_id]
        finally:
            self._checkin(session_id, entry)

        logger.info(f"Discarded session: {session_id}")
        return True

    def purge_expired(self) -> int:
        """Drop every idle session past its TTL. Returns how many were dropped."""
        purged = 0
        for shard in self._shards:
            with shard.lock:
                purged += self._purge_shard(shard, self._clock())
        return purged

    def session_count(self) -> int:
        count = 0
        for shard in self._shards:
            with shard.lock:
                count += len(shard.entries)
        return count

    def __contains__(self, session_id: str) -> bool:
        shard = self._shard_for(session_id)
        with shard.lock:
            return session_id in shard.entries
