"""In-memory transcript session store with idle-TTL cleanup.

WHY: The HTTP API serves a host UI that streams text into a transcript,
edits it, and exports it across many requests. Each transcript has to
live somewhere between requests. An in-memory store is sufficient: the
buffer is the only state and nothing is persisted beyond it.

HOW: Two components work together:
  TranscriptSession — dataclass holding one TranscriptBuffer, its row
                      selection, timestamps, and a per-session lock
  SessionStore      — thread-safe dict-based store with
                      create/get/list/touch/delete and TTL cleanup

RULES:
- All store mutations are protected by threading.Lock for thread safety
- Buffer mutations hold the session's own lock (store lock is not held)
- Session IDs are UUID4 hex strings generated at creation time
- TTL is measured from updated_at (idle time), default 1 hour
- create_session() raises ValueError once max_sessions is reached
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from transcript_studio.config import MAX_SESSIONS, SESSION_TTL_SECONDS
from transcript_studio.core.buffer import TranscriptBuffer
from transcript_studio.core.editor import RowSelection

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = SESSION_TTL_SECONDS


@dataclass
class TranscriptSession:
    """One transcript being streamed, edited, and exported.

    RULES:
    - id: UUID4 hex string, unique and immutable after creation
    - name: display name, also the stem of exported filenames
    - buffer: the transcript's raw line log
    - selection: the row indices currently selected in the table
    - created_at / updated_at: epoch timestamps
    - lock: held while reading rows from or mutating the buffer
    """

    id: str
    name: str
    buffer: TranscriptBuffer
    created_at: float
    updated_at: float
    selection: RowSelection = field(default_factory=RowSelection)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)


class SessionStore:
    """Thread-safe in-memory store for transcript sessions."""

    def __init__(
        self,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        max_sessions: int = MAX_SESSIONS,
    ) -> None:
        self._sessions: Dict[str, TranscriptSession] = {}
        self._lock = threading.Lock()
        self._ttl_seconds = ttl_seconds
        self.max_sessions = max_sessions

    def create_session(self, name: str, text: str = "") -> TranscriptSession:
        """Create a new session whose buffer starts with ``text``.

        Raises:
            ValueError: If the store already holds max_sessions sessions.
        """
        with self._lock:
            if len(self._sessions) >= self.max_sessions:
                raise ValueError(
                    "Maximum number of transcript sessions ({}) reached".format(
                        self.max_sessions
                    )
                )

            now = time.time()
            session = TranscriptSession(
                id=uuid.uuid4().hex,
                name=name,
                buffer=TranscriptBuffer(text),
                created_at=now,
                updated_at=now,
            )
            self._sessions[session.id] = session

        logger.info("Created transcript session %s (%s)", session.id, name)
        return session

    def get_session(self, session_id: str) -> Optional[TranscriptSession]:
        """Return the live session for ``session_id``, or None if unknown."""
        with self._lock:
            return self._sessions.get(session_id)

    def list_sessions(self) -> List[TranscriptSession]:
        """Return all sessions, oldest first."""
        with self._lock:
            return sorted(self._sessions.values(), key=lambda s: s.created_at)

    def touch(self, session_id: str) -> None:
        """Mark a session as used now, postponing its expiry."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is not None:
                session.updated_at = time.time()

    def delete_session(self, session_id: str) -> bool:
        """Remove a session. Returns True if it existed."""
        with self._lock:
            session = self._sessions.pop(session_id, None)

        if session is None:
            return False
        logger.info("Deleted transcript session %s", session_id)
        return True

    def cleanup_expired(self) -> int:
        """Remove sessions idle for longer than the TTL.

        Sessions that are still streaming are kept; the producer may be
        slow but is not gone.

        Returns:
            The number of removed sessions.
        """
        now = time.time()
        expired: List[TranscriptSession] = []

        with self._lock:
            for session_id, session in list(self._sessions.items()):
                if session.buffer.streaming:
                    continue
                if now - session.updated_at > self._ttl_seconds:
                    expired.append(self._sessions.pop(session_id))

        for session in expired:
            logger.info("Expired transcript session %s (idle %.0fs)", session.id, now - session.updated_at)

        return len(expired)
