import logging
import random
import uuid
from datetime import datetime, timedelta
from typing import Dict, NamedTuple, Optional, Tuple

from .config import settings
from .engine import PracticeSession
from .modes import PracticeMode

logger = logging.getLogger(__name__)


class SessionEntry(NamedTuple):
    session: PracticeSession
    created_at: datetime


class SessionStore:
    """Hands out practice sessions by id and expires idle ones."""

    def __init__(
        self,
        timeout_minutes: int = settings.SESSION_TIMEOUT_MINUTES,
        seed: Optional[int] = settings.RANDOM_SEED,
    ):
        self.timeout = timedelta(minutes=timeout_minutes)
        self.seed = seed
        self._sessions: Dict[str, SessionEntry] = {}

    def create(self, mode: PracticeMode) -> Tuple[str, PracticeSession]:
        self.sweep()
        session_id = str(uuid.uuid4())
        rng = random.Random(self.seed) if self.seed is not None else random.Random()
        session = PracticeSession(mode, rng=rng)
        self._sessions[session_id] = SessionEntry(session, datetime.now())
        logger.info(f"New session: {session_id} [Mode: {mode.id}]")
        return session_id, session

    def get(self, session_id: Optional[str]) -> Optional[PracticeSession]:
        if not session_id or session_id not in self._sessions:
            return None
        entry = self._sessions[session_id]
        if datetime.now() - entry.created_at > self.timeout:
            logger.info(f"Session expired: {session_id}")
            del self._sessions[session_id]
            return None
        return entry.session

    def sweep(self) -> int:
        """Drops every expired session; returns how many were dropped."""
        now = datetime.now()
        expired = [
            session_id
            for session_id, entry in self._sessions.items()
            if now - entry.created_at > self.timeout
        ]
        for session_id in expired:
            del self._sessions[session_id]
        if expired:
            logger.info(f"Swept {len(expired)} expired sessions")
        return len(expired)

    def discard(self, session_id: Optional[str]):
        if session_id in self._sessions:
            del self._sessions[session_id]

    def __len__(self) -> int:
        return len(self._sessions)
