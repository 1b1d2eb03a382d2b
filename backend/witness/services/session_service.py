"""Session registry: pseudonymous contributor sessions.

Clients mint their own session token and register it here before any
write. The bootstrap gate backs the two contribution endpoints; content
writes go through the content gate inside their own services.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..core.clock import now_ms
from ..database import atomic
from ..exceptions import ValidationError
from ..models.session import ContributorSession
from ..repositories import SessionRepository
from .rate_limiter import SlidingWindowLimiter, bootstrap_limiter

logger = logging.getLogger(__name__)


class SessionService:
    """Create, refresh and throttle contributor sessions."""

    def __init__(self, db: Session, limiter: Optional[SlidingWindowLimiter] = None):
        self.db = db
        self.repo = SessionRepository(db)
        self.limiter = limiter or bootstrap_limiter()

    def upsert(self, session_id: str, fingerprint: str, ip_hash: str, now: Optional[int] = None) -> ContributorSession:
        """Register a new session (trust 50, zero counters) or refresh an existing one.

        A refresh moves ``last_seen`` but keeps ``contribution_count``. Since
        the rate-limit window is measured from ``last_seen``, re-registering a
        capped session starts its window over: it stays capped for a full
        window from the refresh, however long ago the cap was reached.
        """
        session_id = (session_id or "").strip()
        if not session_id:
            raise ValidationError("Session id required", field="session_id")
        fingerprint = (fingerprint or "").strip()
        if not fingerprint:
            raise ValidationError("Fingerprint required", field="fingerprint")

        now = now if now is not None else now_ms()
        with atomic(self.db):
            session = self.repo.get_for_update(session_id)
            if session is None:
                session = self.repo.create(session_id, fingerprint, ip_hash, now)
                logger.info("Registered contributor session")
            else:
                session.fingerprint = fingerprint
                session.last_seen = now
                session.ip_hash = ip_hash
                self.db.flush()
        self.db.refresh(session)
        return session

    def get(self, session_id: str) -> ContributorSession:
        """Raises SessionNotFoundError when missing."""
        return self.repo.get_by_id(session_id)

    def can_contribute(self, session_id: str, now: Optional[int] = None) -> dict:
        """Advisory check against the bootstrap gate; never records anything."""
        return self.limiter.can_contribute(self.db, session_id, now=now)

    def record_contribution(self, session_id: str, now: Optional[int] = None) -> int:
        """Count one contribution against the bootstrap gate. Returns the new counter."""
        with atomic(self.db):
            return self.limiter.check_and_record(self.db, session_id, now=now)
