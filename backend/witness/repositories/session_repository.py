"""Contributor session repository."""

from typing import Optional

from ..exceptions import SessionNotFoundError
from ..models.session import INITIAL_TRUST_SCORE, ContributorSession
from .base import BaseRepository


class SessionRepository(BaseRepository[ContributorSession]):
    """Lookups and creation of pseudonymous sessions."""

    model_class = ContributorSession
    id_column = "session_id"

    def _not_found(self, entity_id: str) -> SessionNotFoundError:
        return SessionNotFoundError(entity_id)

    def create(self, session_id: str, fingerprint: str, ip_hash: str, now: int) -> ContributorSession:
        session = ContributorSession(
            session_id=session_id,
            fingerprint=fingerprint,
            first_seen=now,
            last_seen=now,
            contribution_count=0,
            verification_count=0,
            trust_score=INITIAL_TRUST_SCORE,
            ip_hash=ip_hash,
        )
        self.db.add(session)
        self.db.flush()
        return session

    def get_trust_score(self, session_id: str) -> Optional[int]:
        session = self.get_by_id_optional(session_id)
        return session.trust_score if session is not None else None
