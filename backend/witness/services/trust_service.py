"""Trust ledger: bounded per-session reputation.

Scores start at 50 and move by small deltas (+1 for proposing or
verifying, -2 for rejecting). They size the verification quorum of a
session's proposals. Adjusting a session that does not exist is a no-op,
not an error.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..repositories import SessionRepository

logger = logging.getLogger(__name__)

MIN_TRUST = 0
MAX_TRUST = 100

# Quorum sizing: (minimum trust, required verifications), checked in order.
QUORUM_TIERS = ((80, 2), (50, 3))
LOW_TRUST_QUORUM = 4
UNKNOWN_SESSION_QUORUM = 3

PROPOSE_REWARD = 1
VERIFY_REWARD = 1
CREATE_REWARD = 1
REJECT_PENALTY = -2


def clamp_trust(score: int) -> int:
    return min(MAX_TRUST, max(MIN_TRUST, score))


def required_verifications_for_trust(trust_score: Optional[int]) -> int:
    """Verifications a proposal needs given its proposer's trust (None = unknown session)."""
    if trust_score is None:
        return UNKNOWN_SESSION_QUORUM
    for threshold, required in QUORUM_TIERS:
        if trust_score >= threshold:
            return required
    return LOW_TRUST_QUORUM


class TrustLedger:
    """Reputation adjustments, applied within the caller's transaction."""

    def __init__(self, db: Session):
        self.db = db
        self.sessions = SessionRepository(db)

    def adjust(self, session_id: str, delta: int) -> Optional[int]:
        """Add ``delta`` to the session's score, clamped to [0, 100]. Returns the new score."""
        session = self.sessions.get_for_update(session_id)
        if session is None:
            logger.debug("Trust adjustment skipped for unknown session")
            return None
        session.trust_score = clamp_trust(session.trust_score + delta)
        self.db.flush()
        return session.trust_score

    def record_verification(self, session_id: str) -> None:
        """Increment the lifetime verification counter."""
        session = self.sessions.get_for_update(session_id)
        if session is None:
            return
        session.verification_count += 1
        self.db.flush()

    def required_verifications(self, session_id: str) -> int:
        return required_verifications_for_trust(self.sessions.get_trust_score(session_id))
