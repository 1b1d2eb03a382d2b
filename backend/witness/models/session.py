"""Contributor session and audit log models.

Sessions are pseudonymous: a client-generated token plus a browser
fingerprint and a salted address hash. They carry the reputation and
throttling counters. AuditLog records every state-changing operation.
"""

from sqlalchemy import BigInteger, Column, Index, Integer, String, Text

from ..database import Base

INITIAL_TRUST_SCORE = 50


class ContributorSession(Base):
    """Pseudonymous actor record."""

    __tablename__ = "sessions"
    __table_args__ = (
        Index("ix_sessions_fingerprint", "fingerprint"),
    )

    session_id = Column(String(100), primary_key=True)
    fingerprint = Column(String(255), nullable=False)
    first_seen = Column(BigInteger, nullable=False)
    last_seen = Column(BigInteger, nullable=False)
    # Writes inside the current window; reset lazily when the window elapses.
    contribution_count = Column(Integer, nullable=False, default=0)
    # Lifetime verifications cast.
    verification_count = Column(Integer, nullable=False, default=0)
    trust_score = Column(Integer, nullable=False, default=INITIAL_TRUST_SCORE)
    ip_hash = Column(String(64), nullable=False)


class AuditLog(Base):
    """Immutable record of state-changing operations.

    Written inside the same transaction as the change it describes, never
    modified or deleted.
    Fields:
        action      - create, update, verify, reject, expire
        collection  - record kind or "proposals"
        document_id - id of the affected record version or proposal
        changes     - JSON text describing the change
    """

    __tablename__ = "audit_log"
    __table_args__ = (
        Index("ix_audit_log_session", "session_id", "timestamp"),
        Index("ix_audit_log_timestamp", "timestamp"),
        Index("ix_audit_log_document", "document_id"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    action = Column(String(20), nullable=False)
    collection = Column(String(30), nullable=False)
    document_id = Column(String(50), nullable=False)
    changes = Column(Text, nullable=False)
    session_id = Column(String(100), nullable=False)
    timestamp = Column(BigInteger, nullable=False)
    ip_hash = Column(String(64), nullable=False)
    user_agent = Column(Text, nullable=False)
    reason = Column(Text, nullable=False)
