"""Proposal model: a pending crowd-sourced edit to one record."""

from sqlalchemy import BigInteger, Column, Index, Integer, JSON, String, Text

from ..database import Base

PENDING = "pending"
APPROVED = "approved"
REJECTED = "rejected"
EXPIRED = "expired"


class Proposal(Base):
    """
    Suggested mutation of one field set of one record.

    Status transitions: pending -> approved | rejected | expired.
    Terminal states are never left.
    """

    __tablename__ = "proposals"
    __table_args__ = (
        Index("ix_proposals_target", "target_collection", "target_entity_id", "status"),
        Index("ix_proposals_status", "status", "proposed_at"),
        Index("ix_proposals_collection_status", "target_collection", "status", "proposed_at"),
    )

    id = Column(String(50), primary_key=True)

    target_collection = Column(String(30), nullable=False)
    # Current version id at proposal time.
    target_id = Column(String(50), nullable=False)
    # Logical entity, stable across versions; conflict scans key on this.
    target_entity_id = Column(String(50), nullable=False)

    # Validated field -> JSON value mapping, at least one entry.
    proposed_changes = Column(JSON, nullable=False)

    required_verifications = Column(Integer, nullable=False)
    current_verifications = Column(Integer, nullable=False, default=0)
    verified_by_sessions = Column(JSON, nullable=False, default=list)
    rejected_by_sessions = Column(JSON, nullable=False, default=list)

    status = Column(String(20), nullable=False, default=PENDING)

    proposed_by = Column(String(100), nullable=False)
    proposed_at = Column(BigInteger, nullable=False)
    # Fixed window from proposed_at.
    expires_at = Column(BigInteger, nullable=False)
    reason = Column(Text, nullable=False)

    # Copy of the target at proposal time, for display and audit only.
    target_snapshot = Column(JSON, nullable=False)

    resolved_at = Column(BigInteger, nullable=True)
    approved_version_id = Column(String(50), nullable=True)
