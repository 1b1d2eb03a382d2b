"""Proposal & consensus engine.

Owns the lifecycle of crowd-sourced edits:

    pending -> approved   (quorum of distinct verifying sessions reached)
    pending -> rejected   (any session rejects)
    pending -> expired    (startup sweep after ``expires_at``)

Terminal states never change. Each public mutation runs as one database
transaction with the proposal row locked, so the status check, the vote
increment and the approval (a new record version) commit together or
not at all. A second approval racing the first finds the proposal no
longer pending and fails with InvalidStateError instead of writing a
second version.

At most one pending proposal may touch a given field of a given entity.
Overlapping proposals are refused with ConflictError rather than merged,
which is also what lets an approval overlay its changes on the *current*
version instead of the snapshot taken at proposal time.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.actor import SYSTEM_ACTOR, Actor
from ..core.clock import now_ms
from ..core.config import settings
from ..database import atomic
from ..exceptions import (
    ConflictError,
    DuplicateVerificationError,
    InvalidStateError,
    ProposalNotFoundError,
    RecordNotFoundError,
    ValidationError,
)
from ..kinds import get_kind
from ..models.proposal import APPROVED, EXPIRED, PENDING, REJECTED, Proposal
from ..repositories import ProposalRepository, RecordRepository
from . import audit_service
from .rate_limiter import SlidingWindowLimiter, content_limiter
from .trust_service import PROPOSE_REWARD, REJECT_PENALTY, VERIFY_REWARD, TrustLedger

logger = logging.getLogger(__name__)

PROPOSALS_COLLECTION = "proposals"


class ProposalService:
    """Propose, verify, reject and expire edits to versioned records."""

    def __init__(self, db: Session, limiter: Optional[SlidingWindowLimiter] = None):
        self.db = db
        self.limiter = limiter or content_limiter()
        self.proposals = ProposalRepository(db)
        self.trust = TrustLedger(db)

    def _records(self, collection: str) -> RecordRepository:
        return RecordRepository(self.db, get_kind(collection), max_hops=settings.resolve_max_hops)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def propose(
        self,
        target_collection: str,
        target_id: str,
        changes: Dict[str, Any],
        reason: str,
        actor: Actor,
        now: Optional[int] = None,
    ) -> Proposal:
        """Open a pending proposal against the current version of a record."""
        records = self._records(target_collection)
        reason = (reason or "").strip()
        if not reason:
            raise ValidationError("Reason required", field="reason")
        now = now if now is not None else now_ms()

        with atomic(self.db):
            self.limiter.check_and_record(self.db, actor.session_id, now=now)

            target = records.resolve_authoritative(target_id)
            if target is None:
                raise RecordNotFoundError(records.kind.name, target_id)

            values = records.validate_changes(changes)
            required = self.trust.required_verifications(actor.session_id)

            pending = self.proposals.list_pending_for_entity(
                records.kind.name, target.entity_id, for_update=True
            )
            overlap = set(values).intersection(
                field for other in pending for field in (other.proposed_changes or {})
            )
            if overlap:
                raise ConflictError(sorted(overlap))

            proposal = self.proposals.add(Proposal(
                id=uuid.uuid4().hex,
                target_collection=records.kind.name,
                target_id=target.id,
                target_entity_id=target.entity_id,
                proposed_changes=values,
                required_verifications=required,
                current_verifications=0,
                verified_by_sessions=[],
                rejected_by_sessions=[],
                status=PENDING,
                proposed_by=actor.session_id,
                proposed_at=now,
                expires_at=now + settings.proposal_expiry_ms,
                reason=reason,
                target_snapshot=records.kind.to_response(target),
            ))

            audit_service.append(
                self.db, actor,
                action="update",
                collection=PROPOSALS_COLLECTION,
                document_id=proposal.id,
                changes={"target_collection": records.kind.name, "target_id": target.id,
                         "proposed_changes": values},
                reason=reason,
                now=now,
            )
            self.trust.adjust(actor.session_id, PROPOSE_REWARD)

        logger.info(
            "Proposal opened",
            extra={"proposal_id": proposal.id, "kind": records.kind.name, "target_id": proposal.target_id,
                   "fields": sorted(values), "required_verifications": required},
        )
        self.db.refresh(proposal)
        return proposal

    def verify(self, proposal_id: str, actor: Actor, now: Optional[int] = None) -> int:
        """Cast one vote; approve the proposal when it reaches quorum.

        Returns the updated verification count. If approval fails (the
        target was superseded underneath it, say) the vote is rolled back
        with it and the error propagates.
        """
        now = now if now is not None else now_ms()

        with atomic(self.db):
            self.limiter.check_and_record(self.db, actor.session_id, now=now)

            proposal = self.proposals.get_for_update(proposal_id)
            if proposal is None:
                raise ProposalNotFoundError(proposal_id)
            if proposal.status != PENDING:
                raise InvalidStateError(proposal_id, proposal.status)

            voters = list(proposal.verified_by_sessions or [])
            if actor.session_id in voters:
                raise DuplicateVerificationError(proposal_id, actor.session_id)

            # Reassign rather than append: JSON columns do not track in-place mutation.
            proposal.verified_by_sessions = voters + [actor.session_id]
            proposal.current_verifications += 1
            count = proposal.current_verifications

            changes: Dict[str, Any] = {"verified_by": actor.session_id, "current_verifications": count}
            if count >= proposal.required_verifications:
                successor = self._approve(proposal, now)
                changes["approved_version_id"] = successor.id

            audit_service.append(
                self.db, actor,
                action="verify",
                collection=PROPOSALS_COLLECTION,
                document_id=proposal.id,
                changes=changes,
                reason="verification",
                now=now,
            )
            self.trust.record_verification(actor.session_id)
            self.trust.adjust(actor.session_id, VERIFY_REWARD)

        return count

    def _approve(self, proposal: Proposal, now: int):
        """Apply the proposal to the target's current version and close it.

        Runs inside verify's transaction with the proposal row locked.
        """
        records = self._records(proposal.target_collection)
        current = records.resolve_authoritative(proposal.target_id)
        if current is None:
            raise RecordNotFoundError(records.kind.name, proposal.target_id)

        successor = records.apply_approved_change(
            current.id,
            proposal.proposed_changes,
            verification_count=proposal.current_verifications,
        )
        proposal.status = APPROVED
        proposal.resolved_at = now
        proposal.approved_version_id = successor.id
        self.db.flush()

        logger.info(
            "Proposal approved",
            extra={"proposal_id": proposal.id, "kind": records.kind.name,
                   "old_version": current.id, "new_version": successor.id},
        )
        return successor

    def reject(self, proposal_id: str, actor: Actor, reason: str, now: Optional[int] = None) -> Proposal:
        """Close a pending proposal as rejected.

        Any session may reject; there is no ownership check. The trust
        penalty lands on the rejecting session, not on the proposer.
        """
        reason = (reason or "").strip()
        if not reason:
            raise ValidationError("Reason required", field="reason")
        now = now if now is not None else now_ms()

        with atomic(self.db):
            proposal = self.proposals.get_for_update(proposal_id)
            if proposal is None:
                raise ProposalNotFoundError(proposal_id)
            if proposal.status != PENDING:
                raise InvalidStateError(proposal_id, proposal.status)

            proposal.status = REJECTED
            proposal.resolved_at = now
            proposal.rejected_by_sessions = list(proposal.rejected_by_sessions or []) + [actor.session_id]
            self.db.flush()

            audit_service.append(
                self.db, actor,
                action="reject",
                collection=PROPOSALS_COLLECTION,
                document_id=proposal.id,
                changes={"status": REJECTED},
                reason=reason,
                now=now,
            )
            self.trust.adjust(actor.session_id, REJECT_PENALTY)

        logger.info("Proposal rejected", extra={"proposal_id": proposal_id})
        self.db.refresh(proposal)
        return proposal

    def expire_overdue(self, now: Optional[int] = None) -> int:
        """Move every pending proposal past ``expires_at`` to expired. Returns how many."""
        now = now if now is not None else now_ms()
        with atomic(self.db):
            overdue = self.proposals.list_overdue(now)
            for proposal in overdue:
                proposal.status = EXPIRED
                proposal.resolved_at = now
                audit_service.append(
                    self.db, SYSTEM_ACTOR,
                    action="expire",
                    collection=PROPOSALS_COLLECTION,
                    document_id=proposal.id,
                    changes={"status": EXPIRED, "expires_at": proposal.expires_at},
                    reason="expired",
                    now=now,
                )
            expired = len(overdue)

        if expired:
            logger.info(f"Expired {expired} overdue proposal(s)")
        return expired

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, proposal_id: str) -> Proposal:
        return self.proposals.get_by_id(proposal_id)

    def list_pending(self, target_collection: str) -> List[Proposal]:
        """Pending proposals of one kind, newest first."""
        return self.proposals.list_pending(get_kind(target_collection).name)

    def list_pending_for_target(self, target_collection: str, target_id: str) -> List[Proposal]:
        """Pending proposals against any version of the record ``target_id`` belongs to."""
        records = self._records(target_collection)
        target = records.get_by_id_optional(target_id)
        if target is None:
            raise RecordNotFoundError(records.kind.name, target_id)
        return self.proposals.list_pending_for_entity(records.kind.name, target.entity_id)
