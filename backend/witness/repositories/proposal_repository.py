"""Proposal repository for database operations."""

from typing import List

from ..exceptions import ProposalNotFoundError
from ..models.proposal import PENDING, Proposal
from .base import BaseRepository


class ProposalRepository(BaseRepository[Proposal]):
    """Repository for proposal lookups. State transitions live in ProposalService."""

    model_class = Proposal

    def _not_found(self, entity_id: str) -> ProposalNotFoundError:
        return ProposalNotFoundError(entity_id)

    def add(self, proposal: Proposal) -> Proposal:
        self.db.add(proposal)
        self.db.flush()
        return proposal

    def list_pending(self, collection: str) -> List[Proposal]:
        """Pending proposals for one kind, newest first."""
        return (
            self.db.query(Proposal)
            .filter(Proposal.target_collection == collection, Proposal.status == PENDING)
            .order_by(Proposal.proposed_at.desc())
            .all()
        )

    def list_pending_for_entity(self, collection: str, entity_id: str, for_update: bool = False) -> List[Proposal]:
        """Pending proposals targeting any version of one logical entity, newest first."""
        query = (
            self.db.query(Proposal)
            .filter(
                Proposal.target_collection == collection,
                Proposal.target_entity_id == entity_id,
                Proposal.status == PENDING,
            )
            .order_by(Proposal.proposed_at.desc())
        )
        if for_update:
            query = query.with_for_update()
        return query.all()

    def list_overdue(self, now: int) -> List[Proposal]:
        """Pending proposals whose expiry time has passed."""
        return (
            self.db.query(Proposal)
            .filter(Proposal.status == PENDING, Proposal.expires_at <= now)
            .order_by(Proposal.expires_at.asc())
            .with_for_update()
            .all()
        )
