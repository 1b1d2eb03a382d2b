"""Proposal API endpoints."""

from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..core.actor import Actor, require_actor
from ..database import get_db
from ..schemas.proposal import ProposalCreate, ProposalReject, ProposalResponse, RecordCollection, VerifyResult
from ..services import ProposalService

router = APIRouter(prefix="/api/proposals", tags=["proposals"])


@router.get("", response_model=List[ProposalResponse])
def list_pending_proposals(
    collection: RecordCollection = Query(..., description="Record kind"),
    db: Session = Depends(get_db),
):
    """Pending proposals for one kind, newest first."""
    return ProposalService(db).list_pending(collection)


@router.get("/target/{kind}/{record_id}", response_model=List[ProposalResponse])
def list_pending_for_record(
    kind: str,
    record_id: str,
    db: Session = Depends(get_db),
):
    """Pending proposals against any version of one record."""
    return ProposalService(db).list_pending_for_target(kind, record_id)


@router.get("/{proposal_id}", response_model=ProposalResponse)
def get_proposal(
    proposal_id: str,
    db: Session = Depends(get_db),
):
    """Get a proposal in any state."""
    return ProposalService(db).get(proposal_id)


@router.post("", response_model=ProposalResponse, status_code=201)
def create_proposal(
    body: ProposalCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
):
    """Propose an edit. Fails with 409 if a pending proposal already touches one of its fields."""
    return ProposalService(db).propose(
        body.target_collection,
        body.target_id,
        body.proposed_changes,
        body.reason,
        actor,
    )


@router.post("/{proposal_id}/verify", response_model=VerifyResult)
def verify_proposal(
    proposal_id: str,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
):
    """Vote for a proposal. The vote that reaches quorum applies the change."""
    service = ProposalService(db)
    count = service.verify(proposal_id, actor)
    proposal = service.get(proposal_id)
    return {
        "current_verifications": count,
        "required_verifications": proposal.required_verifications,
        "status": proposal.status,
        "approved_version_id": proposal.approved_version_id,
    }


@router.post("/{proposal_id}/reject", response_model=ProposalResponse)
def reject_proposal(
    proposal_id: str,
    body: ProposalReject,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
):
    """Reject a pending proposal. Costs the rejecting session 2 trust points."""
    return ProposalService(db).reject(proposal_id, actor, body.reason)
