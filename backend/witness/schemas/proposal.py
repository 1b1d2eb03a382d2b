"""Proposal schemas."""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel

from .record import TrimmedStr

RecordCollection = Literal["perpetrators", "victims", "incidents"]
ProposalStatus = Literal["pending", "approved", "rejected", "expired"]


class ProposalCreate(BaseModel):
    """Body for POST /api/proposals.

    ``proposed_changes`` is validated against the target kind's update
    schema by the service, since the legal fields depend on the kind.
    """
    target_collection: RecordCollection
    target_id: TrimmedStr
    proposed_changes: Dict[str, Any]
    reason: TrimmedStr

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "target_collection": "perpetrators",
                    "target_id": "3f2c9b1e8a4d4f7e9c0b1a2d3e4f5a6b",
                    "proposed_changes": {"status": "arrested"},
                    "reason": "Arrest reported by two independent outlets",
                }
            ]
        }
    }


class ProposalReject(BaseModel):
    """Body for POST /api/proposals/{id}/reject."""
    reason: TrimmedStr


class ProposalResponse(BaseModel):
    """Schema for proposal response."""
    id: str
    target_collection: str
    target_id: str
    target_entity_id: str
    proposed_changes: Dict[str, Any]
    required_verifications: int
    current_verifications: int
    verified_by_sessions: List[str] = []
    rejected_by_sessions: List[str] = []
    status: ProposalStatus
    proposed_by: str
    proposed_at: int
    expires_at: int
    reason: str
    target_snapshot: Dict[str, Any]
    resolved_at: Optional[int] = None
    approved_version_id: Optional[str] = None

    class Config:
        from_attributes = True


class VerifyResult(BaseModel):
    """Outcome of one verification."""
    current_verifications: int
    required_verifications: int
    status: ProposalStatus
    approved_version_id: Optional[str] = None
