"""Contributor session schemas."""

from pydantic import BaseModel

from .record import TrimmedStr


class SessionUpsert(BaseModel):
    """Body for PUT /api/sessions/{session_id}."""
    fingerprint: TrimmedStr


class SessionResponse(BaseModel):
    """Schema for session response. The address hash is never returned."""
    session_id: str
    first_seen: int
    last_seen: int
    contribution_count: int
    verification_count: int
    trust_score: int

    class Config:
        from_attributes = True


class ContributionAllowance(BaseModel):
    allowed: bool
    remaining: int


class ContributionRecorded(BaseModel):
    contribution_count: int
