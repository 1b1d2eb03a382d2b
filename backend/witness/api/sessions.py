"""Contributor session endpoints.

The session id in the path is the client-minted pseudonymous token; no
account or credential is involved.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..core.actor import client_meta
from ..database import get_db
from ..schemas.session import ContributionAllowance, ContributionRecorded, SessionResponse, SessionUpsert
from ..services import SessionService

router = APIRouter(prefix="/api/sessions", tags=["sessions"])


@router.put("/{session_id}", response_model=SessionResponse)
def upsert_session(
    session_id: str,
    body: SessionUpsert,
    request: Request,
    db: Session = Depends(get_db),
):
    """Register a session, or refresh its fingerprint and last-seen time."""
    ip_hash, _ = client_meta(request)
    return SessionService(db).upsert(session_id, body.fingerprint, ip_hash)


@router.get("/{session_id}", response_model=SessionResponse)
def get_session(session_id: str, db: Session = Depends(get_db)):
    return SessionService(db).get(session_id)


@router.get("/{session_id}/can-contribute", response_model=ContributionAllowance)
def can_contribute(session_id: str, db: Session = Depends(get_db)):
    """Whether the session is under its hourly contribution cap. Records nothing."""
    return SessionService(db).can_contribute(session_id)


@router.post("/{session_id}/contributions", response_model=ContributionRecorded)
def record_contribution(session_id: str, db: Session = Depends(get_db)):
    """Count one contribution against the hourly cap; 429 once it is reached."""
    count = SessionService(db).record_contribution(session_id)
    return {"contribution_count": count}
