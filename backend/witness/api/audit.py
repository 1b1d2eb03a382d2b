"""Audit trail read endpoint."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.audit import AuditEntryResponse
from ..services import audit_service

router = APIRouter(prefix="/api/audit", tags=["audit"])


@router.get("", response_model=List[AuditEntryResponse])
def list_audit_entries(
    session_id: Optional[str] = Query(None),
    document_id: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
):
    """Newest entries first, optionally for one session or one document."""
    if session_id:
        return audit_service.get_by_session(db, session_id, limit)
    if document_id:
        return audit_service.get_by_document(db, document_id, limit)
    return audit_service.get_recent(db, limit)
