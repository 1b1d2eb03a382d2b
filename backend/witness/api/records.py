"""Record API endpoints.

Records are created here and only here; edits go through proposals.
Every ``{record_id}`` may name any version of an entity and resolves to
its current version.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..core.actor import Actor, require_actor
from ..database import get_db
from ..kinds import get_kind
from ..schemas.record import RecordCreateRequest, RecordHistory, RecordPage
from ..services import RecordService

router = APIRouter(prefix="/api/records/{kind}", tags=["records"])


@router.get("", response_model=RecordPage)
def list_records(
    kind: str,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    q: Optional[str] = Query(None, max_length=200, description="Search the kind's text field"),
    db: Session = Depends(get_db),
):
    """List current versions, newest first."""
    return RecordService(db).list_current_paginated(kind, page=page, page_size=page_size, search=q)


@router.post("", status_code=201)
def create_record(
    kind: str,
    body: RecordCreateRequest,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
):
    """Document a new entity. Counts against the session's content rate limit."""
    record = RecordService(db).create(kind, body.fields, actor, body.reason)
    return get_kind(kind).to_response(record)


@router.get("/{record_id}")
def get_record(
    kind: str,
    record_id: str,
    db: Session = Depends(get_db),
):
    """Get the current version of a record."""
    record = RecordService(db).get_by_id(kind, record_id)
    return get_kind(kind).to_response(record)


@router.get("/{record_id}/history", response_model=RecordHistory)
def get_record_history(
    kind: str,
    record_id: str,
    db: Session = Depends(get_db),
):
    """Current version plus every earlier version, oldest first."""
    result = RecordService(db).get_history(kind, record_id)
    descriptor = get_kind(kind)
    return {
        "current": descriptor.to_response(result["current"]),
        "history": [descriptor.to_response(v) for v in result["history"]],
    }
