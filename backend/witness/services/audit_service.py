"""Audit trail: records every state-changing operation.

Entries are immutable. The service exposes a write-only ``append`` used by
the other services, plus plain indexed reads for downstream consumers.

Unlike a best-effort log, ``append`` runs inside the caller's transaction:
if the entry cannot be written, the change it describes is rolled back
with it.

Usage in service layer:
    audit_service.append(db, actor, action="verify", collection="proposals",
                         document_id=proposal.id, changes={"verified_by": actor.session_id},
                         reason="verification")
"""

import json
import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from ..core.actor import Actor
from ..core.clock import now_ms
from ..models.session import AuditLog

logger = logging.getLogger(__name__)

ACTIONS = frozenset({"create", "update", "verify", "reject", "expire"})


def append(
    db: Session,
    actor: Actor,
    action: str,
    collection: str,
    document_id: str,
    changes: Any,
    reason: str,
    now: Optional[int] = None,
) -> AuditLog:
    """Add an audit entry to the current transaction."""
    if action not in ACTIONS:
        raise ValueError(f"Unknown audit action: {action}")
    entry = AuditLog(
        action=action,
        collection=collection,
        document_id=document_id,
        changes=changes if isinstance(changes, str) else json.dumps(changes, sort_keys=True, default=str),
        session_id=actor.session_id,
        timestamp=now if now is not None else now_ms(),
        ip_hash=actor.ip_hash,
        user_agent=actor.user_agent,
        reason=reason,
    )
    db.add(entry)
    db.flush()
    logger.debug("Audit %s %s/%s", action, collection, document_id)
    return entry


def get_recent(db: Session, limit: int = 100) -> list[AuditLog]:
    """Get the most recent audit log entries."""
    return (
        db.query(AuditLog)
        .order_by(AuditLog.timestamp.desc(), AuditLog.id.desc())
        .limit(limit)
        .all()
    )


def get_by_session(db: Session, session_id: str, limit: int = 100) -> list[AuditLog]:
    """Get audit log entries written by one session."""
    return (
        db.query(AuditLog)
        .filter(AuditLog.session_id == session_id)
        .order_by(AuditLog.timestamp.desc(), AuditLog.id.desc())
        .limit(limit)
        .all()
    )


def get_by_document(db: Session, document_id: str, limit: int = 100) -> list[AuditLog]:
    """Get audit log entries for one record version or proposal."""
    return (
        db.query(AuditLog)
        .filter(AuditLog.document_id == document_id)
        .order_by(AuditLog.timestamp.desc(), AuditLog.id.desc())
        .limit(limit)
        .all()
    )
