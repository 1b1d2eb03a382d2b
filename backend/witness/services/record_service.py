"""Record service: the only entry point that creates a new logical entity.

Creation follows the write protocol shared by every mutation: content
rate-limit gate, validation, store insert, audit append, trust reward,
all committed as one transaction. Reads always resolve to current
versions.
"""

import logging
from typing import Any, Dict, List, Optional, Union

from sqlalchemy.orm import Session

from ..core.actor import Actor
from ..core.clock import now_ms
from ..core.config import settings
from ..database import atomic
from ..exceptions import RecordNotFoundError, ValidationError
from ..kinds import RecordKind, get_kind
from ..repositories import RecordRepository
from . import audit_service
from .rate_limiter import SlidingWindowLimiter, content_limiter
from .trust_service import CREATE_REWARD, TrustLedger

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


class RecordService:
    """Create and read versioned records of any kind."""

    def __init__(self, db: Session, limiter: Optional[SlidingWindowLimiter] = None):
        self.db = db
        self.limiter = limiter or content_limiter()
        self.trust = TrustLedger(db)

    def _repo(self, kind: Union[str, RecordKind]) -> RecordRepository:
        if isinstance(kind, str):
            kind = get_kind(kind)
        return RecordRepository(self.db, kind, max_hops=settings.resolve_max_hops)

    def create(self, kind: str, fields: Dict[str, Any], actor: Actor, reason: str, now: Optional[int] = None):
        """Document a brand-new entity. Returns the inserted version."""
        repo = self._repo(kind)
        reason = (reason or "").strip()
        if not reason:
            raise ValidationError("Reason required", field="reason")
        now = now if now is not None else now_ms()

        with atomic(self.db):
            self.limiter.check_and_record(self.db, actor.session_id, now=now)
            record = repo.create_version(fields, actor.session_id, now=now)
            audit_service.append(
                self.db, actor,
                action="create",
                collection=repo.kind.name,
                document_id=record.id,
                changes=repo.kind.to_response(record),
                reason=reason,
                now=now,
            )
            self.trust.adjust(actor.session_id, CREATE_REWARD)

        logger.info("Created record", extra={"kind": repo.kind.name, "record_id": record.id})
        self.db.refresh(record)
        return record

    def get_by_id(self, kind: str, record_id: str):
        """Current version of the entity ``record_id`` belongs to, from any of its versions."""
        repo = self._repo(kind)
        record = repo.resolve_current(record_id)
        if record is None:
            raise RecordNotFoundError(repo.kind.name, record_id)
        return record

    def get_history(self, kind: str, record_id: str) -> dict:
        """``{"current": version, "history": [oldest, ..., newest]}`` excluding current."""
        repo = self._repo(kind)
        result = repo.get_history(record_id)
        if result is None:
            raise RecordNotFoundError(repo.kind.name, record_id)
        return result

    def list_current(self, kind: str, limit: int = 100) -> List:
        return self._repo(kind).list_current(limit)

    def list_current_paginated(
        self,
        kind: str,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
        search: Optional[str] = None,
    ) -> dict:
        """A page of current versions plus paging metadata."""
        if page < 1:
            raise ValidationError("Page must be at least 1", field="page")
        page_size = max(1, min(page_size, MAX_PAGE_SIZE))
        repo = self._repo(kind)
        items, total = repo.list_current_paginated(page, page_size, search=(search or "").strip() or None)
        return {
            "kind": repo.kind.name,
            "page": page,
            "page_size": page_size,
            "total": total,
            "is_done": page * page_size >= total,
            "items": [repo.kind.to_response(item) for item in items],
        }
