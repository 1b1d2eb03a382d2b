"""Versioned record store.

Owns the immutable version chain of every logical entity and the
``current_version`` flag that marks its authoritative row. Two mutation
paths exist: ``create_version`` starts a new chain and
``apply_approved_change`` extends one. Nothing else writes record rows.

Rate limiting and audit are caller obligations; the store only guarantees
the chain invariants.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional

import pydantic
from sqlalchemy.orm import Query

from ..core.clock import now_ms
from ..exceptions import RecordNotFoundError, ValidationError
from ..kinds import RecordKind, get_kind
from ..models.record import domain_fields
from .base import BaseRepository

logger = logging.getLogger(__name__)

# Hop bound applied when resolving historical ids forward.
DEFAULT_MAX_HOPS = 5


def new_record_id() -> str:
    return uuid.uuid4().hex


def validate_schema(schema: type[pydantic.BaseModel], data: Dict[str, Any]) -> pydantic.BaseModel:
    """Validate ``data`` against a pydantic schema, raising our ValidationError."""
    if not isinstance(data, dict):
        raise ValidationError("Expected an object of field values")
    try:
        return schema.model_validate(data)
    except pydantic.ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or None
        raise ValidationError(first.get("msg", "Invalid input"), field=field) from e


class RecordRepository(BaseRepository):
    """Version store for one record kind.

    A kind descriptor selects the table and schemas, so a single
    implementation serves perpetrators, victims and incidents.
    """

    def __init__(self, db, kind: RecordKind, max_hops: int = DEFAULT_MAX_HOPS):
        super().__init__(db)
        self.kind = kind
        self.model_class = kind.model
        self.max_hops = max_hops

    def _not_found(self, entity_id: str) -> RecordNotFoundError:
        return RecordNotFoundError(self.kind.name, entity_id)

    def _current_query(self) -> Query:
        return self.db.query(self.model_class).filter(self.model_class.current_version.is_(True))

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate_new(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Validate a full field set against the kind's create schema."""
        parsed = validate_schema(self.kind.create_schema, fields)
        values = parsed.model_dump(mode="json")
        self._check_references(values)
        return values

    def validate_changes(self, changes: Dict[str, Any]) -> Dict[str, Any]:
        """Validate a partial field map against the kind's update schema.

        Returns only the supplied fields. Raises ValidationError for an
        empty map, unknown or version-control keys, or bad values.
        """
        if not isinstance(changes, dict) or not changes:
            raise ValidationError("No proposed changes provided.", field="proposed_changes")
        parsed = validate_schema(self.kind.update_schema, changes)
        values = parsed.changes()
        if not values:
            raise ValidationError("No proposed changes provided.", field="proposed_changes")
        self._check_references(values)
        return values

    def _check_references(self, values: Dict[str, Any]) -> None:
        """Referenced records must exist when the reference is written."""
        for field, target_kind in self.kind.references.items():
            if field not in values:
                continue
            raw = values[field]
            ids = raw if isinstance(raw, list) else [raw]
            target = RecordRepository(self.db, get_kind(target_kind), self.max_hops)
            for ref_id in ids:
                if target.get_by_id_optional(ref_id) is None:
                    raise ValidationError(
                        f"Referenced {target_kind} record not found: {ref_id}",
                        field=field,
                    )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_version(self, fields: Dict[str, Any], author_session: str, now: Optional[int] = None):
        """Start a new version chain. Returns the inserted (current) version."""
        values = self.validate_new(fields)
        record_id = new_record_id()
        record = self.model_class(
            id=record_id,
            entity_id=record_id,
            created_at=now if now is not None else now_ms(),
            created_by_session=author_session,
            current_version=True,
            superseded_by=None,
            previous_versions=[],
            verification_count=0,
            **values,
        )
        self.db.add(record)
        self.db.flush()
        logger.debug("Created %s version %s", self.kind.name, record_id)
        return record

    def apply_approved_change(self, target_id: str, changes: Dict[str, Any], verification_count: int = 0):
        """Supersede the current version ``target_id`` with ``changes`` overlaid on it.

        The target row is locked and must still be current; otherwise
        RecordNotFoundError is raised and nothing is written. Both rows are
        flushed in the caller's transaction, so readers see either the old
        chain or the new one, never a chain with zero current versions.
        """
        target = self.get_for_update(target_id)
        if target is None or not target.current_version:
            raise RecordNotFoundError(
                self.kind.name,
                target_id,
                message=f"Target record is no longer current: {self.kind.name}/{target_id}",
            )

        fields = domain_fields(target)
        fields.update(changes)
        new_id = new_record_id()

        # Flip the predecessor first: one current row per entity is enforced
        # by a partial unique index, checked statement by statement.
        target.current_version = False
        target.superseded_by = new_id
        self.db.flush()

        successor = self.model_class(
            id=new_id,
            entity_id=target.entity_id,
            created_at=target.created_at,
            created_by_session=target.created_by_session,
            current_version=True,
            superseded_by=None,
            previous_versions=list(target.previous_versions or []) + [target.id],
            verification_count=verification_count,
            **fields,
        )
        self.db.add(successor)
        self.db.flush()

        logger.info(
            "Superseded %s version",
            self.kind.name,
            extra={"kind": self.kind.name, "old_version": target.id, "new_version": new_id,
                   "fields": sorted(changes)},
        )
        return successor

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def resolve_current(self, version_id: str):
        """Follow ``superseded_by`` from any version to the current one.

        Returns None when ``version_id`` does not exist. Stops after
        ``max_hops`` hops, or at a dangling pointer, and returns the last
        version reached; both cases are logged since they indicate a
        damaged chain.
        """
        version = self.get_by_id_optional(version_id)
        if version is None:
            return None

        hops = 0
        while not version.current_version and version.superseded_by:
            if hops >= self.max_hops:
                logger.warning(
                    "Hop bound reached while resolving current version",
                    extra={"kind": self.kind.name, "start_id": version_id,
                           "stopped_at": version.id, "max_hops": self.max_hops},
                )
                break
            successor = self.get_by_id_optional(version.superseded_by)
            if successor is None:
                logger.warning(
                    "Dangling superseded_by pointer",
                    extra={"kind": self.kind.name, "version_id": version.id,
                           "superseded_by": version.superseded_by},
                )
                break
            version = successor
            hops += 1
        return version

    def resolve_authoritative(self, version_id: str):
        """Current version of the entity ``version_id`` belongs to, or None.

        Like ``resolve_current``, but when the walk ends on a row that is not
        current (hop bound, dangling pointer) the current row is looked up by
        ``entity_id`` instead. Returns None when the id is unknown or the
        entity has no current version. Mutations target this, never a
        historical row.
        """
        version = self.resolve_current(version_id)
        if version is None or version.current_version:
            return version
        return self._current_query().filter(self.model_class.entity_id == version.entity_id).one_or_none()

    def get_history(self, version_id: str) -> Optional[dict]:
        """Current version plus every ancestor, oldest first.

        Ancestor ids that fail to load are skipped rather than failing
        the whole lookup.
        """
        current = self.resolve_current(version_id)
        if current is None:
            return None

        history = []
        for ancestor_id in current.previous_versions or []:
            ancestor = self.get_by_id_optional(ancestor_id)
            if ancestor is None:
                logger.warning(
                    "Missing ancestor version skipped",
                    extra={"kind": self.kind.name, "current": current.id, "missing": ancestor_id},
                )
                continue
            history.append(ancestor)
        return {"current": current, "history": history}

    def list_current(self, limit: int = 100) -> List:
        """Current versions, newest first."""
        return (
            self._current_query()
            .order_by(self.model_class.created_at.desc(), self.model_class.id.desc())
            .limit(limit)
            .all()
        )

    def list_current_paginated(self, page: int = 1, page_size: int = 20, search: Optional[str] = None) -> tuple[List, int]:
        """One page of current versions, newest first, plus the total match count.

        With ``search``, matches the kind's designated text column instead of
        returning every current row.
        """
        query = self._current_query()
        if search:
            column = getattr(self.model_class, self.kind.search_field)
            query = query.filter(column.ilike(f"%{search.strip()}%"))
        total = query.count()
        items = (
            query.order_by(self.model_class.created_at.desc(), self.model_class.id.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
            .all()
        )
        return items, total

    def count_current(self) -> int:
        return self._current_query().count()

    def all_current(self) -> List:
        return self._current_query().all()
