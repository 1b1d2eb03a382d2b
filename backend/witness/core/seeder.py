"""Seed demo records on first startup.

Loads a JSON fixture of sample perpetrators, victims and incidents into an
empty database so a fresh install has something to browse. Only runs when
``SEED_DEMO_DATA`` is set, and skips if any record already exists.

Fixture entries carry a ``key``; other entries refer to a seeded record
as ``"@<key>"`` in reference fields, resolved to the new id on insert.
Kinds are loaded in dependency order.
"""

import json
import logging
from pathlib import Path

from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

_FIXTURE_PATH = Path(__file__).parent.parent.parent / "fixtures" / "seed_records.json"

_LOAD_ORDER = ("perpetrators", "victims", "incidents")


def _resolve_refs(value, ids: dict):
    if isinstance(value, list):
        return [_resolve_refs(v, ids) for v in value]
    if isinstance(value, str) and value.startswith("@"):
        return ids.get(value[1:], value)
    return value


def seed_demo_records(db: Session, fixture_path: Path = _FIXTURE_PATH) -> int:
    """Load seed records if the database holds none.

    Args:
        db: An open SQLAlchemy session.
        fixture_path: JSON fixture to load.

    Returns:
        Number of records seeded (0 if skipped).
    """
    from ..core.actor import SEED_ACTOR
    from ..database import atomic
    from ..exceptions import WitnessException
    from ..kinds import KINDS
    from ..repositories import RecordRepository
    from ..services import audit_service

    existing = sum(RecordRepository(db, kind).count_current() for kind in KINDS.values())
    if existing > 0:
        logger.debug("Database has %d records, skipping seed", existing)
        return 0

    if not fixture_path.exists():
        logger.debug("No seed fixture at %s", fixture_path)
        return 0

    try:
        with open(fixture_path) as f:
            fixture = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Failed to read seed fixture: %s", e)
        return 0

    ids: dict[str, str] = {}
    seeded = 0

    with atomic(db):
        for kind_name in _LOAD_ORDER:
            repo = RecordRepository(db, KINDS[kind_name])
            for entry in fixture.get(kind_name, []):
                fields = {k: _resolve_refs(v, ids) for k, v in entry.get("fields", {}).items()}
                try:
                    record = repo.create_version(fields, SEED_ACTOR.session_id)
                except WitnessException as e:
                    logger.warning("Failed to seed %s '%s': %s", kind_name, entry.get("key", "?"), e.message)
                    continue
                audit_service.append(
                    db, SEED_ACTOR,
                    action="create",
                    collection=kind_name,
                    document_id=record.id,
                    changes=fields,
                    reason="demo seed",
                )
                if entry.get("key"):
                    ids[entry["key"]] = record.id
                seeded += 1

    if seeded:
        logger.info("Seeded %d records from fixture", seeded)
    return seeded
