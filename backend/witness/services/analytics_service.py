"""Read-only projections over current record versions.

Nothing here writes; every figure is recomputed from the current rows of
each kind.
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.location import region_code
from ..kinds import KINDS
from ..repositories import RecordRepository

logger = logging.getLogger(__name__)

DEFAULT_RECENT_LIMIT = 8
MAX_RECENT_LIMIT = 20

SUBTITLE_SEPARATOR = " · "


def _repo(db: Session, kind) -> RecordRepository:
    return RecordRepository(db, kind, max_hops=settings.resolve_max_hops)


def map_data(db: Session) -> Dict[str, Dict[str, int]]:
    """Current-version counts per province ISO code and kind.

    Records whose province cannot be determined are left out.
    """
    regions: Dict[str, Dict[str, int]] = {}
    unplaced = 0
    for kind in KINDS.values():
        for record in _repo(db, kind).all_current():
            code = region_code(
                getattr(record, kind.province_field),
                getattr(record, kind.location_field),
            )
            if code is None:
                unplaced += 1
                continue
            counts = regions.setdefault(code, {name: 0 for name in KINDS})
            counts[kind.name] += 1
    if unplaced:
        logger.debug(f"{unplaced} record(s) without a recognisable province")
    return regions


def total_stats(db: Session) -> Dict[str, int]:
    """Number of current versions per kind."""
    return {name: _repo(db, kind).count_current() for name, kind in KINDS.items()}


def recent_feed(db: Session, limit: Optional[int] = None) -> List[dict]:
    """Newest current versions across all kinds, as display items.

    ``limit`` defaults to 8 and is clamped to [1, 20].
    """
    limit = DEFAULT_RECENT_LIMIT if limit is None else min(max(limit, 1), MAX_RECENT_LIMIT)

    items = []
    for kind in KINDS.values():
        for record in _repo(db, kind).list_current(limit):
            items.append({
                "id": record.id,
                "kind": kind.name,
                "title": getattr(record, kind.title_field),
                "subtitle": SUBTITLE_SEPARATOR.join(
                    str(getattr(record, f)) for f in kind.subtitle_fields
                ),
                "status": getattr(record, kind.status_field) if kind.status_field else None,
                "created_at": record.created_at,
            })

    items.sort(key=lambda item: item["created_at"], reverse=True)
    return items[:limit]
