"""Record kind descriptors.

The version store, proposal engine and projections are written once and
parameterised by a ``RecordKind``: the ORM model, the create / update /
response schemas, and the few fields each kind designates for search,
location and display.
"""

from dataclasses import dataclass, field
from typing import Optional, Type

from pydantic import BaseModel

from .database import Base
from .exceptions import ValidationError
from .models import Incident, Perpetrator, Victim
from .schemas.record import (
    IncidentCreate,
    IncidentResponse,
    IncidentUpdate,
    PerpetratorCreate,
    PerpetratorResponse,
    PerpetratorUpdate,
    VictimCreate,
    VictimResponse,
    VictimUpdate,
)


@dataclass(frozen=True)
class RecordKind:
    """Schema descriptor for one versioned record kind."""

    name: str
    model: Type[Base]
    create_schema: Type[BaseModel]
    update_schema: Type[BaseModel]
    response_schema: Type[BaseModel]
    # Free-text column matched by paginated search.
    search_field: str
    # Free-text location and its optional explicit province column.
    location_field: str
    province_field: str
    # Columns used for the recent-activity feed.
    title_field: str
    subtitle_fields: tuple[str, ...]
    status_field: Optional[str] = None
    # Column -> referenced kind; single ids or lists of ids.
    references: dict[str, str] = field(default_factory=dict)

    def to_response(self, record) -> dict:
        return self.response_schema.model_validate(record).model_dump()


PERPETRATORS = RecordKind(
    name="perpetrators",
    model=Perpetrator,
    create_schema=PerpetratorCreate,
    update_schema=PerpetratorUpdate,
    response_schema=PerpetratorResponse,
    search_field="name",
    location_field="last_known_location",
    province_field="last_known_province",
    title_field="name",
    subtitle_fields=("organization", "unit"),
    status_field="status",
)

VICTIMS = RecordKind(
    name="victims",
    model=Victim,
    create_schema=VictimCreate,
    update_schema=VictimUpdate,
    response_schema=VictimResponse,
    search_field="name",
    location_field="incident_location",
    province_field="incident_province",
    title_field="name",
    subtitle_fields=("incident_location", "incident_date"),
    status_field="status",
    references={"linked_perpetrators": "perpetrators"},
)

INCIDENTS = RecordKind(
    name="incidents",
    model=Incident,
    create_schema=IncidentCreate,
    update_schema=IncidentUpdate,
    response_schema=IncidentResponse,
    search_field="description",
    location_field="location",
    province_field="location_province",
    title_field="action_type",
    subtitle_fields=("location", "date"),
    references={"perpetrator_id": "perpetrators", "victim_ids": "victims"},
)

KINDS: dict[str, RecordKind] = {k.name: k for k in (PERPETRATORS, VICTIMS, INCIDENTS)}


def get_kind(name: str) -> RecordKind:
    """Look up a kind by collection name. Raises ValidationError for unknown names."""
    kind = KINDS.get(name)
    if kind is None:
        raise ValidationError(
            f"Unknown record kind: {name}. Expected one of: {', '.join(KINDS)}",
            field="kind",
        )
    return kind
