"""Record schemas: create, update and response shapes for each kind."""

from typing import Annotated, Any, ClassVar, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, model_validator

from ..core.location import format_location

TrimmedStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

PerpetratorStatus = Literal["active", "arrested", "fled", "deceased", "unknown"]
VictimStatus = Literal["murdered", "captured", "vanished", "released", "confirmed_dead"]
ActionType = Literal["killing", "torture", "arrest", "assault", "other"]


def _compose_location(model: BaseModel, location_field: str, province_field: str, city_field: str) -> None:
    """Fill an omitted location string from its province / city parts."""
    if getattr(model, location_field):
        return
    composed = format_location(getattr(model, province_field), getattr(model, city_field))
    if not composed:
        raise ValueError(f"{location_field} is required")
    setattr(model, location_field, composed)


# ---------------------------------------------------------------------------
# Create schemas
# ---------------------------------------------------------------------------

class PerpetratorCreate(BaseModel):
    """Fields required to document a new perpetrator."""
    model_config = ConfigDict(extra="forbid")

    name: TrimmedStr
    aliases: List[TrimmedStr] = []
    photo_urls: List[TrimmedStr] = []
    organization: TrimmedStr
    unit: TrimmedStr
    position: TrimmedStr
    rank: TrimmedStr
    status: PerpetratorStatus
    last_known_province: Optional[TrimmedStr] = None
    last_known_city: Optional[TrimmedStr] = None
    last_known_location: Optional[TrimmedStr] = None

    @model_validator(mode="after")
    def fill_location(self):
        _compose_location(self, "last_known_location", "last_known_province", "last_known_city")
        return self


class VictimCreate(BaseModel):
    """Fields required to document a new victim."""
    model_config = ConfigDict(extra="forbid")

    name: TrimmedStr
    age: int = Field(ge=0)
    photo_urls: List[TrimmedStr] = []
    hometown_province: Optional[TrimmedStr] = None
    hometown_city: Optional[TrimmedStr] = None
    hometown: Optional[TrimmedStr] = None
    status: VictimStatus
    incident_province: Optional[TrimmedStr] = None
    incident_city: Optional[TrimmedStr] = None
    incident_date: TrimmedStr
    incident_location: Optional[TrimmedStr] = None
    circumstances: TrimmedStr
    evidence_links: List[TrimmedStr] = []
    news_reports: List[TrimmedStr] = []
    witness_accounts: List[TrimmedStr] = []
    linked_perpetrators: List[TrimmedStr] = []

    @model_validator(mode="after")
    def fill_locations(self):
        _compose_location(self, "hometown", "hometown_province", "hometown_city")
        _compose_location(self, "incident_location", "incident_province", "incident_city")
        return self


class IncidentCreate(BaseModel):
    """Fields required to document a new incident."""
    model_config = ConfigDict(extra="forbid")

    perpetrator_id: TrimmedStr
    victim_ids: List[TrimmedStr] = []
    date: TrimmedStr
    location_province: Optional[TrimmedStr] = None
    location_city: Optional[TrimmedStr] = None
    location: Optional[TrimmedStr] = None
    description: TrimmedStr
    action_type: ActionType
    evidence_urls: List[TrimmedStr] = []
    video_links: List[TrimmedStr] = []
    document_links: List[TrimmedStr] = []
    witness_statements: List[TrimmedStr] = []

    @model_validator(mode="after")
    def fill_location(self):
        _compose_location(self, "location", "location_province", "location_city")
        return self


# ---------------------------------------------------------------------------
# Update schemas (proposed changes)
# ---------------------------------------------------------------------------

class _RecordUpdate(BaseModel):
    """Every mutable field optional; unknown and version-control keys rejected.

    An explicit null is only accepted for the optional province / city columns.
    """
    model_config = ConfigDict(extra="forbid")

    nullable_fields: ClassVar[frozenset] = frozenset()

    @model_validator(mode="after")
    def reject_nulls(self):
        for name in self.model_fields_set:
            if getattr(self, name) is None and name not in self.nullable_fields:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> Dict[str, Any]:
        """Only the fields the caller actually supplied, JSON-ready."""
        return self.model_dump(mode="json", exclude_unset=True)


class PerpetratorUpdate(_RecordUpdate):
    nullable_fields: ClassVar[frozenset] = frozenset({"last_known_province", "last_known_city"})

    name: Optional[TrimmedStr] = None
    aliases: Optional[List[TrimmedStr]] = None
    photo_urls: Optional[List[TrimmedStr]] = None
    organization: Optional[TrimmedStr] = None
    unit: Optional[TrimmedStr] = None
    position: Optional[TrimmedStr] = None
    rank: Optional[TrimmedStr] = None
    status: Optional[PerpetratorStatus] = None
    last_known_province: Optional[TrimmedStr] = None
    last_known_city: Optional[TrimmedStr] = None
    last_known_location: Optional[TrimmedStr] = None


class VictimUpdate(_RecordUpdate):
    nullable_fields: ClassVar[frozenset] = frozenset({
        "hometown_province", "hometown_city", "incident_province", "incident_city",
    })

    name: Optional[TrimmedStr] = None
    age: Optional[int] = Field(default=None, ge=0)
    photo_urls: Optional[List[TrimmedStr]] = None
    hometown_province: Optional[TrimmedStr] = None
    hometown_city: Optional[TrimmedStr] = None
    hometown: Optional[TrimmedStr] = None
    status: Optional[VictimStatus] = None
    incident_province: Optional[TrimmedStr] = None
    incident_city: Optional[TrimmedStr] = None
    incident_date: Optional[TrimmedStr] = None
    incident_location: Optional[TrimmedStr] = None
    circumstances: Optional[TrimmedStr] = None
    evidence_links: Optional[List[TrimmedStr]] = None
    news_reports: Optional[List[TrimmedStr]] = None
    witness_accounts: Optional[List[TrimmedStr]] = None
    linked_perpetrators: Optional[List[TrimmedStr]] = None


class IncidentUpdate(_RecordUpdate):
    nullable_fields: ClassVar[frozenset] = frozenset({"location_province", "location_city"})

    perpetrator_id: Optional[TrimmedStr] = None
    victim_ids: Optional[List[TrimmedStr]] = None
    date: Optional[TrimmedStr] = None
    location_province: Optional[TrimmedStr] = None
    location_city: Optional[TrimmedStr] = None
    location: Optional[TrimmedStr] = None
    description: Optional[TrimmedStr] = None
    action_type: Optional[ActionType] = None
    evidence_urls: Optional[List[TrimmedStr]] = None
    video_links: Optional[List[TrimmedStr]] = None
    document_links: Optional[List[TrimmedStr]] = None
    witness_statements: Optional[List[TrimmedStr]] = None


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class VersionFields(BaseModel):
    """Version-control fields present on every record response."""
    id: str
    entity_id: str
    created_at: int
    created_by_session: str
    current_version: bool
    superseded_by: Optional[str] = None
    previous_versions: List[str] = []
    verification_count: int = 0

    class Config:
        from_attributes = True


class PerpetratorResponse(VersionFields):
    name: str
    aliases: List[str] = []
    photo_urls: List[str] = []
    organization: str
    unit: str
    position: str
    rank: str
    status: str
    last_known_province: Optional[str] = None
    last_known_city: Optional[str] = None
    last_known_location: str


class VictimResponse(VersionFields):
    name: str
    age: int
    photo_urls: List[str] = []
    hometown_province: Optional[str] = None
    hometown_city: Optional[str] = None
    hometown: str
    status: str
    incident_province: Optional[str] = None
    incident_city: Optional[str] = None
    incident_date: str
    incident_location: str
    circumstances: str
    evidence_links: List[str] = []
    news_reports: List[str] = []
    witness_accounts: List[str] = []
    linked_perpetrators: List[str] = []


class IncidentResponse(VersionFields):
    perpetrator_id: str
    victim_ids: List[str] = []
    date: str
    location_province: Optional[str] = None
    location_city: Optional[str] = None
    location: str
    description: str
    action_type: str
    evidence_urls: List[str] = []
    video_links: List[str] = []
    document_links: List[str] = []
    witness_statements: List[str] = []


# ---------------------------------------------------------------------------
# Requests and envelopes
# ---------------------------------------------------------------------------

class RecordCreateRequest(BaseModel):
    """Body for POST /api/records/{kind}. ``fields`` is validated per kind by the service."""
    reason: TrimmedStr
    fields: Dict[str, Any]

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "reason": "Identified in footage from the central square",
                    "fields": {
                        "name": "Reza Farhadi",
                        "aliases": ["Farhadi"],
                        "organization": "IRGC",
                        "unit": "Tehran Unit 3",
                        "position": "Commander",
                        "rank": "Colonel",
                        "status": "active",
                        "last_known_province": "Tehran",
                    },
                }
            ]
        }
    }


class RecordPage(BaseModel):
    """One page of current versions, newest first."""
    kind: str
    page: int
    page_size: int
    total: int
    is_done: bool
    items: List[Dict[str, Any]]


class RecordHistory(BaseModel):
    """Current version plus its ancestry, oldest first."""
    current: Dict[str, Any]
    history: List[Dict[str, Any]]
