"""Versioned record models.

Every kind is its own append-growing table of immutable version rows.
Editing never updates a row's domain fields: it inserts a new version and
flips the predecessor's ``current_version`` / ``superseded_by`` pointer.
"""

from sqlalchemy import BigInteger, Boolean, Column, Index, Integer, JSON, String, Text, text

from ..database import Base


def _single_current_index(table: str) -> Index:
    """At most one current row per entity, enforced by the database."""
    return Index(
        f"uq_{table}_current_entity",
        "entity_id",
        unique=True,
        sqlite_where=text("current_version = 1"),
        postgresql_where=text("current_version"),
    )


class VersionedRecordMixin:
    """Version-control columns shared by every record kind."""

    # Primary key of this specific version; never reused.
    id = Column(String(50), primary_key=True)

    # Id of the first version of the logical entity, copied onto every successor.
    entity_id = Column(String(50), nullable=False)

    created_at = Column(BigInteger, nullable=False)  # epoch millis
    created_by_session = Column(String(100), nullable=False)

    current_version = Column(Boolean, nullable=False, default=True)
    superseded_by = Column(String(50), nullable=True, default=None)
    # Ordered ancestry, oldest first.
    previous_versions = Column(JSON, nullable=False, default=list)

    verification_count = Column(Integer, nullable=False, default=0)


class Perpetrator(VersionedRecordMixin, Base):
    """Member of a state security organisation."""

    __tablename__ = "perpetrators"
    __table_args__ = (
        Index("ix_perpetrators_current", "current_version", "created_at"),
        Index("ix_perpetrators_session", "created_by_session", "current_version"),
        Index("ix_perpetrators_status", "status", "current_version"),
        Index("ix_perpetrators_entity", "entity_id"),
        _single_current_index("perpetrators"),
    )

    name = Column(String(255), nullable=False)
    aliases = Column(JSON, nullable=False, default=list)
    photo_urls = Column(JSON, nullable=False, default=list)
    organization = Column(String(255), nullable=False)
    unit = Column(String(255), nullable=False)
    position = Column(String(255), nullable=False)
    rank = Column(String(100), nullable=False)
    # Allowed values: active, arrested, fled, deceased, unknown
    status = Column(String(20), nullable=False)
    last_known_province = Column(String(100), nullable=True)
    last_known_city = Column(String(100), nullable=True)
    last_known_location = Column(Text, nullable=False)


class Victim(VersionedRecordMixin, Base):
    """Person killed, detained or disappeared."""

    __tablename__ = "victims"
    __table_args__ = (
        Index("ix_victims_current", "current_version", "created_at"),
        Index("ix_victims_session", "created_by_session", "current_version"),
        Index("ix_victims_status", "status", "current_version"),
        Index("ix_victims_entity", "entity_id"),
        _single_current_index("victims"),
    )

    name = Column(String(255), nullable=False)
    age = Column(Integer, nullable=False)
    photo_urls = Column(JSON, nullable=False, default=list)
    hometown_province = Column(String(100), nullable=True)
    hometown_city = Column(String(100), nullable=True)
    hometown = Column(String(255), nullable=False)
    # Allowed values: murdered, captured, vanished, released, confirmed_dead
    status = Column(String(20), nullable=False)
    incident_province = Column(String(100), nullable=True)
    incident_city = Column(String(100), nullable=True)
    incident_date = Column(String(50), nullable=False)
    incident_location = Column(Text, nullable=False)
    circumstances = Column(Text, nullable=False)
    evidence_links = Column(JSON, nullable=False, default=list)
    news_reports = Column(JSON, nullable=False, default=list)
    witness_accounts = Column(JSON, nullable=False, default=list)
    linked_perpetrators = Column(JSON, nullable=False, default=list)


class Incident(VersionedRecordMixin, Base):
    """A documented act tying a perpetrator to one or more victims."""

    __tablename__ = "incidents"
    __table_args__ = (
        Index("ix_incidents_current", "current_version", "created_at"),
        Index("ix_incidents_session", "created_by_session", "current_version"),
        Index("ix_incidents_perpetrator", "perpetrator_id", "current_version"),
        Index("ix_incidents_entity", "entity_id"),
        _single_current_index("incidents"),
    )

    perpetrator_id = Column(String(50), nullable=False)
    victim_ids = Column(JSON, nullable=False, default=list)
    date = Column(String(50), nullable=False)
    location_province = Column(String(100), nullable=True)
    location_city = Column(String(100), nullable=True)
    location = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    # Allowed values: killing, torture, arrest, assault, other
    action_type = Column(String(20), nullable=False)
    evidence_urls = Column(JSON, nullable=False, default=list)
    video_links = Column(JSON, nullable=False, default=list)
    document_links = Column(JSON, nullable=False, default=list)
    witness_statements = Column(JSON, nullable=False, default=list)


# Columns owned by the store; never copied from client input.
VERSION_CONTROL_FIELDS = frozenset({
    "id", "entity_id", "created_at", "created_by_session",
    "current_version", "superseded_by", "previous_versions", "verification_count",
})


def domain_fields(record) -> dict:
    """Domain column values of a version row, excluding version-control columns."""
    return {
        col.name: getattr(record, col.name)
        for col in record.__table__.columns
        if col.name not in VERSION_CONTROL_FIELDS
    }

