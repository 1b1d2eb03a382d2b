"""Pydantic schemas for API validation."""

from .record import (
    PerpetratorCreate,
    PerpetratorUpdate,
    PerpetratorResponse,
    VictimCreate,
    VictimUpdate,
    VictimResponse,
    IncidentCreate,
    IncidentUpdate,
    IncidentResponse,
    RecordCreateRequest,
    RecordPage,
    RecordHistory,
)
from .proposal import (
    ProposalCreate,
    ProposalReject,
    ProposalResponse,
    VerifyResult,
)
from .session import (
    SessionUpsert,
    SessionResponse,
    ContributionAllowance,
    ContributionRecorded,
)
from .audit import AuditEntryResponse
from .analytics import RegionCounts, TotalStats, RecentItem

__all__ = [
    "PerpetratorCreate",
    "PerpetratorUpdate",
    "PerpetratorResponse",
    "VictimCreate",
    "VictimUpdate",
    "VictimResponse",
    "IncidentCreate",
    "IncidentUpdate",
    "IncidentResponse",
    "RecordCreateRequest",
    "RecordPage",
    "RecordHistory",
    "ProposalCreate",
    "ProposalReject",
    "ProposalResponse",
    "VerifyResult",
    "SessionUpsert",
    "SessionResponse",
    "ContributionAllowance",
    "ContributionRecorded",
    "AuditEntryResponse",
    "RegionCounts",
    "TotalStats",
    "RecentItem",
]
