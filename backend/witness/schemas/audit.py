"""Audit trail schemas."""

from pydantic import BaseModel, field_validator
from typing import Any
import json


class AuditEntryResponse(BaseModel):
    """One audit entry. ``changes`` is decoded from its stored JSON text."""
    id: int
    action: str
    collection: str
    document_id: str
    changes: Any
    session_id: str
    timestamp: int
    reason: str

    @field_validator("changes", mode="before")
    @classmethod
    def decode_changes(cls, v):
        if isinstance(v, str):
            try:
                return json.loads(v)
            except ValueError:
                return v
        return v

    class Config:
        from_attributes = True
