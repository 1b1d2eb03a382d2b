"""Database models."""

from .record import Perpetrator, Victim, Incident
from .proposal import Proposal
from .session import ContributorSession, AuditLog

__all__ = [
    "Perpetrator", "Victim", "Incident",
    "Proposal",
    "ContributorSession", "AuditLog",
]
