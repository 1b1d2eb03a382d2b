"""Data access repositories."""

from .base import BaseRepository
from .record_repository import RecordRepository
from .proposal_repository import ProposalRepository
from .session_repository import SessionRepository

__all__ = [
    "BaseRepository",
    "RecordRepository",
    "ProposalRepository",
    "SessionRepository",
]
