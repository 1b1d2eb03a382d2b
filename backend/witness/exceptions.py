"""Custom exception hierarchy for the witness registry."""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Lookup errors
    RECORD_NOT_FOUND = "RECORD_NOT_FOUND"
    PROPOSAL_NOT_FOUND = "PROPOSAL_NOT_FOUND"
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Throttling
    RATE_LIMITED = "RATE_LIMITED"

    # Consensus errors
    CONFLICT = "CONFLICT"
    INVALID_STATE = "INVALID_STATE"
    DUPLICATE_VERIFICATION = "DUPLICATE_VERIFICATION"


class WitnessException(Exception):
    """
    Base exception for all registry errors.

    Provides structured error responses with:
    - Human-readable message
    - Machine-readable error code
    - HTTP status code
    - Optional additional details
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        return {
            "error": self.error_code.value,
            "message": self.message,
            "details": self.details
        }


class ValidationError(WitnessException):
    """Malformed or missing input, rejected before any write."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(
            message,
            ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details=details
        )


class NotFoundError(WitnessException):
    """A referenced session, record or proposal does not exist."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.RECORD_NOT_FOUND,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code, status_code=404, details=details)


class RecordNotFoundError(NotFoundError):
    """Record version not found, or no longer current."""

    def __init__(self, kind: str, record_id: str, message: Optional[str] = None):
        super().__init__(
            message or f"Record not found: {kind}/{record_id}",
            ErrorCode.RECORD_NOT_FOUND,
            details={"kind": kind, "record_id": record_id},
        )


class ProposalNotFoundError(NotFoundError):
    """Proposal not found in database."""

    def __init__(self, proposal_id: str):
        super().__init__(
            f"Proposal not found: {proposal_id}",
            ErrorCode.PROPOSAL_NOT_FOUND,
            details={"proposal_id": proposal_id},
        )


class SessionNotFoundError(NotFoundError):
    """Contributor session must be registered before any write."""

    def __init__(self, session_id: str):
        super().__init__(
            "Session not found.",
            ErrorCode.SESSION_NOT_FOUND,
            details={"session_id": session_id},
        )


class RateLimitExceeded(WitnessException):
    """Session hit the write cap for the current window."""

    def __init__(self, session_id: str, limit: int, window_seconds: int):
        super().__init__(
            "Rate limit exceeded.",
            ErrorCode.RATE_LIMITED,
            status_code=429,
            details={"session_id": session_id, "limit": limit, "window_seconds": window_seconds},
        )


class ConflictError(WitnessException):
    """A pending proposal already touches one of the requested fields."""

    def __init__(self, fields: list[str], message: str = "A pending update already exists for one or more requested fields."):
        super().__init__(
            message,
            ErrorCode.CONFLICT,
            status_code=409,
            details={"fields": sorted(fields)},
        )


class InvalidStateError(WitnessException):
    """Action requires the proposal to be in a different state."""

    def __init__(self, proposal_id: str, status: str, message: str = "Pending update is not active."):
        super().__init__(
            message,
            ErrorCode.INVALID_STATE,
            status_code=409,
            details={"proposal_id": proposal_id, "status": status},
        )


class DuplicateVerificationError(WitnessException):
    """One session, one vote."""

    def __init__(self, proposal_id: str, session_id: str):
        super().__init__(
            "Session has already verified this update.",
            ErrorCode.DUPLICATE_VERIFICATION,
            status_code=409,
            details={"proposal_id": proposal_id, "session_id": session_id},
        )
