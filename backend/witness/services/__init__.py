"""Business logic services."""

from .record_service import RecordService
from .proposal_service import ProposalService
from .session_service import SessionService
from .trust_service import TrustLedger
from .rate_limiter import SlidingWindowLimiter

__all__ = ["RecordService", "ProposalService", "SessionService", "TrustLedger", "SlidingWindowLimiter"]
