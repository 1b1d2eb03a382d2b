"""Per-session write caps over a sliding wall-clock window.

The window state lives on the session row (``contribution_count`` and
``last_seen``), so every instance of the service sees the same counters.
When more than one window has passed since the last recorded write the
counter starts again from zero.

Two limiters with different caps guard different call paths and share
the session counter:

- the bootstrap gate (``bootstrap_limiter``, 10/hour by default) behind
  the session contribution endpoints;
- the content gate (``content_limiter``, 50/hour by default) applied
  inside create, propose and verify.

The window arithmetic is a pure function ``evaluate_window`` that can be
tested independently.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..core.clock import now_ms
from ..core.config import settings
from ..exceptions import RateLimitExceeded, SessionNotFoundError
from ..repositories import SessionRepository

logger = logging.getLogger(__name__)


def evaluate_window(
    count: int,
    last_seen: int,
    limit: int,
    window_ms: int,
    now: int,
) -> tuple[bool, int]:
    """Decide whether one more write fits in the window.

    Args:
        count: Writes recorded in the current window.
        last_seen: Epoch millis of the last recorded write.
        limit: Maximum writes per window.
        window_ms: Window length in milliseconds.
        now: Current epoch millis.

    Returns:
        ``(allowed, effective_count)`` where *effective_count* is the counter
        after the window reset, before any increment.
    """
    if now - last_seen > window_ms:
        count = 0
    return count < limit, count


class SlidingWindowLimiter:
    """A write cap of ``limit`` per ``window_ms`` keyed by session id."""

    def __init__(self, name: str, limit: int, window_ms: int):
        self.name = name
        self.limit = limit
        self.window_ms = window_ms

    def __repr__(self) -> str:
        return f"SlidingWindowLimiter({self.name!r}, limit={self.limit}, window_ms={self.window_ms})"

    def check_and_record(self, db: Session, session_id: str, now: Optional[int] = None) -> int:
        """Count one write against the session, or raise RateLimitExceeded.

        Raises SessionNotFoundError when the session does not exist. The
        session row is locked and the increment is flushed into the caller's
        transaction; a rejected write leaves the counter untouched.

        Returns the counter value after the increment.
        """
        now = now if now is not None else now_ms()
        repo = SessionRepository(db)
        session = repo.get_for_update(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)

        allowed, count = evaluate_window(
            session.contribution_count, session.last_seen, self.limit, self.window_ms, now
        )
        if not allowed:
            logger.warning(
                "Rate limit exceeded",
                extra={"limiter": self.name, "limit": self.limit, "count": count},
            )
            raise RateLimitExceeded(session_id, self.limit, self.window_ms // 1000)

        session.contribution_count = count + 1
        session.last_seen = now
        db.flush()
        return session.contribution_count

    def can_contribute(self, db: Session, session_id: str, now: Optional[int] = None) -> dict:
        """Report whether the session could write now, without recording anything.

        An unknown session reports the full allowance.
        """
        session = SessionRepository(db).get_by_id_optional(session_id)
        if session is None:
            return {"allowed": True, "remaining": self.limit}

        now = now if now is not None else now_ms()
        allowed, count = evaluate_window(
            session.contribution_count, session.last_seen, self.limit, self.window_ms, now
        )
        return {"allowed": allowed, "remaining": max(0, self.limit - count)}


def bootstrap_limiter() -> SlidingWindowLimiter:
    """Strict gate used by the session contribution endpoints."""
    return SlidingWindowLimiter("bootstrap", settings.bootstrap_rate_limit, settings.rate_limit_window_ms)


def content_limiter() -> SlidingWindowLimiter:
    """Looser gate applied inside content mutations."""
    return SlidingWindowLimiter("content", settings.content_rate_limit, settings.rate_limit_window_ms)
