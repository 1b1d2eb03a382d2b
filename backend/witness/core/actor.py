"""Acting-session context exposed as FastAPI dependencies.

There are no accounts. Every write names a pseudonymous session token in
the ``X-Session-ID`` header; the request context middleware has already
reduced the client address to a salted hash and captured the user agent.

Public interface:
    ``require_actor`` - returns Actor or raises ValidationError when the
                        header is missing.
    ``client_meta``   - returns (ip_hash, user_agent) for endpoints that
                        receive the session id some other way.
"""

import hashlib
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Header, Request

from .config import settings
from ..exceptions import ValidationError

logger = logging.getLogger(__name__)

SESSION_HEADER = "X-Session-ID"

# Hex chars kept from the salted SHA-256 of the client address.
IP_HASH_LENGTH = 32

UNKNOWN = "unknown"


@dataclass(frozen=True)
class Actor:
    """Who performs a write, as recorded in the audit trail."""

    session_id: str
    ip_hash: str = UNKNOWN
    user_agent: str = UNKNOWN


# Used by startup jobs (expiry sweep, demo seeding) that act without a request.
SYSTEM_ACTOR = Actor(session_id="system", ip_hash="system", user_agent="witness-registry")
SEED_ACTOR = Actor(session_id="seed-session", ip_hash="seed", user_agent="witness-registry-seeder")


def hash_ip(address: Optional[str], salt: Optional[str] = None) -> str:
    """Salted, truncated SHA-256 of a client address."""
    if not address:
        return UNKNOWN
    salt = settings.ip_hash_salt if salt is None else salt
    return hashlib.sha256(f"{salt}:{address}".encode()).hexdigest()[:IP_HASH_LENGTH]


def client_meta(request: Request) -> tuple[str, str]:
    """(ip_hash, user_agent) for the current request."""
    ip_hash = getattr(request.state, "ip_hash", None) or UNKNOWN
    user_agent = getattr(request.state, "user_agent", None) or UNKNOWN
    return ip_hash, user_agent


def require_actor(
    request: Request,
    x_session_id: Optional[str] = Header(default=None, alias=SESSION_HEADER),
) -> Actor:
    """Resolve the acting session for a write endpoint."""
    session_id = (x_session_id or "").strip()
    if not session_id:
        raise ValidationError(f"Missing {SESSION_HEADER} header", field=SESSION_HEADER)
    ip_hash, user_agent = client_meta(request)
    return Actor(session_id=session_id, ip_hash=ip_hash, user_agent=user_agent)
