"""
Caller identity.

The bearer credential is currently a caller-asserted user id that is trusted
as-is; nothing here verifies it cryptographically. ``IdentityVerifier`` is the
seam where real token introspection against the identity provider belongs.
"""

from abc import ABC, abstractmethod
from typing import Optional

from fastapi import Header

from sociate import config
from sociate.errors import ForbiddenError
from sociate.logging_config import get_logger

logger = get_logger(__name__)


class IdentityVerifier(ABC):
    """Maps a bearer token to a stable user id, or None when it is unusable."""

    @abstractmethod
    def verify(self, token: str) -> Optional[str]:
        ...


class TrustedBearerVerifier(IdentityVerifier):
    """Accepts the token itself as the user id (advisory only)."""

    def verify(self, token: str) -> Optional[str]:
        return token or None


verifier: IdentityVerifier = TrustedBearerVerifier()


def bearer_user_id(authorization: Optional[str]) -> Optional[str]:
    """
    Extract the user id asserted by an ``Authorization: Bearer <id>`` header.

    Returns:
        The id, or None if the header is missing or not a bearer credential
    """
    if not authorization or not authorization.startswith("Bearer "):
        return None
    return verifier.verify(authorization[len("Bearer "):].strip())


def asserted_user_id(authorization: Optional[str] = Header(None)) -> Optional[str]:
    """FastAPI dependency yielding the caller-asserted id for the request."""
    return bearer_user_id(authorization)


def check_actor(asserted: Optional[str], actor_id: Optional[str]) -> None:
    """
    Reject a mutation whose acting id disagrees with the bearer id.

    Only active when AUTH_ENFORCE_ACTOR is set; requests without a bearer
    credential are let through so that the advisory mode stays compatible.

    Raises:
        ForbiddenError: if enforcement is on and the ids differ
    """
    if not config.AUTH_ENFORCE_ACTOR or asserted is None or not actor_id:
        return
    if asserted != actor_id:
        logger.warning("Rejected request: bearer %s acting as %s", asserted, actor_id)
        raise ForbiddenError("Not allowed to act on behalf of another user")
