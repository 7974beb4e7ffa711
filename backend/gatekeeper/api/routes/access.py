"""Access Check — resolves where a visitor should land.

Invariants:
    - Always 200 with one destination; a malformed invite code or a failed session
      check degrades silently to WAITLIST
    - The bearer token is forwarded to the resolver untouched, never logged

Design Decisions:
    - Header parsing lives here, decision logic in services/access_resolver.py
"""

import logging

from fastapi import APIRouter, Depends, Header, Query

from gatekeeper.api.dependencies import get_access_resolver
from gatekeeper.core.access_resolution import VisitorSession
from gatekeeper.schemas.access import AccessDecisionResponse
from gatekeeper.services.access_resolver import AccessResolver

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/access", tags=["access"])

_BEARER = "bearer "


def session_from_header(authorization: str | None) -> VisitorSession | None:
    """`Authorization: Bearer <token>` -> VisitorSession, anything else -> None."""
    if not authorization or not authorization.lower().startswith(_BEARER):
        return None
    token = authorization[len(_BEARER):].strip()
    return VisitorSession(token) if token else None


@router.get("/check", response_model=AccessDecisionResponse)
async def check_access(
    invite_code: str | None = Query(None, alias="inviteCode"),
    authorization: str | None = Header(None),
    resolver: AccessResolver = Depends(get_access_resolver),
):
    """Route a visit to onboarding, main or the waitlist."""
    destination = await resolver.resolve(
        invite_code, session_from_header(authorization),
    )
    return AccessDecisionResponse.from_destination(destination)
