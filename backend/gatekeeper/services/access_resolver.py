"""Access Resolver — routes a visit to ONBOARDING, MAIN or WAITLIST.

Invariants:
    - resolve() always returns exactly one Destination and never raises
    - A well-formed invite token short-circuits BEFORE any session check (zero IO)
    - At most one call to the access-status authority per resolve(), no retry
    - Not memoized: a repeated call re-checks the session
    - No shared mutable state: concurrent resolutions are independent

Design Decisions:
    - Thin async shell around core/access_resolution.py (ADR: impureim sandwich):
      parse -> (maybe) one IO call -> pure decision
    - Unexpected validator exceptions are logged and treated as Unknown so the
      fail-closed fallthrough stays total
"""

import logging

from gatekeeper.core.access_resolution import (
    CheckOutcome,
    Destination,
    Unknown,
    VisitorSession,
    decide_destination,
    parse_invite_token,
)
from gatekeeper.core.repository_protocols import AccessStatusAuthority

logger = logging.getLogger(__name__)


class AccessResolver:
    """Decides where a visitor lands, given an optional invite token and session."""

    def __init__(self, authority: AccessStatusAuthority):
        self._authority = authority

    async def resolve(
        self,
        invite_token: str | None = None,
        session: VisitorSession | None = None,
    ) -> Destination:
        token = parse_invite_token(invite_token)
        if invite_token is not None and token is None:
            logger.warning(
                "Discarding malformed invite token",
                extra={"error_code": "INVALID_INVITE_FORMAT"},
            )

        check: CheckOutcome | None = None
        if token is None and session is not None:
            check = await self._check(session)

        destination = decide_destination(token, check)
        logger.info(
            f"Access resolved to {destination.stage.value}",
            extra={"destination": destination.stage.value},
        )
        return destination

    async def _check(self, session: VisitorSession) -> CheckOutcome:
        try:
            return await self._authority.check(session)
        except Exception as e:
            logger.error(f"Session check raised unexpectedly: {e}", exc_info=True)
            return Unknown(f"unexpected: {type(e).__name__}")
