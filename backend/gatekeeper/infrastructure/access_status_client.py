"""Access Status Client — validates a visitor session against the access-status authority.

Invariants:
    - Exactly one GET per check(), `Authorization: Bearer <session_token>`
    - No retry, no cache: every call is a fresh round trip
    - check() NEVER raises: every failure is a tagged CheckOutcome:
        2xx + JSON object      -> Authorized(snapshot)
        4xx                    -> Denied(status_code)
        5xx / transport / body -> Unknown(reason)
        unsendable request     -> Unknown(reason)
    - Unrecognized or missing `paidStatus` -> AccessStatus.NONE; missing booleans -> False
    - pendingEmail / emailVerified count only when they are JSON `true`: a stray
      truthy value (1, "false") never routes a paid visitor back to onboarding

Design Decisions:
    - httpx.AsyncClient injected via constructor: tests pass httpx.MockTransport,
      production shares one pooled client owned by the lifespan
    - No explicit timeout beyond the transport default (ADR: correctness over latency,
      the resolver falls back to WAITLIST on any failure anyway)
"""

import logging

import httpx

from gatekeeper.core.access_resolution import (
    AccessSnapshot, Authorized, CheckOutcome, Denied, Unknown, VisitorSession,
)
from gatekeeper.core.domain_types import AccessStatus

logger = logging.getLogger(__name__)

DEFAULT_STATUS_PATH = "/payment/status"


def parse_snapshot(payload: dict) -> AccessSnapshot:
    """Normalize the authority's JSON body."""
    return AccessSnapshot(
        status=AccessStatus.parse(payload.get("paidStatus")),
        pending_email=payload.get("pendingEmail") is True,
        email_verified=payload.get("emailVerified") is True,
    )


class AccessStatusClient:
    """HTTP session validator for the access-status authority."""

    def __init__(
        self,
        base_url: str,
        http_client: httpx.AsyncClient,
        status_path: str = DEFAULT_STATUS_PATH,
    ):
        self.url = base_url.rstrip("/") + "/" + status_path.lstrip("/")
        self._http = http_client

    async def check(self, session: VisitorSession) -> CheckOutcome:
        try:
            response = await self._http.get(
                self.url,
                headers={"Authorization": f"Bearer {session.session_token}"},
            )
        except httpx.HTTPError as e:
            logger.warning(f"Access status request failed: {type(e).__name__}")
            return Unknown(f"transport: {type(e).__name__}")
        except ValueError as e:
            # header encoding (non-ASCII token) fails before anything is sent
            logger.warning(f"Access status request not sent: {type(e).__name__}")
            return Unknown(f"request: {type(e).__name__}")

        if 400 <= response.status_code < 500:
            logger.info(
                "Access status denied",
                extra={"status_code": response.status_code},
            )
            return Denied(response.status_code)
        if not response.is_success:
            logger.warning(
                "Access status authority error",
                extra={"status_code": response.status_code},
            )
            return Unknown(f"http {response.status_code}")

        try:
            payload = response.json()
        except ValueError:
            logger.warning("Access status body is not JSON")
            return Unknown("invalid body")
        if not isinstance(payload, dict):
            return Unknown("invalid body")
        return Authorized(parse_snapshot(payload))
