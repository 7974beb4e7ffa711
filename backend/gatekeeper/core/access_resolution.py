"""Access Resolution — pure decision from {invite token, session check} to a funnel stage.

Invariants:
    - All functions are PURE: no IO, no async, no side effects
    - Priority order, first match wins:
        1. well-formed invite token       -> ONBOARDING(token)
        2. session pending email check    -> ONBOARDING (resume)
        3. session with granting status   -> MAIN
        4. anything else                  -> WAITLIST
    - A malformed invite token is discarded, never an error
    - Denied and Unknown outcomes are indistinguishable to the decision (fail-closed)

Design Decisions:
    - Tagged outcome (Authorized | Denied | Unknown) over exceptions: the fallthrough is
      a visible data-level branch, testable without faking a transport
    - The shell (services/access_resolver.py) skips the session check entirely when the
      invite token short-circuits: decide_destination receives check=None in that case
"""

import re
from dataclasses import dataclass

from gatekeeper.core.domain_types import AccessStatus, FunnelStage, InviteToken


INVITE_TOKEN_PATTERN = re.compile(r"^[A-Z0-9]{16}$")


@dataclass(frozen=True)
class VisitorSession:
    """Opaque session credential held by the visitor. Forwarded as a bearer token."""
    session_token: str


@dataclass(frozen=True)
class AccessSnapshot:
    """Normalized answer of the access-status authority."""
    status: AccessStatus
    pending_email: bool = False
    email_verified: bool = False

    @property
    def awaiting_email_verification(self) -> bool:
        return self.pending_email and not self.email_verified


# ─── Check outcomes ──────────────────────────────────────────────

@dataclass(frozen=True)
class Authorized:
    """Authority answered with a readable access snapshot."""
    snapshot: AccessSnapshot


@dataclass(frozen=True)
class Denied:
    """Authority answered, but refused the session (4xx)."""
    status_code: int


@dataclass(frozen=True)
class Unknown:
    """Authority could not be asked or its answer could not be read."""
    reason: str


CheckOutcome = Authorized | Denied | Unknown


# ─── Destination ─────────────────────────────────────────────────

@dataclass(frozen=True)
class Destination:
    """Funnel destination. invite_token is only ever set for ONBOARDING."""
    stage: FunnelStage
    invite_token: InviteToken | None = None

    @property
    def redirect_path(self) -> str:
        if self.invite_token:
            return f"/{self.stage.value}?inviteCode={self.invite_token}"
        return f"/{self.stage.value}"


ONBOARDING = Destination(FunnelStage.ONBOARDING)
MAIN = Destination(FunnelStage.MAIN)
WAITLIST = Destination(FunnelStage.WAITLIST)


def parse_invite_token(raw: str | None) -> InviteToken | None:
    """Return the token if it is well-formed, else None (malformed tokens are dropped)."""
    if raw is None or not INVITE_TOKEN_PATTERN.fullmatch(raw):
        return None
    return InviteToken(raw)


def decide_from_check(check: CheckOutcome | None) -> Destination:
    """Route on the session check alone (no usable invite token)."""
    if not isinstance(check, Authorized):
        return WAITLIST
    snapshot = check.snapshot
    # Interrupted email verification outranks paid status
    if snapshot.awaiting_email_verification:
        return ONBOARDING
    if snapshot.status.grants_access:
        return MAIN
    return WAITLIST


def decide_destination(
    invite_token: InviteToken | None, check: CheckOutcome | None,
) -> Destination:
    """Full decision. invite_token must already be parsed via parse_invite_token()."""
    if invite_token is not None:
        return Destination(FunnelStage.ONBOARDING, invite_token)
    return decide_from_check(check)
