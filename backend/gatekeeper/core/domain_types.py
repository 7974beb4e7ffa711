"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - UserId, ResourceId, InviteToken wrap str: never pass bare strings across layers
    - All valid states encoded as Enums: no raw string matching outside core/
    - AccessStatus.NONE is the catch-all for any status the authority reports that
      does not grant access

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON and to DB string columns without custom encoders
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", str)
ResourceId = NewType("ResourceId", str)        # e.g. campus card id
InviteToken = NewType("InviteToken", str)      # ^[A-Z0-9]{16}$


# ─── Enums ───────────────────────────────────────────────────────

class AccountType(str, Enum):
    """Account kinds: maps to DB `account_type` column."""
    GUEST = "guest"
    FULL = "full"


class AccessStatus(str, Enum):
    """Access statuses reported by the access-status authority (`paidStatus`)."""
    PAID = "paid"
    QR_VERIFIED = "qr_verified"
    QR_GRACE_PERIOD = "qr_grace_period"
    NONE = "none"

    @classmethod
    def parse(cls, raw: object) -> "AccessStatus":
        """Map a wire value to a status. Anything unrecognized is NONE."""
        if isinstance(raw, str):
            for status in (cls.PAID, cls.QR_VERIFIED, cls.QR_GRACE_PERIOD):
                if raw == status.value:
                    return status
        return cls.NONE

    @property
    def grants_access(self) -> bool:
        return self is not AccessStatus.NONE


class FunnelStage(str, Enum):
    """Where a visitor is sent after access resolution."""
    ONBOARDING = "onboarding"
    MAIN = "main"
    WAITLIST = "waitlist"


class ReaperState(str, Enum):
    """Guest reaper cycle: IDLE -> SCANNING -> REAPING -> IDLE."""
    IDLE = "idle"
    SCANNING = "scanning"
    REAPING = "reaping"
