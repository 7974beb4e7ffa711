"""Guest Expiry Helpers — pure pieces of the guest lifecycle reaper.

Invariants:
    - All functions are PURE: no IO, no async, no DB
    - The expiry rule itself lives in the reaper scan query (services/guest_reaper.py),
      the only place it is applied
    - Resource ids are never logged in full: only the last 4 characters survive

Design Decisions:
    - ReapReport is a mutable accumulator owned by a single cycle: no sharing
      between cycles, so no locking
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from gatekeeper.core.domain_types import ResourceId, UserId


MASK_PREFIX = "******"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def mask_resource_id(resource_id: str | None) -> str | None:
    """`******` + last four characters, for logs."""
    if resource_id is None:
        return None
    return MASK_PREFIX + resource_id[-4:]


class ReapOutcome(str, Enum):
    """Per-account outcome, one log line each."""
    FREED = "freed"        # binding released
    DELETED = "deleted"    # account row deleted
    FAILED = "failed"


@dataclass
class ReapFailure:
    user_id: UserId
    step: str
    error: str


@dataclass
class ReapReport:
    """Result of one reaper cycle."""
    cycle_start: datetime
    expired_found: int = 0
    freed: list[ResourceId] = field(default_factory=list)
    deleted: list[UserId] = field(default_factory=list)
    failures: list[ReapFailure] = field(default_factory=list)

    def record_failure(self, user_id: UserId, step: str, error: Exception) -> None:
        self.failures.append(ReapFailure(user_id, step, str(error)))

    @property
    def failed_accounts(self) -> set[UserId]:
        return {f.user_id for f in self.failures}

    @property
    def clean(self) -> bool:
        return not self.failures
