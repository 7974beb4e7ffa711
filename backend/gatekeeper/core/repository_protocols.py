"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell: dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via constructor injection

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
    - Async in Protocol: boundary methods are async because implementations do IO,
      but the pure functions that consume their results are never async
"""

from typing import Protocol

from gatekeeper.core.access_resolution import CheckOutcome, VisitorSession
from gatekeeper.core.domain_types import ResourceId, UserId


class AccessStatusAuthority(Protocol):
    """Session validator: one round trip, no retry, no cache, never raises."""
    async def check(self, session: VisitorSession) -> CheckOutcome: ...


class ResourceBinder(Protocol):
    """Exclusive resource_id -> user_id mapping."""
    async def bind(self, resource_id: ResourceId, user_id: UserId) -> None: ...
    async def release(self, resource_id: ResourceId) -> None: ...
    async def owner_of(self, resource_id: ResourceId) -> UserId | None: ...
