"""Access Schemas — response contract for access resolution.

Invariants:
    - invite_code is only ever set when destination == "onboarding"
    - redirect_to is the path the client navigates to, query string included
"""

from pydantic import BaseModel

from gatekeeper.core.access_resolution import Destination
from gatekeeper.core.domain_types import FunnelStage


class AccessDecisionResponse(BaseModel):
    """Funnel destination for one visit."""
    destination: FunnelStage
    invite_code: str | None = None
    redirect_to: str

    @classmethod
    def from_destination(cls, destination: Destination) -> "AccessDecisionResponse":
        return cls(
            destination=destination.stage,
            invite_code=destination.invite_token,
            redirect_to=destination.redirect_path,
        )
