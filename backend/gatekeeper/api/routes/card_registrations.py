"""Card Registrations — bind and release the exclusive card -> account mapping.

Invariants:
    - POST returns 201 on a new or repeated (same account) binding
    - POST returns 409 RESOURCE_ALREADY_BOUND when another account holds the card
    - POST returns 409 ACCOUNT_ALREADY_BOUND when the account already holds a card
    - DELETE always returns 204, whether or not a binding existed

Design Decisions:
    - Conflict / not-found surface as GatekeeperError and are rendered by the
      global handler (api/error_handlers.py), not by try/except here
"""

from fastapi import APIRouter, Depends, status

from gatekeeper.api.dependencies import get_resource_binder
from gatekeeper.core.domain_types import ResourceId, UserId
from gatekeeper.core.guest_expiry import mask_resource_id
from gatekeeper.schemas.card_registration import (
    CardRegistrationCreate, CardRegistrationResponse,
)
from gatekeeper.services.card_binding import SqlResourceBinder

router = APIRouter(prefix="/api/v1/cards/registrations", tags=["cards"])


@router.post(
    "", response_model=CardRegistrationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register_card(
    body: CardRegistrationCreate,
    binder: SqlResourceBinder = Depends(get_resource_binder),
):
    """Bind a card to an account."""
    await binder.bind(ResourceId(body.resource_id), UserId(body.user_id))
    return CardRegistrationResponse(
        resource_id=mask_resource_id(body.resource_id),
        user_id=body.user_id,
    )


@router.delete("/{resource_id}", status_code=status.HTTP_204_NO_CONTENT)
async def release_card(
    resource_id: str,
    binder: SqlResourceBinder = Depends(get_resource_binder),
):
    """Release a card binding. Idempotent."""
    await binder.release(ResourceId(resource_id))
