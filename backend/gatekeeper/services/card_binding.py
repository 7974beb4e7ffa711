"""Card Binding — exclusive resource_id -> account mapping over SQL.

Invariants:
    - At most one CardRegistration per usc_id (primary key) and per account
      (unique user_id): the mapping is 1:1
    - bind() to the same account twice is a no-op; to a different account raises
      ResourceConflictError, including when a concurrent insert wins the race
      (IntegrityError -> ResourceConflictError, never DatabaseError)
    - bind() for an account that already holds a different card raises
      AccountAlreadyBoundError; the caller releases the old card first
    - release() is idempotent: releasing an unbound resource succeeds silently
    - Registration row and Account.usc_id change in the same transaction

Design Decisions:
    - Check-then-insert inside one transaction, with the primary key as the real
      arbiter: the pre-check gives a clean same-owner no-op, the constraint closes the race
    - Resource ids are masked before they reach logs or error messages
"""

import logging

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError

from gatekeeper.core.domain_types import ResourceId, UserId
from gatekeeper.core.errors import (
    AccountAlreadyBoundError, ErrorContext, ResourceConflictError,
    ResourceNotFoundError,
)
from gatekeeper.core.guest_expiry import mask_resource_id
from gatekeeper.infrastructure.database import DatabaseSessionManager
from gatekeeper.models.account import Account
from gatekeeper.models.card_registration import CardRegistration

logger = logging.getLogger(__name__)


class SqlResourceBinder:
    """ResourceBinder backed by the usc_card_registrations table."""

    def __init__(self, db: DatabaseSessionManager):
        self._db = db

    async def bind(self, resource_id: ResourceId, user_id: UserId) -> None:
        masked = mask_resource_id(resource_id)
        async with self._db.session() as session:
            try:
                async with session.begin():
                    owner = await session.scalar(
                        select(CardRegistration.user_id)
                        .where(CardRegistration.usc_id == resource_id),
                    )
                    if owner == user_id:
                        return
                    if owner is not None:
                        raise ResourceConflictError(
                            masked, ErrorContext(user_id=user_id, resource_id=masked),
                        )
                    account = await session.get(Account, user_id)
                    if account is None:
                        raise ResourceNotFoundError("Account", user_id)
                    held = await session.scalar(
                        select(CardRegistration.usc_id)
                        .where(CardRegistration.user_id == user_id),
                    )
                    if held is not None:
                        raise AccountAlreadyBoundError(
                            user_id,
                            ErrorContext(
                                user_id=user_id, resource_id=mask_resource_id(held),
                            ),
                        )
                    session.add(CardRegistration(usc_id=resource_id, user_id=user_id))
                    account.usc_id = resource_id
            except IntegrityError:
                # usc_id PK or the unique user_id: either way a racing bind won
                logger.warning(
                    "Concurrent bind lost the race",
                    extra={"resource_id": masked, "user_id": user_id},
                )
                raise ResourceConflictError(
                    masked, ErrorContext(user_id=user_id, resource_id=masked),
                )
        logger.info("Resource bound", extra={"resource_id": masked, "user_id": user_id})

    async def release(self, resource_id: ResourceId) -> None:
        async with self._db.session() as session:
            async with session.begin():
                result = await session.execute(
                    delete(CardRegistration)
                    .where(CardRegistration.usc_id == resource_id),
                )
                await session.execute(
                    update(Account)
                    .where(Account.usc_id == resource_id)
                    .values(usc_id=None),
                )
        if result.rowcount:
            logger.info(
                "Resource released",
                extra={"resource_id": mask_resource_id(resource_id)},
            )

    async def owner_of(self, resource_id: ResourceId) -> UserId | None:
        async with self._db.session() as session:
            owner = await session.scalar(
                select(CardRegistration.user_id)
                .where(CardRegistration.usc_id == resource_id),
            )
        return UserId(owner) if owner is not None else None
