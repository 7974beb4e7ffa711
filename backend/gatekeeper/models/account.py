"""Account ORM — member and guest accounts (`users` table).

Invariants:
    - user_id is a string primary key (uuid4 hex by default)
    - account_type is 'guest' or 'full'; a guest row always carries account_expires_at
      (CHECK constraint ck_users_guest_has_expiry)
    - usc_id mirrors the live card binding in usc_card_registrations, NULL when unbound

Design Decisions:
    - Expiry columns live on the account row, not a side table: the reaper scan is a
      single indexed range query on (account_type, account_expires_at)
    - usc_id is denormalized for lookup; usc_card_registrations stays the exclusive key
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from gatekeeper.db.base import Base


class Account(Base):
    """Platform account. Guests are reaped once account_expires_at passes."""
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            "account_type <> 'guest' OR account_expires_at IS NOT NULL",
            name="ck_users_guest_has_expiry",
        ),
        Index("ix_users_account_type_expires_at", "account_type", "account_expires_at"),
    )

    user_id: Mapped[str] = mapped_column(
        String(64), primary_key=True, default=lambda: uuid.uuid4().hex,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    account_type: Mapped[str] = mapped_column(
        String(10), nullable=False, default="full",
    )
    paid_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="unpaid",
    )
    usc_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    account_expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
