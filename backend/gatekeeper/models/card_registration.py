"""Card Registration ORM — exclusive resource binding (`usc_card_registrations` table).

Invariants:
    - usc_id is the primary key: at most one binding per card, enforced by the DB
    - user_id is unique: at most one card per account, so the mapping is 1:1
    - user_id references users.user_id with ON DELETE CASCADE, so a binding can never
      outlive its account even if the explicit release step is skipped

Design Decisions:
    - Primary key on the external id (not a surrogate): a duplicate insert surfaces as
      IntegrityError, which the binder maps to ResourceConflictError
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from gatekeeper.db.base import Base


class CardRegistration(Base):
    """One live card -> account binding."""
    __tablename__ = "usc_card_registrations"

    usc_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("users.user_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        unique=True,
    )
    registered_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
