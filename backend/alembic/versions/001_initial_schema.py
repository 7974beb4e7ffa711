"""Initial schema — users and usc_card_registrations.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18

Card registrations cascade with their account at the DB level, so a binding can
never outlive the account row even when the reaper's release step is skipped.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("user_id", sa.String(64), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False, server_default=""),
        sa.Column("account_type", sa.String(10), nullable=False, server_default="full"),
        sa.Column("paid_status", sa.String(20), nullable=False, server_default="unpaid"),
        sa.Column("usc_id", sa.String(64), nullable=True),
        sa.Column("account_expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(
            "account_type <> 'guest' OR account_expires_at IS NOT NULL",
            name="ck_users_guest_has_expiry",
        ),
    )
    op.create_index(
        "ix_users_account_type_expires_at", "users",
        ["account_type", "account_expires_at"],
    )

    op.create_table(
        "usc_card_registrations",
        sa.Column("usc_id", sa.String(64), primary_key=True),
        sa.Column(
            "user_id", sa.String(64),
            sa.ForeignKey("users.user_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("registered_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index(
        "ix_usc_card_registrations_user_id", "usc_card_registrations", ["user_id"],
        unique=True,
    )


def downgrade() -> None:
    op.drop_index("ix_usc_card_registrations_user_id", "usc_card_registrations")
    op.drop_table("usc_card_registrations")
    op.drop_index("ix_users_account_type_expires_at", "users")
    op.drop_table("users")
