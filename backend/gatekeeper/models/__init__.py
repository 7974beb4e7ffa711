"""ORM Models — SQLAlchemy declarative models for all persisted entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Account is the aggregate root; CardRegistration is scoped by user_id

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before create_all /
      alembic autogenerate
"""

from gatekeeper.models.account import Account  # noqa: F401
from gatekeeper.models.card_registration import CardRegistration  # noqa: F401
