"""Card Registration Schemas — Pydantic models for the binding endpoints.

Invariants:
    - resource_id: 1-64 chars, stripped, non-empty
    - Responses never echo the full resource id (masked)

Design Decisions:
    - field_validator for side-effect-free transforms (strip): keeps models pure
"""

from pydantic import BaseModel, Field, field_validator


class CardRegistrationCreate(BaseModel):
    """Bind a card to an existing account."""
    resource_id: str = Field(min_length=1, max_length=64)
    user_id: str = Field(min_length=1, max_length=64)

    @field_validator("resource_id", "user_id")
    @classmethod
    def strip_value(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("value cannot be empty or whitespace")
        return v


class CardRegistrationResponse(BaseModel):
    """Binding as seen by the registration flow."""
    resource_id: str
    user_id: str
