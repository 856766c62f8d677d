"""User Schemas — public view of an account.

Invariants:
    - Never exposes password hash/salt, verification code or session tokens
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class LinkedAccountResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    provider: str
    external_id: str


class UserResponse(BaseModel):
    """Account record returned by GET /user."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    username: str
    display_name: str
    email: str
    email_verified: bool
    credits: int
    created_at: datetime
    oauth_accounts: list[LinkedAccountResponse] = []

    @classmethod
    def from_user(cls, user) -> "UserResponse":
        return cls(
            id=user.id,
            username=user.username,
            display_name=user.display_name,
            email=user.email,
            email_verified=user.is_email_verified,
            credits=user.credits,
            created_at=user.created_at,
            oauth_accounts=[
                LinkedAccountResponse.model_validate(account)
                for account in user.oauth_accounts
            ],
        )
