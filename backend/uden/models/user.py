"""User ORM — identity and entitlement record, the aggregate root for accounts.

Invariants:
    - username (lower-case) and email are each globally unique (DB constraints)
    - credits is never negative (CHECK constraint)
    - email_verification_token is NULL once the address is verified
    - tokens and linked OAuth accounts are deleted with their user

Design Decisions:
    - password_salt stored alongside password_hash even though bcrypt embeds it:
      verification re-derives the digest from (password, salt)
    - oauth_accounts normalized into their own table (models/oauth_account.py)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Integer, DateTime, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from uden.db.base import Base


class User(Base):
    """User aggregate root — owns tokens, linked accounts and billing records."""
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("credits >= 0", name="ck_users_credits_non_negative"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    username: Mapped[str] = mapped_column(
        String(20), nullable=False, unique=True,
    )
    email: Mapped[str] = mapped_column(
        String(320), nullable=False, unique=True,
    )
    password_hash: Mapped[str] = mapped_column(String(60), nullable=False)
    password_salt: Mapped[str] = mapped_column(String(29), nullable=False)
    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email_verification_token: Mapped[str | None] = mapped_column(
        String(8), nullable=True,
    )
    email_verified_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    credits: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    stripe_customer_id: Mapped[str | None] = mapped_column(
        String(255), nullable=True, index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    oauth_accounts: Mapped[list["OAuthAccount"]] = relationship(
        "OAuthAccount", back_populates="user",
        cascade="all, delete-orphan", passive_deletes=True,
        lazy="selectin", order_by="OAuthAccount.created_at",
    )
    tokens: Mapped[list["Token"]] = relationship(
        "Token", back_populates="user",
        cascade="all, delete-orphan", passive_deletes=True,
    )

    @property
    def is_email_verified(self) -> bool:
        return self.email_verification_token is None
