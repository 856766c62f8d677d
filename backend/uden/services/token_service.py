"""Token Issuer/Validator — opaque bearer tokens bound to one user with a fixed 7-day expiry.

Invariants:
    - Token strings are base64 of TOKEN_BYTES bytes from the OS CSPRNG;
      uniqueness comes from entropy, not from a lookup before insert
    - issue_token performs exactly one INSERT; validate_token exactly one SELECT
    - A token is valid iff its row exists and now < expires_at — no renewal,
      expired rows are left in place
    - revoke_token deletes the row; unknown tokens are ignored
"""

import base64
import logging
import secrets
from datetime import datetime, timedelta, timezone

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from uden.core.errors import UnauthenticatedError
from uden.models.token import Token
from uden.models.user import User

logger = logging.getLogger(__name__)

TOKEN_BYTES = 128
TOKEN_LIFETIME = timedelta(days=7)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone=True columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def generate_token_string() -> str:
    return base64.b64encode(secrets.token_bytes(TOKEN_BYTES)).decode("ascii")


async def issue_token(db: AsyncSession, user: User) -> Token:
    """Create, persist and return a fresh token for `user`."""
    now = _utcnow()
    token = Token(
        token=generate_token_string(),
        user_id=user.id,
        expires_at=now + TOKEN_LIFETIME,
        created_at=now,
    )
    db.add(token)
    await db.commit()
    logger.info("Token issued", extra={"user_id": str(user.id)})
    return token


async def validate_token(db: AsyncSession, token_string: str | None) -> User:
    """Resolve a token string to its user or raise UnauthenticatedError."""
    if not token_string:
        raise UnauthenticatedError("Missing token", "TOKEN_MISSING")

    result = await db.execute(
        select(User, Token.expires_at)
        .join(Token, Token.user_id == User.id)
        .where(Token.token == token_string),
    )
    row = result.one_or_none()
    if row is None:
        raise UnauthenticatedError("Invalid token", "TOKEN_INVALID")

    user, expires_at = row
    if _utcnow() >= _as_utc(expires_at):
        raise UnauthenticatedError("Token expired", "TOKEN_EXPIRED")
    return user


async def revoke_token(db: AsyncSession, token_string: str) -> None:
    await db.execute(delete(Token).where(Token.token == token_string))
    await db.commit()
