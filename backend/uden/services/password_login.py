"""Password Login — username + password → session token.

Invariants:
    - Unknown username and wrong password fail identically (no account enumeration)
    - Usernames are matched lower-case, as stored
"""

import asyncio

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from uden.core.credentials import verify_password
from uden.core.errors import UnauthenticatedError
from uden.core.validate_registration import normalize_username
from uden.models.token import Token
from uden.models.user import User
from uden.services.token_service import issue_token


async def login_with_password(
    db: AsyncSession, username: str, password: str,
) -> Token:
    result = await db.execute(
        select(User).where(User.username == normalize_username(username)),
    )
    user = result.scalar_one_or_none()
    if user is None or not await asyncio.to_thread(
        verify_password, password, user.password_salt, user.password_hash,
    ):
        raise UnauthenticatedError(
            "Incorrect username or password", "INVALID_CREDENTIALS",
        )
    return await issue_token(db, user)
