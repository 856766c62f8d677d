"""Registration Workflow — validate, provision, grant credits, send verification code, issue token.

Invariants:
    - Validation gate order is fixed and short-circuits: username shape → email
      syntax → disposable domain → email taken → username taken
    - No row is written until every check has passed
    - The store's unique constraints are the authoritative race guard: a
      concurrent duplicate that slips past the pre-checks fails at commit as ConflictError
    - Any other persistence failure after validation is an InternalError (500)
    - Two-phase: (1) commit user, (2) send verification mail. If (2) fails the
      user row is deleted (compensating action) and the mail error is raised
    - A token is issued only after the mail was accepted by the relay

Design Decisions:
    - bcrypt runs in a worker thread so hashing does not stall the event loop
    - The username-taken check compares lower-case forms: stored usernames are
      lower-case, so "Alice" and "alice" are the same account
"""

import asyncio
import logging
import secrets
import uuid
from datetime import datetime, timezone

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from uden.core.credentials import create_salt, hash_password
from uden.core.errors import BadRequestError, ConflictError, InternalError
from uden.core.repository_protocols import EmailRelay
from uden.core.validate_registration import (
    check_registration_input,
    generate_verification_code,
    sanitize_display_name,
)
from uden.models.token import Token
from uden.models.user import User
from uden.services.token_service import issue_token

logger = logging.getLogger(__name__)

STARTING_CREDITS = 10_000
VERIFICATION_SUBJECT = "Uden AI Email Verification"


async def _email_taken(db: AsyncSession, email: str) -> bool:
    result = await db.execute(select(User.id).where(User.email == email).limit(1))
    return result.first() is not None


async def _username_taken(db: AsyncSession, username: str) -> bool:
    result = await db.execute(
        select(User.id).where(User.username == username.lower()).limit(1),
    )
    return result.first() is not None


async def _discard_user(db: AsyncSession, user_id: uuid.UUID) -> None:
    """Compensating action for a failed verification mail."""
    try:
        await db.execute(delete(User).where(User.id == user_id))
        await db.commit()
        logger.warning(
            "Registration rolled back after verification mail failure",
            extra={"user_id": str(user_id)},
        )
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(
            "Compensating delete failed; unverified account left behind",
            extra={"user_id": str(user_id)}, exc_info=e,
        )


async def register_user(
    db: AsyncSession,
    email_relay: EmailRelay,
    *,
    username: str,
    password: str,
    email: str,
) -> Token:
    """Create an account and return its first session token."""
    normalized_username = check_registration_input(username, email)

    if await _email_taken(db, email):
        raise ConflictError("Email already exists", "EMAIL_EXISTS")
    if await _username_taken(db, username):
        raise ConflictError("Username already exists", "USERNAME_EXISTS")

    salt = create_salt()
    password_hash = await asyncio.to_thread(hash_password, password, salt)

    user = User(
        username=normalized_username,
        email=email,
        email_verification_token=generate_verification_code(),
        password_hash=password_hash,
        password_salt=salt,
        display_name=sanitize_display_name(normalized_username),
        credits=STARTING_CREDITS,
    )

    # Phase 1: persist
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.info("Registration lost a uniqueness race")
        raise ConflictError("Username or email already exists", "USER_EXISTS")
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("Failed to persist new account", exc_info=e)
        raise InternalError("Failed to create account")

    # Phase 2: verification mail
    try:
        await email_relay.send(
            to=f"{user.username} <{user.email}>",
            subject=VERIFICATION_SUBJECT,
            text=f"Your Uden AI verification code is: {user.email_verification_token}",
        )
    except Exception:
        await _discard_user(db, user.id)
        raise

    logger.info("User registered", extra={"user_id": str(user.id)})
    return await issue_token(db, user)


async def verify_email(db: AsyncSession, user: User, code: str) -> None:
    """Confirm the address with the mailed code. Already-verified is a no-op."""
    expected = user.email_verification_token
    if expected is None:
        return
    if not secrets.compare_digest(
        code.strip().upper().encode("utf-8"), expected.encode("utf-8"),
    ):
        raise BadRequestError(
            "Invalid verification code", "INVALID_VERIFICATION_CODE", field="code",
        )
    user.email_verification_token = None
    user.email_verified_at = datetime.now(timezone.utc)
    await db.commit()
    logger.info("Email verified", extra={"user_id": str(user.id)})
