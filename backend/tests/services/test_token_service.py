"""Token Issuer/Validator — issuance, expiry boundary, revocation.

Invariants:
    - A fresh token validates immediately; at now >= expires_at it does not
    - expires_at is issuance time + 7 days
    - Token strings carry at least 128 bytes of randomness
    - Validation is read-only and idempotent
"""

import base64
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select

from uden.core.errors import UnauthenticatedError
from uden.models.token import Token
from uden.services import token_service
from uden.services.token_service import (
    TOKEN_BYTES, TOKEN_LIFETIME, issue_token, revoke_token, validate_token,
)

from tests.services.fakes import create_user


async def test_fresh_token_validates_to_its_owner(test_db):
    user = await create_user(test_db)
    token = await issue_token(test_db, user)

    resolved = await validate_token(test_db, token.token)

    assert resolved.id == user.id


async def test_expiry_is_seven_days_after_issuance(test_db):
    user = await create_user(test_db)
    before = datetime.now(timezone.utc)
    token = await issue_token(test_db, user)

    assert token.expires_at - token.created_at == timedelta(days=7)
    assert abs(token.expires_at - (before + TOKEN_LIFETIME)) <= timedelta(seconds=1)


async def test_token_fails_once_expiry_is_reached(test_db, monkeypatch):
    user = await create_user(test_db)
    token = await issue_token(test_db, user)

    monkeypatch.setattr(token_service, "_utcnow", lambda: token.expires_at)

    with pytest.raises(UnauthenticatedError) as exc:
        await validate_token(test_db, token.token)
    assert exc.value.code == "TOKEN_EXPIRED"
    assert exc.value.http_status == 401


async def test_token_valid_just_before_expiry(test_db, monkeypatch):
    user = await create_user(test_db)
    token = await issue_token(test_db, user)

    monkeypatch.setattr(
        token_service, "_utcnow",
        lambda: token.expires_at - timedelta(seconds=1),
    )

    assert (await validate_token(test_db, token.token)).id == user.id


async def test_unknown_token_is_rejected(test_db):
    with pytest.raises(UnauthenticatedError) as exc:
        await validate_token(test_db, "bm90LWEtdG9rZW4=")
    assert exc.value.code == "TOKEN_INVALID"


@pytest.mark.parametrize("missing", [None, ""])
async def test_missing_token_is_rejected(test_db, missing):
    with pytest.raises(UnauthenticatedError) as exc:
        await validate_token(test_db, missing)
    assert exc.value.code == "TOKEN_MISSING"


async def test_token_decodes_to_full_entropy():
    raw = base64.b64decode(token_service.generate_token_string())
    assert len(raw) >= TOKEN_BYTES >= 128


async def test_tokens_for_different_users_differ(test_db):
    alice = await create_user(test_db)
    bob = await create_user(test_db, username="bob", email="bob@example.com")

    first = await issue_token(test_db, alice)
    second = await issue_token(test_db, bob)

    assert first.token != second.token
    assert first.user_id == alice.id
    assert second.user_id == bob.id


async def test_revalidation_is_idempotent(test_db):
    user = await create_user(test_db)
    token = await issue_token(test_db, user)

    first = await validate_token(test_db, token.token)
    second = await validate_token(test_db, token.token)

    assert first.id == second.id == user.id
    count = await test_db.scalar(select(func.count()).select_from(Token))
    assert count == 1


async def test_revoked_token_fails_validation(test_db):
    user = await create_user(test_db)
    token = await issue_token(test_db, user)

    await revoke_token(test_db, token.token)

    with pytest.raises(UnauthenticatedError):
        await validate_token(test_db, token.token)


async def test_revoking_unknown_token_is_a_no_op(test_db):
    await revoke_token(test_db, "does-not-exist")
