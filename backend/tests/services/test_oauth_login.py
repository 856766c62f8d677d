"""OAuth Federation Resolver — linked-account lookup and token issuance.

Invariants:
    - A (provider, external_id) pair linked to exactly one user yields that user's token
    - An unlinked pair is Unauthenticated and never provisions an account
    - The same external id under another provider does not match
    - Provider failures propagate as UpstreamError
"""

import pytest
from sqlalchemy import func, select

from uden.core.domain_types import OAuthParameters
from uden.core.errors import BadRequestError, UnauthenticatedError, UpstreamError
from uden.models.user import User
from uden.services.oauth_login import login_with_oauth
from uden.services.token_service import validate_token

from tests.services.fakes import create_user

PARAMS = OAuthParameters(
    client_id="client-1",
    client_secret="secret-1",
    instance_url="https://misskey.example/",
    redirect_uri="https://uden.example/callback",
)


async def test_linked_account_returns_token_for_that_user(
    test_db, oauth_registry, misskey,
):
    owner = await create_user(
        test_db, linked_accounts=(("misskey", misskey.external_id),),
    )
    await create_user(test_db, username="bob", email="bob@example.com")

    token = await login_with_oauth(test_db, oauth_registry, "misskey", "artifact-1", PARAMS)

    assert token.user_id == owner.id
    assert (await validate_token(test_db, token.token)).id == owner.id
    assert misskey.exchanged == ["artifact-1"]
    assert misskey.fetched == ["access-artifact-1"]


async def test_unlinked_account_is_unauthenticated(test_db, oauth_registry):
    await create_user(test_db, linked_accounts=(("misskey", "someone-else"),))

    with pytest.raises(UnauthenticatedError) as exc:
        await login_with_oauth(test_db, oauth_registry, "misskey", "artifact", PARAMS)
    assert exc.value.code == "NO_LINKED_ACCOUNT"

    count = await test_db.scalar(select(func.count()).select_from(User))
    assert count == 1


async def test_external_id_is_scoped_to_provider(test_db, oauth_registry, mastodon):
    await create_user(
        test_db, linked_accounts=(("misskey", mastodon.external_id),),
    )

    with pytest.raises(UnauthenticatedError):
        await login_with_oauth(test_db, oauth_registry, "mastodon", "code", PARAMS)


async def test_user_with_several_links_matches_any_of_them(
    test_db, oauth_registry, mastodon,
):
    owner = await create_user(
        test_db,
        linked_accounts=(
            ("misskey", "first"),
            ("mastodon", mastodon.external_id),
        ),
    )

    token = await login_with_oauth(test_db, oauth_registry, "mastodon", "code", PARAMS)

    assert token.user_id == owner.id


async def test_unknown_provider_is_bad_request(test_db, oauth_registry):
    with pytest.raises(BadRequestError) as exc:
        await login_with_oauth(test_db, oauth_registry, "pleroma", "code", PARAMS)
    assert exc.value.code == "UNSUPPORTED_PROVIDER"
    assert exc.value.field == "provider"


async def test_provider_failure_propagates_as_upstream(test_db, oauth_registry, misskey):
    misskey.fail = True

    with pytest.raises(UpstreamError) as exc:
        await login_with_oauth(test_db, oauth_registry, "misskey", "code", PARAMS)
    assert exc.value.http_status == 502
    assert misskey.fetched == []
