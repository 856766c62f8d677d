"""OAuth Federation Resolver — external identity → linked local user → session token.

Invariants:
    - Steps run in order: resolve provider → exchange artifact → fetch account id
      → exact (provider, external_id) lookup → issue token
    - Never provisions an account: an unlinked identity is UnauthenticatedError
    - Provider failures propagate as UpstreamError untouched (no retry)
    - Dispatch goes through OAuthProviderRegistry only — no per-provider branches here
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from uden.core.domain_types import ExternalAccountId, OAuthParameters
from uden.core.errors import UnauthenticatedError
from uden.infrastructure.oauth_providers import OAuthProviderRegistry
from uden.models.oauth_account import OAuthAccount
from uden.models.token import Token
from uden.models.user import User
from uden.services.token_service import issue_token

logger = logging.getLogger(__name__)


async def find_user_by_linked_account(
    db: AsyncSession, provider: str, external_id: ExternalAccountId,
) -> User | None:
    result = await db.execute(
        select(User)
        .join(OAuthAccount, OAuthAccount.user_id == User.id)
        .where(OAuthAccount.provider == provider)
        .where(OAuthAccount.external_id == external_id),
    )
    return result.scalar_one_or_none()


async def login_with_oauth(
    db: AsyncSession,
    registry: OAuthProviderRegistry,
    provider_name: str,
    artifact: str,
    params: OAuthParameters,
) -> Token:
    """Trade a provider authorization artifact for a local session token."""
    provider = registry.get(provider_name)

    access_token = await provider.exchange_token(artifact, params)
    external_id = await provider.fetch_account(access_token, params)

    user = await find_user_by_linked_account(db, provider.name, external_id)
    if user is None:
        logger.info(
            "OAuth login for unlinked account",
            extra={"provider": provider.name},
        )
        raise UnauthenticatedError(
            "Incorrect username or password", "NO_LINKED_ACCOUNT",
        )

    logger.info(
        "OAuth login succeeded",
        extra={"provider": provider.name, "user_id": str(user.id)},
    )
    return await issue_token(db, user)
