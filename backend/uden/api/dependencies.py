"""Request Dependencies — authentication and collaborator providers for route handlers.

Invariants:
    - Bearer authentication resolves before the handler body runs: a missing or
      invalid token is a 401 and no workflow step executes
    - The authenticated user is loaded on the same session the handler uses
    - Collaborators (OAuth registry, payment gateway, email relay) are built from
      the frozen Settings and can be swapped via app.dependency_overrides

Design Decisions:
    - Providers are plain functions returning protocol implementations, so tests
      override them with fakes instead of patching SDK modules
"""

from fastapi import Cookie, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from uden.config import Settings, get_settings
from uden.core.errors import UnauthenticatedError
from uden.core.repository_protocols import EmailRelay, PaymentGateway
from uden.infrastructure.database import get_db
from uden.infrastructure.email_relay import ResendEmailRelay
from uden.infrastructure.oauth_providers import (
    OAuthProviderRegistry, build_default_registry,
)
from uden.infrastructure.payment_gateway import StripeGateway
from uden.models.user import User
from uden.services.token_service import validate_token

_bearer = HTTPBearer(auto_error=False)


async def get_bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> str:
    if credentials is None or not credentials.credentials:
        raise UnauthenticatedError("Missing bearer token", "TOKEN_MISSING")
    return credentials.credentials


async def get_current_user(
    token: str = Depends(get_bearer_token),
    db: AsyncSession = Depends(get_db),
) -> User:
    return await validate_token(db, token)


async def get_cookie_user(
    token: str | None = Cookie(default=None),
    db: AsyncSession = Depends(get_db),
) -> User | None:
    """Cookie variant for the deprecated GET /user: failures become None."""
    if not token:
        return None
    try:
        return await validate_token(db, token)
    except UnauthenticatedError:
        return None


def get_oauth_registry(
    settings: Settings = Depends(get_settings),
) -> OAuthProviderRegistry:
    return build_default_registry(settings.oauth.timeout_seconds)


def get_payment_gateway(
    settings: Settings = Depends(get_settings),
) -> PaymentGateway:
    return StripeGateway(
        settings.stripe.secret_api_key,
        timeout_seconds=settings.billing.gateway_timeout_seconds,
    )


def get_email_relay(settings: Settings = Depends(get_settings)) -> EmailRelay:
    return ResendEmailRelay(
        settings.email.api_key,
        settings.email.from_address,
        from_name=settings.email.from_name,
    )
