"""Auth Routes — registration, password/OAuth login, email verification, logout.

Invariants:
    - Every successful login or registration responds with exactly {token}
    - Handlers only translate HTTP ↔ workflow calls; errors propagate to the
      global UdenError handler
"""

import logging

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from uden.api.dependencies import (
    get_bearer_token,
    get_current_user,
    get_email_relay,
    get_oauth_registry,
)
from uden.core.repository_protocols import EmailRelay
from uden.infrastructure.database import get_db
from uden.infrastructure.oauth_providers import OAuthProviderRegistry
from uden.models.user import User
from uden.schemas.auth import (
    LoginRequest,
    OAuthLoginRequest,
    RegisterRequest,
    TokenResponse,
    VerifyEmailRequest,
    VerifyEmailResponse,
)
from uden.services.oauth_login import login_with_oauth
from uden.services.password_login import login_with_password
from uden.services.registration import register_user, verify_email
from uden.services.token_service import revoke_token

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=TokenResponse)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db),
    email_relay: EmailRelay = Depends(get_email_relay),
):
    token = await register_user(
        db, email_relay,
        username=body.username, password=body.password, email=body.email,
    )
    return TokenResponse(token=token.token)


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    token = await login_with_password(db, body.username, body.password)
    return TokenResponse(token=token.token)


@router.post("/login-oauth", response_model=TokenResponse)
async def login_oauth(
    body: OAuthLoginRequest,
    db: AsyncSession = Depends(get_db),
    registry: OAuthProviderRegistry = Depends(get_oauth_registry),
):
    token = await login_with_oauth(
        db, registry, body.provider, body.token, body.oauth_data.to_parameters(),
    )
    return TokenResponse(token=token.token)


@router.post("/verify-email", response_model=VerifyEmailResponse)
async def verify(
    body: VerifyEmailRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await verify_email(db, user, body.code)
    return VerifyEmailResponse(verified=True)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    token: str = Depends(get_bearer_token),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await revoke_token(db, token)
    logger.info("Session ended", extra={"user_id": str(user.id)})
    return Response(status_code=status.HTTP_204_NO_CONTENT)
