"""Billing Routes — subscription checkout.

Invariants:
    - Requires a bearer token; unauthenticated calls never reach the gateway
    - Redirect host is taken from the request's Host header
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from uden.api.dependencies import get_current_user, get_payment_gateway
from uden.config import Settings, get_settings
from uden.core.domain_types import Product
from uden.core.repository_protocols import PaymentGateway
from uden.infrastructure.database import get_db
from uden.models.user import User
from uden.schemas.billing import OrderRequest, OrderResponse
from uden.services.billing_order import create_order

router = APIRouter(prefix="/billing", tags=["billing"])


@router.post("/order", response_model=OrderResponse)
async def order(
    body: OrderRequest,
    request: Request,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    settings: Settings = Depends(get_settings),
):
    url = await create_order(
        db, gateway, user,
        product_code=body.product,
        host=request.headers.get("host") or request.url.netloc,
        prices={Product.PREMIUM: settings.stripe.products.premium},
        require_verified_email=settings.billing.require_verified_email,
    )
    return OrderResponse(url=url)
