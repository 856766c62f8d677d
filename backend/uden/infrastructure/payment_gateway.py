"""Stripe Payment Gateway — opens subscription-mode checkout sessions.

Invariants:
    - Implements core/repository_protocols.PaymentGateway
    - customer is sent only when the user already has a Stripe customer id
    - Each call is bounded by timeout_seconds; Stripe errors and timeouts surface as UpstreamError
    - Returned payload is the full session object as plain JSON data
"""

import asyncio
import logging

import stripe

from uden.core.domain_types import CheckoutSession, LineItem
from uden.core.errors import UpstreamError

logger = logging.getLogger(__name__)


class StripeGateway:
    """Checkout-session creation over Stripe's async API."""

    def __init__(self, secret_api_key: str, timeout_seconds: float = 30.0):
        self._api_key = secret_api_key
        self.timeout_seconds = timeout_seconds

    async def create_checkout_session(
        self,
        *,
        line_items: list[LineItem],
        customer_id: str | None,
        success_url: str,
        cancel_url: str,
    ) -> CheckoutSession:
        params: dict = {
            "line_items": [
                {"price": item.price, "quantity": item.quantity}
                for item in line_items
            ],
            "mode": "subscription",
            "success_url": success_url,
            "cancel_url": cancel_url,
            "billing_address_collection": "required",
        }
        if customer_id:
            params["customer"] = customer_id

        try:
            session = await asyncio.wait_for(
                stripe.checkout.Session.create_async(
                    api_key=self._api_key, **params,
                ),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.error(
                "Stripe checkout session creation timed out",
                extra={"service": "stripe"},
            )
            raise UpstreamError(
                "stripe", "Payment gateway timed out", "PAYMENT_GATEWAY_TIMEOUT",
            )
        except stripe.StripeError as e:
            logger.error(
                f"Stripe checkout session creation failed: {e.user_message or e}",
                extra={"service": "stripe"}, exc_info=e,
            )
            raise UpstreamError(
                "stripe", "Payment gateway error", "PAYMENT_GATEWAY_ERROR",
            )

        return CheckoutSession(
            id=session.id,
            url=session.url,
            invoice_id=session.invoice,
            payload=session.to_dict(),
        )
