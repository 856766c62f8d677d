"""Stripe and Resend Adapters — request shape and failure mapping.

Invariants:
    - Checkout sessions are subscription mode with required billing address
    - customer is sent only when a customer id exists
    - SDK errors and timeouts become UpstreamError; the cause is not exposed

Design Decisions:
    - SDK entry points (stripe.checkout.Session.create_async, resend.Emails.send)
      are monkeypatched; nothing leaves the process
"""

import asyncio

import pytest
import resend
import stripe

from uden.core.domain_types import LineItem
from uden.core.errors import UpstreamError
from uden.infrastructure.email_relay import ResendEmailRelay
from uden.infrastructure.payment_gateway import StripeGateway


@pytest.fixture
def stripe_calls(monkeypatch):
    calls = []

    async def fake_create(**params):
        calls.append(params)
        return stripe.checkout.Session.construct_from({
            "id": "cs_test_a1",
            "object": "checkout.session",
            "url": "https://checkout.stripe.com/c/pay/cs_test_a1",
            "invoice": None,
            "mode": params["mode"],
        }, "sk_test")

    monkeypatch.setattr(stripe.checkout.Session, "create_async", fake_create)
    return calls


async def test_checkout_session_request_shape(stripe_calls):
    gateway = StripeGateway("sk_test")

    session = await gateway.create_checkout_session(
        line_items=[LineItem("price_premium")],
        customer_id="cus_1",
        success_url="http://h/settings/subscription",
        cancel_url="http://h/settings/subscription",
    )

    params = stripe_calls[0]
    assert params["api_key"] == "sk_test"
    assert params["mode"] == "subscription"
    assert params["billing_address_collection"] == "required"
    assert params["line_items"] == [{"price": "price_premium", "quantity": 1}]
    assert params["customer"] == "cus_1"
    assert session.id == "cs_test_a1"
    assert session.url == "https://checkout.stripe.com/c/pay/cs_test_a1"
    assert session.invoice_id is None
    assert session.payload["object"] == "checkout.session"


async def test_customer_omitted_without_customer_id(stripe_calls):
    await StripeGateway("sk_test").create_checkout_session(
        line_items=[LineItem("price_premium")],
        customer_id=None,
        success_url="http://h/s",
        cancel_url="http://h/s",
    )

    assert "customer" not in stripe_calls[0]


async def test_stripe_error_becomes_upstream(monkeypatch):
    async def failing_create(**params):
        raise stripe.InvalidRequestError("No such price: 'price_x'", "line_items")

    monkeypatch.setattr(stripe.checkout.Session, "create_async", failing_create)

    with pytest.raises(UpstreamError) as exc:
        await StripeGateway("sk_test").create_checkout_session(
            line_items=[LineItem("price_x")], customer_id=None,
            success_url="http://h/s", cancel_url="http://h/s",
        )
    assert exc.value.code == "PAYMENT_GATEWAY_ERROR"
    assert "price_x" not in exc.value.message


async def test_stripe_timeout_becomes_upstream(monkeypatch):
    async def slow_create(**params):
        await asyncio.sleep(1)

    monkeypatch.setattr(stripe.checkout.Session, "create_async", slow_create)

    with pytest.raises(UpstreamError) as exc:
        await StripeGateway("sk_test", timeout_seconds=0.01).create_checkout_session(
            line_items=[LineItem("price_premium")], customer_id=None,
            success_url="http://h/s", cancel_url="http://h/s",
        )
    assert exc.value.code == "PAYMENT_GATEWAY_TIMEOUT"


async def test_email_relay_sends_plaintext(monkeypatch):
    sent = []
    monkeypatch.setattr(resend, "api_key", None)
    monkeypatch.setattr(resend.Emails, "send", lambda params: sent.append(params) or {"id": "e1"})
    relay = ResendEmailRelay("re_test", "noreply@uden.ai", from_name="Uden AI")

    await relay.send(to="bob <bob@example.com>", subject="Hi", text="Code: X")

    assert sent == [{
        "from": "Uden AI <noreply@uden.ai>",
        "to": ["bob <bob@example.com>"],
        "subject": "Hi",
        "text": "Code: X",
    }]
    assert resend.api_key == "re_test"


async def test_email_relay_failure_becomes_upstream(monkeypatch):
    def failing_send(params):
        raise RuntimeError("relay down")

    monkeypatch.setattr(resend.Emails, "send", failing_send)
    monkeypatch.setattr(resend, "api_key", None)
    relay = ResendEmailRelay("re_test", "noreply@uden.ai")

    with pytest.raises(UpstreamError) as exc:
        await relay.send(to="bob@example.com", subject="Hi", text="x")
    assert exc.value.code == "EMAIL_DELIVERY_FAILED"
    assert exc.value.http_status == 502


async def test_checkout_session_fields_read_as_attributes(monkeypatch):
    async def fake_create(**params):
        return stripe.checkout.Session.construct_from({
            "id": "cs_test_b2",
            "object": "checkout.session",
            "url": "https://checkout.stripe.com/c/pay/cs_test_b2",
            "invoice": "in_123",
            "customer_details": {"email": "bob@example.com"},
        }, "sk_test")

    monkeypatch.setattr(stripe.checkout.Session, "create_async", fake_create)

    session = await StripeGateway("sk_test").create_checkout_session(
        line_items=[LineItem("price_premium")], customer_id=None,
        success_url="http://h/s", cancel_url="http://h/s",
    )

    assert session.invoice_id == "in_123"
    assert isinstance(session.payload, dict)
    assert session.payload["customer_details"]["email"] == "bob@example.com"
