"""Boundary Protocols — contracts between workflows and external collaborators.

Invariants:
    - Workflows NEVER import a concrete collaborator — they receive one via dependency injection
    - All collaborator operations are async because implementations do network IO
    - Implementations map their own transport failures to UpstreamError

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
"""

from typing import Protocol

from uden.core.domain_types import (
    CheckoutSession, ExternalAccountId, LineItem, OAuthParameters,
)


class OAuthProvider(Protocol):
    """Capability every federated identity provider must offer."""
    name: str

    async def exchange_token(
        self, artifact: str, params: OAuthParameters,
    ) -> str: ...

    async def fetch_account(
        self, access_token: str, params: OAuthParameters,
    ) -> ExternalAccountId: ...


class PaymentGateway(Protocol):
    """Checkout-session creation on the payment gateway."""
    async def create_checkout_session(
        self,
        *,
        line_items: list[LineItem],
        customer_id: str | None,
        success_url: str,
        cancel_url: str,
    ) -> CheckoutSession: ...


class EmailRelay(Protocol):
    """Plaintext mail to a single recipient. Failure is a hard error."""
    async def send(
        self, *, to: str, subject: str, text: str,
    ) -> None: ...
