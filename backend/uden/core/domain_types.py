"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - UserId wraps UUID — never use bare UUID in workflow signatures
    - All valid states encoded as Enums — no raw string matching
"""

from dataclasses import dataclass
from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", UUID)
TokenString = NewType("TokenString", str)
ExternalAccountId = NewType("ExternalAccountId", str)


# ─── Enums ───────────────────────────────────────────────────────

class Product(str, Enum):
    """Purchasable products. Only PREMIUM is sold."""
    PREMIUM = "PREMIUM"


class TransactionStatus(str, Enum):
    """Transaction lifecycle — webhook handlers move PENDING forward."""
    PENDING = "pending"
    ORPHANED = "orphaned"


# ─── Value Objects ───────────────────────────────────────────────

@dataclass(frozen=True)
class OAuthParameters:
    """Per-login provider parameters supplied by the caller."""
    client_id: str
    client_secret: str
    instance_url: str
    redirect_uri: str

    @property
    def base_url(self) -> str:
        return self.instance_url.rstrip("/")


@dataclass(frozen=True)
class LineItem:
    price: str
    quantity: int = 1


@dataclass(frozen=True)
class CheckoutSession:
    """Gateway checkout snapshot. `payload` is opaque at this layer."""
    id: str
    url: str
    invoice_id: str | None
    payload: dict
