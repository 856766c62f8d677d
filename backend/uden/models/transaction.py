"""Transaction ORM — snapshot of a payment-gateway checkout session.

Invariants:
    - One row per checkout attempt; stripe_id (gateway session id) is unique
    - data holds the full gateway payload as returned, uninterpreted
    - status starts "pending"; webhook handlers (elsewhere) advance it,
      "orphaned" marks a row whose invoice could not be written
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, ForeignKey, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from uden.core.domain_types import TransactionStatus
from uden.db.base import Base


class Transaction(Base):
    __tablename__ = "transactions"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    stripe_id: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True,
    )
    data: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=TransactionStatus.PENDING.value,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    user: Mapped["User"] = relationship("User")
    invoice: Mapped["Invoice"] = relationship(
        "Invoice", back_populates="transaction", uselist=False, lazy="selectin",
    )
