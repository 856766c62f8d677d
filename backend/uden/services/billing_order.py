"""Billing Reconciliation — checkout session → Transaction → Invoice → redirect URL.

Invariants:
    - Steps run in order: validate product → verified-email gate → open gateway
      session → commit Transaction → commit Invoice → return session URL
    - No gateway call is made for an invalid product or an unverified account
    - Every Invoice references exactly one Transaction (1:1)
    - Two-phase: if the Invoice write fails, the Transaction is deleted
      (compensating action); if that delete also fails the row is marked
      "orphaned" so reconciliation can find it. The caller gets InternalError

Design Decisions:
    - The price for each product comes from settings.stripe.products, passed in
      as a plain mapping so tests need no Settings instance
    - Row ids are captured before each commit attempt: a rollback expires ORM
      state and lazy refresh is unavailable under asyncio
"""

import logging
import uuid
from collections.abc import Mapping

from sqlalchemy import delete, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from uden.core.domain_types import LineItem, Product, TransactionStatus
from uden.core.errors import BadRequestError, ForbiddenError, InternalError
from uden.core.repository_protocols import PaymentGateway
from uden.models.invoice import Invoice
from uden.models.transaction import Transaction
from uden.models.user import User

logger = logging.getLogger(__name__)

SUBSCRIPTION_PATH = "/settings/subscription"


def parse_product(raw: str) -> Product:
    try:
        return Product(raw)
    except ValueError:
        raise BadRequestError("Invalid product", "INVALID_PRODUCT", field="product")


def build_line_items(product: Product, prices: Mapping[Product, str]) -> list[LineItem]:
    price = prices.get(product)
    if not price:
        logger.error("No price configured", extra={"product": product.value})
        raise InternalError("Product is not configured", "PRODUCT_NOT_CONFIGURED")
    return [LineItem(price=price, quantity=1)]


def subscription_url(host: str) -> str:
    """Both checkout outcomes land on the subscription settings page."""
    return f"http://{host}{SUBSCRIPTION_PATH}"


async def _compensate_transaction(db: AsyncSession, transaction_id: uuid.UUID) -> None:
    try:
        await db.execute(
            delete(Transaction)
            .where(Transaction.id == transaction_id)
            .execution_options(synchronize_session=False),
        )
        await db.commit()
        logger.warning(
            "Transaction removed after invoice write failure",
            extra={"transaction_id": str(transaction_id)},
        )
        return
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(
            "Compensating delete failed; marking transaction orphaned",
            extra={"transaction_id": str(transaction_id)}, exc_info=e,
        )

    try:
        await db.execute(
            update(Transaction)
            .where(Transaction.id == transaction_id)
            .values(status=TransactionStatus.ORPHANED.value)
            .execution_options(synchronize_session=False),
        )
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.critical(
            "Could not mark transaction orphaned",
            extra={"transaction_id": str(transaction_id)}, exc_info=e,
        )


async def create_order(
    db: AsyncSession,
    gateway: PaymentGateway,
    user: User,
    product_code: str,
    host: str,
    prices: Mapping[Product, str],
    require_verified_email: bool = True,
) -> str:
    """Open a checkout session for `product_code` and return where to send the user."""
    product = parse_product(product_code)

    if require_verified_email and not user.is_email_verified:
        raise ForbiddenError(
            "Email address must be verified before purchasing",
            "EMAIL_NOT_VERIFIED",
        )

    line_items = build_line_items(product, prices)
    redirect = subscription_url(host)
    user_id = user.id

    session = await gateway.create_checkout_session(
        line_items=line_items,
        customer_id=user.stripe_customer_id,
        success_url=redirect,
        cancel_url=redirect,
    )

    # Phase 1: transaction snapshot
    transaction = Transaction(
        id=uuid.uuid4(),
        stripe_id=session.id,
        data=session.payload,
        user_id=user_id,
    )
    transaction_id = transaction.id
    db.add(transaction)
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(
            "Failed to record transaction",
            extra={"user_id": str(user_id), "product": product.value},
            exc_info=e,
        )
        raise InternalError("Failed to record order", "ORDER_PERSIST_FAILED")

    # Phase 2: invoice
    db.add(Invoice(
        stripe_id=session.invoice_id,
        user_id=user_id,
        transaction_id=transaction_id,
    ))
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(
            "Failed to record invoice",
            extra={"user_id": str(user_id), "transaction_id": str(transaction_id)},
            exc_info=e,
        )
        await _compensate_transaction(db, transaction_id)
        raise InternalError("Failed to record order", "ORDER_PERSIST_FAILED")

    logger.info(
        "Checkout session opened",
        extra={
            "user_id": str(user_id),
            "product": product.value,
            "transaction_id": str(transaction_id),
        },
    )
    return session.url
