"""ORM Models — SQLAlchemy declarative models for all account and billing entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - User is the aggregate root; every other entity is owned by a user

Design Decisions:
    - One file per entity
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from uden.models.user import User  # noqa: F401
from uden.models.oauth_account import OAuthAccount  # noqa: F401
from uden.models.token import Token  # noqa: F401
from uden.models.transaction import Transaction  # noqa: F401
from uden.models.invoice import Invoice  # noqa: F401
