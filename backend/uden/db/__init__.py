"""Database Package — SQLAlchemy declarative base.

Invariants:
    - All ORM models inherit from db.base.Base
"""
