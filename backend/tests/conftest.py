"""Root conftest — shared test configuration."""

import os

import pytest

# Ensure tests never reach real collaborators or a local config file
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("UDEN_CONFIG_FILE", "config/test-does-not-exist.toml")
os.environ.setdefault("STRIPE__SECRET_API_KEY", "sk_test_fake")
os.environ.setdefault("EMAIL__API_KEY", "re_test_fake")


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch):
    """Minimum bcrypt cost: hashing semantics are unchanged, tests stay fast."""
    from uden.core import credentials
    monkeypatch.setattr(credentials, "BCRYPT_ROUNDS", 4)
