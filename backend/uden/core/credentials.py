"""Credential Hasher — bcrypt password digests with a per-user salt.

Invariants:
    - hash_password is deterministic for a given (password, salt)
    - verify_password never raises: malformed salt or digest → False
    - Comparison is constant-time
    - Only the first 72 UTF-8 bytes of a password are significant (bcrypt input window)

Pure functions, no IO. bcrypt is CPU-bound; async callers run these in a worker thread.
"""

import secrets

import bcrypt

BCRYPT_ROUNDS = 12
BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def create_salt() -> str:
    """Fresh bcrypt salt (cost factor embedded) from the OS CSPRNG."""
    return bcrypt.gensalt(rounds=BCRYPT_ROUNDS).decode("ascii")


def hash_password(password: str, salt: str) -> str:
    return bcrypt.hashpw(_encode(password), salt.encode("ascii")).decode("ascii")


def verify_password(password: str, salt: str, digest: str) -> bool:
    try:
        candidate = bcrypt.hashpw(_encode(password), salt.encode("ascii"))
        return secrets.compare_digest(candidate, digest.encode("ascii"))
    except (ValueError, TypeError, UnicodeError):
        return False
