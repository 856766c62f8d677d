"""Registration Rules — pure input checks and value generation for new accounts.

Invariants:
    - Checks run in a fixed order and stop at the first failure:
      username shape → email syntax → disposable domain
    - Usernames are compared and stored lower-case
    - Verification codes are 8 chars from [0-9A-Z], drawn from the OS CSPRNG
    - Display names carry no markup

Existence checks against stored users live in services/registration.py.
"""

import re
import secrets
import string

import nh3

from uden.core.disposable_domains import is_disposable_domain
from uden.core.errors import BadRequestError

USERNAME_PATTERN = re.compile(r"[a-zA-Z0-9_]{3,20}")
EMAIL_PATTERN = re.compile(
    r"(([^<>()\[\]\\.,;:\s@\"]+(\.[^<>()\[\]\\.,;:\s@\"]+)*)|(\".+\"))"
    r"@((\[[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}\])"
    r"|(([a-zA-Z\-0-9]+\.)+[a-zA-Z]{2,}))"
)

VERIFICATION_CODE_LENGTH = 8
VERIFICATION_CODE_ALPHABET = string.digits + string.ascii_uppercase


def normalize_username(username: str) -> str:
    return username.lower()


def email_domain(email: str) -> str:
    return email.rsplit("@", 1)[-1].lower()


def check_username(username: str) -> str:
    """Return the normalized username or raise INVALID_USERNAME."""
    normalized = normalize_username(username)
    if not USERNAME_PATTERN.fullmatch(normalized):
        raise BadRequestError("Invalid username", "INVALID_USERNAME", field="username")
    return normalized


def check_email(email: str) -> None:
    if not EMAIL_PATTERN.fullmatch(email):
        raise BadRequestError("Invalid email", "INVALID_EMAIL", field="email")
    if is_disposable_domain(email_domain(email)):
        raise BadRequestError(
            "Email provider is not allowed", "EMAIL_PROVIDER_NOT_ALLOWED",
            field="email",
        )


def check_registration_input(username: str, email: str) -> str:
    """Run the input gate. Returns the normalized username."""
    normalized = check_username(username)
    check_email(email)
    return normalized


def generate_verification_code(length: int = VERIFICATION_CODE_LENGTH) -> str:
    return "".join(
        secrets.choice(VERIFICATION_CODE_ALPHABET) for _ in range(length)
    )


def sanitize_display_name(name: str) -> str:
    """Strip every tag (and script/style bodies) from a display name."""
    return nh3.clean(name, tags=set())
