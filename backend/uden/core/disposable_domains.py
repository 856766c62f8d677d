"""Disposable / temporary mailbox providers. Lower-case domains only.

The community-maintained list shipped by the disposable-email-domains
distribution, plus local additions.
"""

from disposable_email_domains import blocklist

EXTRA_DISPOSABLE_DOMAINS = frozenset({
    "burnermail.io",
    "tempmail.dev",
    "mytemp.email",
})

DISPOSABLE_EMAIL_DOMAINS: frozenset[str] = frozenset(
    domain.lower() for domain in blocklist
) | EXTRA_DISPOSABLE_DOMAINS


def is_disposable_domain(domain: str) -> bool:
    return domain.strip().lower() in DISPOSABLE_EMAIL_DOMAINS
