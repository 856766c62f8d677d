"""OAuth Provider Clients — Misskey and Mastodon token exchange + account lookup over httpx.

Invariants:
    - Every provider implements exchange_token / fetch_account (core/repository_protocols.OAuthProvider)
    - Endpoints derive from the caller-supplied instance URL; no server-side OAuth secrets
    - Every request has a bounded timeout; timeouts, transport errors, non-2xx
      responses and malformed payloads all surface as UpstreamError — no retries
    - The registry is the only place provider names are mapped to implementations

Design Decisions:
    - Misskey uses the legacy app-auth flow: the API credential is
      sha256(accessToken + appSecret), not the accessToken itself
"""

import hashlib
import logging
from typing import Any

import httpx

from uden.core.domain_types import ExternalAccountId, OAuthParameters
from uden.core.errors import BadRequestError, ErrorContext, UpstreamError
from uden.core.repository_protocols import OAuthProvider

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0


class HttpOAuthProvider:
    """Shared request/response handling for JSON-over-HTTP providers."""

    name: str = ""

    def __init__(
        self,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    async def _request(
        self, method: str, url: str, **kwargs: Any,
    ) -> dict:
        context = ErrorContext(provider=self.name)
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds, transport=self._transport,
            ) as client:
                response = await client.request(method, url, **kwargs)
                response.raise_for_status()
                payload = response.json()
        except httpx.TimeoutException as e:
            logger.error(
                f"OAuth provider timed out: {url}",
                extra={"provider": self.name}, exc_info=e,
            )
            raise UpstreamError(
                self.name, "OAuth provider timed out",
                "OAUTH_PROVIDER_TIMEOUT", context,
            )
        except httpx.HTTPStatusError as e:
            logger.error(
                f"OAuth provider returned {e.response.status_code}: {url}",
                extra={"provider": self.name},
            )
            raise UpstreamError(
                self.name, "OAuth provider rejected the request",
                "OAUTH_PROVIDER_ERROR", context,
            )
        except (httpx.HTTPError, ValueError) as e:
            logger.error(
                f"OAuth provider request failed: {url}",
                extra={"provider": self.name}, exc_info=e,
            )
            raise UpstreamError(
                self.name, "OAuth provider unavailable",
                "OAUTH_PROVIDER_ERROR", context,
            )
        if not isinstance(payload, dict):
            raise UpstreamError(
                self.name, "OAuth provider sent a malformed response",
                "OAUTH_PROVIDER_ERROR", context,
            )
        return payload

    def _require(self, payload: dict, key: str) -> str:
        value = payload.get(key)
        if value is None or value == "":
            logger.error(
                f"OAuth provider response missing '{key}'",
                extra={"provider": self.name},
            )
            raise UpstreamError(
                self.name, "OAuth provider sent a malformed response",
                "OAUTH_PROVIDER_ERROR", ErrorContext(provider=self.name),
            )
        return str(value)


class MisskeyProvider(HttpOAuthProvider):
    name = "misskey"

    async def exchange_token(self, artifact: str, params: OAuthParameters) -> str:
        payload = await self._request(
            "POST", f"{params.base_url}/api/auth/session/userkey",
            json={"appSecret": params.client_secret, "token": artifact},
        )
        access_token = self._require(payload, "accessToken")
        return hashlib.sha256(
            (access_token + params.client_secret).encode("utf-8"),
        ).hexdigest()

    async def fetch_account(
        self, access_token: str, params: OAuthParameters,
    ) -> ExternalAccountId:
        payload = await self._request(
            "POST", f"{params.base_url}/api/i", json={"i": access_token},
        )
        return ExternalAccountId(self._require(payload, "id"))


class MastodonProvider(HttpOAuthProvider):
    name = "mastodon"

    async def exchange_token(self, artifact: str, params: OAuthParameters) -> str:
        payload = await self._request(
            "POST", f"{params.base_url}/oauth/token",
            data={
                "grant_type": "authorization_code",
                "code": artifact,
                "client_id": params.client_id,
                "client_secret": params.client_secret,
                "redirect_uri": params.redirect_uri,
            },
        )
        return self._require(payload, "access_token")

    async def fetch_account(
        self, access_token: str, params: OAuthParameters,
    ) -> ExternalAccountId:
        payload = await self._request(
            "GET", f"{params.base_url}/api/v1/accounts/verify_credentials",
            headers={"Authorization": f"Bearer {access_token}"},
        )
        return ExternalAccountId(self._require(payload, "id"))


class OAuthProviderRegistry:
    """Maps provider name → implementation. Adding a provider = one register() call."""

    def __init__(self, providers: list[OAuthProvider] | None = None):
        self._providers: dict[str, OAuthProvider] = {}
        for provider in providers or []:
            self.register(provider)

    def register(self, provider: OAuthProvider) -> None:
        self._providers[provider.name] = provider

    def get(self, name: str) -> OAuthProvider:
        provider = self._providers.get(name)
        if provider is None:
            raise BadRequestError(
                f"Unsupported provider: {name}", "UNSUPPORTED_PROVIDER",
                field="provider",
            )
        return provider

    def names(self) -> list[str]:
        return sorted(self._providers)


def build_default_registry(
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
) -> OAuthProviderRegistry:
    return OAuthProviderRegistry([
        MisskeyProvider(timeout_seconds),
        MastodonProvider(timeout_seconds),
    ])
