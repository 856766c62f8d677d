"""Auth Schemas — request/response models for registration, login and verification.

Invariants:
    - Field shape only: username/email rules live in core/validate_registration so
      each failure keeps its own error code
    - OAuth bodies keep the camelCase wire names (oauthData, clientId, ...) via aliases
"""

from pydantic import BaseModel, ConfigDict, Field

from uden.core.domain_types import OAuthParameters


class RegisterRequest(BaseModel):
    username: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=1, max_length=1024)
    email: str = Field(min_length=1, max_length=320)


class LoginRequest(BaseModel):
    username: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=1, max_length=1024)


class OAuthData(BaseModel):
    """Per-login provider parameters, supplied by the client."""
    model_config = ConfigDict(populate_by_name=True)

    client_id: str = Field(alias="clientId", min_length=1)
    client_secret: str = Field(alias="clientSecret", min_length=1)
    instance_url: str = Field(alias="instanceUrl", min_length=1)
    redirect_uri: str = Field(alias="redirectUri", min_length=1)

    def to_parameters(self) -> OAuthParameters:
        return OAuthParameters(
            client_id=self.client_id,
            client_secret=self.client_secret,
            instance_url=self.instance_url,
            redirect_uri=self.redirect_uri,
        )


class OAuthLoginRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    provider: str = Field(min_length=1, max_length=50)
    token: str = Field(min_length=1)
    oauth_data: OAuthData = Field(alias="oauthData")


class VerifyEmailRequest(BaseModel):
    code: str = Field(min_length=1, max_length=16)


class TokenResponse(BaseModel):
    token: str


class VerifyEmailResponse(BaseModel):
    verified: bool = True
