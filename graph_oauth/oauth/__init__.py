"""OAuth 2.0 and OpenID Connect flows for the Microsoft identity platform."""

from .authority import (
    Authority,
    AzureCloudInstance,
    Prompt,
    ResponseMode,
    ResponseType,
)
from .credentials import (
    AuthorizationCodeAuthorizationUrl,
    AuthorizationCodeCredential,
    OpenIdAuthorizationUrl,
    TokenFlowAuthorizationUrl,
)
from .grants import GRANT_REQUESTS, GrantRequest, GrantRequestDescriptor, GrantType
from .id_token import IdToken
from .parameters import OAuthParameter
from .pkce import generate_pkce_pair
from .selector import (
    AccessTokenGrant,
    AccessTokenRequest,
    AsyncAccessTokenGrant,
    AsyncAccessTokenRequest,
    AsyncDeviceCodeGrant,
    AsyncGrantSelector,
    AuthorizationRequest,
    DeviceCodeGrant,
    GrantSelector,
    ImplicitGrant,
)
from .serializer import OAuthSerializer
from .tokens import MsalToken

__all__ = [
    # Store and encoding
    "OAuthSerializer",
    "OAuthParameter",
    "GrantType",
    "GrantRequest",
    "GrantRequestDescriptor",
    "GRANT_REQUESTS",
    # Grant selection
    "GrantSelector",
    "AsyncGrantSelector",
    "ImplicitGrant",
    "AccessTokenGrant",
    "AsyncAccessTokenGrant",
    "DeviceCodeGrant",
    "AsyncDeviceCodeGrant",
    "AuthorizationRequest",
    "AccessTokenRequest",
    "AsyncAccessTokenRequest",
    # Tokens
    "MsalToken",
    "IdToken",
    # Credentials
    "AuthorizationCodeCredential",
    "AuthorizationCodeAuthorizationUrl",
    "TokenFlowAuthorizationUrl",
    "OpenIdAuthorizationUrl",
    # Authority
    "Authority",
    "AzureCloudInstance",
    "Prompt",
    "ResponseMode",
    "ResponseType",
    "generate_pkce_pair",
]
