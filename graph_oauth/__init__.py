"""graph-oauth - OAuth 2.0 and OpenID Connect client for the Microsoft identity platform."""

__version__ = "0.1.0"

from .core.config import Settings
from .oauth import (
    AccessTokenRequest,
    AsyncGrantSelector,
    AuthorizationCodeAuthorizationUrl,
    AuthorizationCodeCredential,
    AuthorizationRequest,
    GrantRequest,
    GrantSelector,
    GrantType,
    IdToken,
    MsalToken,
    OAuthParameter,
    OAuthSerializer,
    OpenIdAuthorizationUrl,
    TokenFlowAuthorizationUrl,
)
from .utils.errors import (
    BrowserLaunchError,
    ConfigurationError,
    DeserializationError,
    GrantNotSupportedError,
    InvalidUrlError,
    MutuallyExclusiveParametersError,
    OAuthError,
    RequiredParameterMissingError,
    TransportError,
)
from .utils.logging_config import setup_logging

__all__ = [
    "OAuthSerializer",
    "OAuthParameter",
    "GrantType",
    "GrantRequest",
    "GrantSelector",
    "AsyncGrantSelector",
    "AuthorizationRequest",
    "AccessTokenRequest",
    "MsalToken",
    "IdToken",
    "Settings",
    # Credentials
    "AuthorizationCodeCredential",
    "AuthorizationCodeAuthorizationUrl",
    "TokenFlowAuthorizationUrl",
    "OpenIdAuthorizationUrl",
    # Errors
    "OAuthError",
    "ConfigurationError",
    "InvalidUrlError",
    "RequiredParameterMissingError",
    "MutuallyExclusiveParametersError",
    "GrantNotSupportedError",
    "TransportError",
    "DeserializationError",
    "BrowserLaunchError",
    "setup_logging",
]
