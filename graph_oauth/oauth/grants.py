"""Grant types and the per-request parameter table.

For every grant type and request phase the table lists which parameters are
required, which are optional, and which fixed values are filled in before
encoding. Declaration order is the encoding order.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from .parameters import OAuthParameter as P

# RFC 8628 grant type URN
DEVICE_CODE_GRANT_TYPE = "urn:ietf:params:oauth:grant-type:device_code"

BROWSER_ONLY_MESSAGE = (
    "this grant type only supports browser-based authorization; "
    "there is no token endpoint exchange"
)


class GrantType(Enum):
    """OAuth 2.0 grant types supported by the serializer."""

    TOKEN_FLOW = "token_flow"
    CODE_FLOW = "code_flow"
    AUTHORIZATION_CODE = "authorization_code"
    IMPLICIT = "implicit"
    DEVICE_CODE = "device_code"
    OPEN_ID = "open_id"
    CLIENT_CREDENTIALS = "client_credentials"
    RESOURCE_OWNER_PASSWORD_CREDENTIALS = "resource_owner_password_credentials"

    def descriptor(self, request: "GrantRequest") -> "GrantRequestDescriptor":
        """Get the parameter rules for a request phase of this grant."""
        return GRANT_REQUESTS[(self, request)]

    def available_credentials(self, request: "GrantRequest") -> list[P]:
        """All parameters (required then optional) used by a request phase."""
        return list(self.descriptor(request).parameters)


class GrantRequest(Enum):
    """Which leg of the grant's protocol exchange is being built."""

    AUTHORIZATION = "authorization"
    ACCESS_TOKEN = "access_token"
    REFRESH_TOKEN = "refresh_token"


@dataclass(frozen=True)
class GrantRequestDescriptor:
    """Parameter rules for one (grant type, request phase) pair."""

    required: tuple[P, ...] = ()
    optional: tuple[P, ...] = ()
    defaults: tuple[tuple[P, str], ...] = ()
    unsupported: str | None = None
    # Endpoint the request is sent to
    endpoint: P = field(default=P.AUTHORIZATION_URL)

    @property
    def supported(self) -> bool:
        return self.unsupported is None

    @property
    def parameters(self) -> tuple[P, ...]:
        return self.required + self.optional


def _authorization(required, optional=(), defaults=()) -> GrantRequestDescriptor:
    return GrantRequestDescriptor(
        required=tuple(required),
        optional=tuple(optional),
        defaults=tuple(defaults),
        endpoint=P.AUTHORIZATION_URL,
    )


def _access_token(required, optional=(), defaults=()) -> GrantRequestDescriptor:
    return GrantRequestDescriptor(
        required=tuple(required),
        optional=tuple(optional),
        defaults=tuple(defaults),
        endpoint=P.ACCESS_TOKEN_URL,
    )


def _refresh_token(optional=(P.CLIENT_SECRET, P.SCOPE)) -> GrantRequestDescriptor:
    return GrantRequestDescriptor(
        required=(P.CLIENT_ID, P.REFRESH_TOKEN, P.GRANT_TYPE),
        optional=tuple(optional),
        defaults=((P.GRANT_TYPE, "refresh_token"),),
        endpoint=P.REFRESH_TOKEN_URL,
    )


def _unsupported(message: str, endpoint: P) -> GrantRequestDescriptor:
    return GrantRequestDescriptor(unsupported=message, endpoint=endpoint)


_AUTH = GrantRequest.AUTHORIZATION
_ACCESS = GrantRequest.ACCESS_TOKEN
_REFRESH = GrantRequest.REFRESH_TOKEN

GRANT_REQUESTS: MappingProxyType = MappingProxyType(
    {
        # Token flow: token returned in the redirect fragment
        (GrantType.TOKEN_FLOW, _AUTH): _authorization(
            required=(P.CLIENT_ID, P.REDIRECT_URI, P.SCOPE, P.RESPONSE_TYPE),
            optional=(P.STATE,),
            defaults=((P.RESPONSE_TYPE, "token"),),
        ),
        (GrantType.TOKEN_FLOW, _ACCESS): _unsupported(
            BROWSER_ONLY_MESSAGE, P.ACCESS_TOKEN_URL
        ),
        (GrantType.TOKEN_FLOW, _REFRESH): _unsupported(
            BROWSER_ONLY_MESSAGE, P.REFRESH_TOKEN_URL
        ),
        # Legacy code flow
        (GrantType.CODE_FLOW, _AUTH): _authorization(
            required=(P.CLIENT_ID, P.REDIRECT_URI, P.RESPONSE_TYPE, P.RESPONSE_MODE),
            optional=(P.SCOPE, P.STATE),
            defaults=((P.RESPONSE_TYPE, "code"), (P.RESPONSE_MODE, "query")),
        ),
        (GrantType.CODE_FLOW, _ACCESS): _access_token(
            required=(P.CLIENT_ID, P.REDIRECT_URI, P.AUTHORIZATION_CODE, P.GRANT_TYPE),
            optional=(P.CLIENT_SECRET,),
            defaults=((P.GRANT_TYPE, "authorization_code"),),
        ),
        (GrantType.CODE_FLOW, _REFRESH): _refresh_token(
            optional=(P.CLIENT_SECRET, P.REDIRECT_URI),
        ),
        # Authorization code grant
        (GrantType.AUTHORIZATION_CODE, _AUTH): _authorization(
            required=(P.CLIENT_ID, P.REDIRECT_URI, P.RESPONSE_TYPE, P.RESPONSE_MODE, P.SCOPE),
            optional=(
                P.STATE,
                P.PROMPT,
                P.DOMAIN_HINT,
                P.LOGIN_HINT,
                P.NONCE,
                P.CODE_CHALLENGE,
                P.CODE_CHALLENGE_METHOD,
            ),
            defaults=((P.RESPONSE_TYPE, "code"), (P.RESPONSE_MODE, "query")),
        ),
        (GrantType.AUTHORIZATION_CODE, _ACCESS): _access_token(
            required=(P.CLIENT_ID, P.REDIRECT_URI, P.AUTHORIZATION_CODE, P.GRANT_TYPE),
            optional=(P.CLIENT_SECRET, P.SCOPE, P.CODE_VERIFIER),
            defaults=((P.GRANT_TYPE, "authorization_code"),),
        ),
        (GrantType.AUTHORIZATION_CODE, _REFRESH): _refresh_token(),
        # Implicit grant
        (GrantType.IMPLICIT, _AUTH): _authorization(
            required=(P.CLIENT_ID, P.REDIRECT_URI, P.RESPONSE_TYPE, P.SCOPE),
            optional=(
                P.RESPONSE_MODE,
                P.STATE,
                P.NONCE,
                P.PROMPT,
                P.LOGIN_HINT,
                P.DOMAIN_HINT,
            ),
            defaults=((P.RESPONSE_TYPE, "token"),),
        ),
        (GrantType.IMPLICIT, _ACCESS): _unsupported(BROWSER_ONLY_MESSAGE, P.ACCESS_TOKEN_URL),
        (GrantType.IMPLICIT, _REFRESH): _unsupported(BROWSER_ONLY_MESSAGE, P.REFRESH_TOKEN_URL),
        # Device authorization grant (RFC 8628)
        (GrantType.DEVICE_CODE, _AUTH): _authorization(
            required=(P.CLIENT_ID, P.SCOPE),
        ),
        (GrantType.DEVICE_CODE, _ACCESS): _access_token(
            required=(P.GRANT_TYPE, P.CLIENT_ID, P.DEVICE_CODE),
            defaults=((P.GRANT_TYPE, DEVICE_CODE_GRANT_TYPE),),
        ),
        (GrantType.DEVICE_CODE, _REFRESH): _refresh_token(optional=(P.SCOPE,)),
        # OpenID Connect
        (GrantType.OPEN_ID, _AUTH): _authorization(
            required=(P.CLIENT_ID, P.RESPONSE_TYPE, P.REDIRECT_URI, P.SCOPE, P.NONCE),
            optional=(
                P.RESPONSE_MODE,
                P.STATE,
                P.PROMPT,
                P.LOGIN_HINT,
                P.DOMAIN_HINT,
                P.RESOURCE,
            ),
        ),
        (GrantType.OPEN_ID, _ACCESS): _access_token(
            required=(P.CLIENT_ID, P.REDIRECT_URI, P.AUTHORIZATION_CODE, P.GRANT_TYPE),
            optional=(P.CLIENT_SECRET, P.SCOPE, P.CODE_VERIFIER),
            defaults=((P.GRANT_TYPE, "authorization_code"),),
        ),
        (GrantType.OPEN_ID, _REFRESH): _refresh_token(),
        # Client credentials; the authorization leg is the admin consent URL
        (GrantType.CLIENT_CREDENTIALS, _AUTH): _authorization(
            required=(P.CLIENT_ID,),
            optional=(P.REDIRECT_URI, P.STATE),
        ),
        (GrantType.CLIENT_CREDENTIALS, _ACCESS): _access_token(
            required=(P.CLIENT_ID, P.GRANT_TYPE, P.SCOPE),
            optional=(P.CLIENT_SECRET, P.CLIENT_ASSERTION, P.CLIENT_ASSERTION_TYPE),
            defaults=((P.GRANT_TYPE, "client_credentials"),),
        ),
        (GrantType.CLIENT_CREDENTIALS, _REFRESH): GrantRequestDescriptor(
            required=(P.CLIENT_ID, P.GRANT_TYPE, P.SCOPE),
            optional=(P.CLIENT_SECRET, P.CLIENT_ASSERTION, P.CLIENT_ASSERTION_TYPE),
            defaults=((P.GRANT_TYPE, "client_credentials"),),
            endpoint=P.REFRESH_TOKEN_URL,
        ),
        # Resource owner password credentials
        (GrantType.RESOURCE_OWNER_PASSWORD_CREDENTIALS, _AUTH): _unsupported(
            "credentials are exchanged directly at the token endpoint; "
            "there is no browser authorization step",
            P.AUTHORIZATION_URL,
        ),
        (GrantType.RESOURCE_OWNER_PASSWORD_CREDENTIALS, _ACCESS): _access_token(
            required=(P.CLIENT_ID, P.GRANT_TYPE, P.USERNAME, P.PASSWORD, P.SCOPE),
            optional=(P.CLIENT_SECRET,),
            defaults=((P.GRANT_TYPE, "password"),),
        ),
        (GrantType.RESOURCE_OWNER_PASSWORD_CREDENTIALS, _REFRESH): _refresh_token(),
    }
)
