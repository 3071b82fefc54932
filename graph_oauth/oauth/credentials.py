"""Typed credentials for common Microsoft identity platform requests.

These wrap ``OAuthSerializer`` for the most common cases: building the
authorization URL of the authorization code, token flow and OpenID Connect
grants, and the token request of the authorization code grant. Each comes
with a builder:

    url = (
        AuthorizationCodeAuthorizationUrl.builder()
        .with_client_id("abc")
        .with_redirect_uri("https://localhost:8080")
        .with_scope(["User.Read"])
        .with_pkce()
        .url()
    )
"""

import secrets
from dataclasses import dataclass, field, replace

from ..utils.errors import (
    MutuallyExclusiveParametersError,
    OAuthError,
    RequiredParameterMissingError,
)
from .authority import Authority, AzureCloudInstance, Prompt, ResponseMode, ResponseType
from .grants import GrantType
from .parameters import OAuthParameter as P
from .pkce import generate_pkce_pair
from .selector import AccessTokenRequest, AsyncAccessTokenRequest
from .serializer import OAuthSerializer


def _require(value: str | None, parameter: P, message: str | None = None) -> str:
    if value is None or not value.strip():
        raise RequiredParameterMissingError(parameter.alias, message)
    return value


def secure_random_string() -> str:
    """Random URL-safe string for nonce and state values."""
    return secrets.token_urlsafe(32)


@dataclass
class AuthorizationCodeCredential:
    """Token request of the authorization code grant.

    Exactly one of ``authorization_code`` or ``refresh_token`` must be set.
    """

    client_id: str = ""
    client_secret: str = ""
    redirect_uri: str = ""
    authorization_code: str | None = None
    refresh_token: str | None = None
    code_verifier: str | None = None
    scopes: list[str] = field(default_factory=list)
    authority: Authority | str = Authority.COMMON

    @classmethod
    def new(
        cls, client_id: str, client_secret: str, authorization_code: str, redirect_uri: str
    ) -> "AuthorizationCodeCredential":
        return cls(
            client_id=client_id,
            client_secret=client_secret,
            authorization_code=authorization_code,
            redirect_uri=redirect_uri,
        )

    @classmethod
    def builder(cls) -> "AuthorizationCodeCredentialBuilder":
        return AuthorizationCodeCredentialBuilder()

    @property
    def grant_type(self) -> GrantType:
        return GrantType.AUTHORIZATION_CODE

    def uri(self, host: AzureCloudInstance | str = AzureCloudInstance.AZURE_PUBLIC) -> str:
        """Get the token endpoint for the configured authority."""
        oauth = OAuthSerializer().authority(host, self.authority)
        return oauth.get_or_else(P.ACCESS_TOKEN_URL)

    def form(self) -> dict[str, str]:
        """Build the token request form body.

        Returns:
            Form fields for an authorization code redemption or a refresh

        Raises:
            MutuallyExclusiveParametersError: If both a code and a refresh token are set
            RequiredParameterMissingError: If the client id or secret is blank, or
                neither a code nor a refresh token is set
        """
        if self.authorization_code is not None and self.refresh_token is not None:
            raise MutuallyExclusiveParametersError(
                P.AUTHORIZATION_CODE.alias, P.REFRESH_TOKEN.alias
            )

        oauth = OAuthSerializer()
        oauth.client_id(_require(self.client_id, P.CLIENT_ID))
        oauth.client_secret(_require(self.client_secret, P.CLIENT_SECRET))
        oauth.extend_scopes(self.scopes)

        if self.refresh_token is not None:
            oauth.refresh_token(
                _require(
                    self.refresh_token,
                    P.REFRESH_TOKEN,
                    "Either authorization code or refresh token is required",
                )
            )
            oauth.grant_type("refresh_token")
            return oauth.form_params(
                (P.CLIENT_ID, P.CLIENT_SECRET, P.REFRESH_TOKEN, P.GRANT_TYPE),
                (P.SCOPE,),
            )

        if self.authorization_code is not None:
            oauth.authorization_code(
                _require(
                    self.authorization_code,
                    P.AUTHORIZATION_CODE,
                    "Either authorization code or refresh token is required",
                )
            )
            oauth.grant_type("authorization_code")
            oauth.redirect_uri(_require(self.redirect_uri, P.REDIRECT_URI))
            if self.code_verifier:
                oauth.code_verifier(self.code_verifier)
            return oauth.form_params(
                (P.CLIENT_ID, P.CLIENT_SECRET, P.REDIRECT_URI, P.AUTHORIZATION_CODE, P.GRANT_TYPE),
                (P.SCOPE, P.CODE_VERIFIER),
            )

        raise RequiredParameterMissingError(
            f"{P.AUTHORIZATION_CODE.alias} or {P.REFRESH_TOKEN.alias}",
            "Either authorization code or refresh token is required",
        )

    def _request(self, request_class, host) -> AccessTokenRequest:
        try:
            return request_class(uri=self.uri(host), params=self.form())
        except OAuthError as e:
            return request_class(error=e)

    def access_token_request(
        self, host: AzureCloudInstance | str = AzureCloudInstance.AZURE_PUBLIC
    ) -> AccessTokenRequest:
        """Build a token request; errors are raised when it is sent."""
        return self._request(AccessTokenRequest, host)

    def async_access_token_request(
        self, host: AzureCloudInstance | str = AzureCloudInstance.AZURE_PUBLIC
    ) -> AsyncAccessTokenRequest:
        return self._request(AsyncAccessTokenRequest, host)


class AuthorizationCodeCredentialBuilder:
    def __init__(self):
        self._credential = AuthorizationCodeCredential()

    def with_authorization_code(self, authorization_code: str) -> "AuthorizationCodeCredentialBuilder":
        self._credential.authorization_code = authorization_code
        return self

    def with_refresh_token(self, refresh_token: str) -> "AuthorizationCodeCredentialBuilder":
        self._credential.refresh_token = refresh_token
        return self

    def with_redirect_uri(self, redirect_uri: str) -> "AuthorizationCodeCredentialBuilder":
        self._credential.redirect_uri = redirect_uri
        return self

    def with_client_id(self, client_id: str) -> "AuthorizationCodeCredentialBuilder":
        self._credential.client_id = client_id
        return self

    def with_client_secret(self, client_secret: str) -> "AuthorizationCodeCredentialBuilder":
        self._credential.client_secret = client_secret
        return self

    def with_tenant(self, tenant: str) -> "AuthorizationCodeCredentialBuilder":
        self._credential.authority = tenant
        return self

    def with_authority(self, authority: Authority | str) -> "AuthorizationCodeCredentialBuilder":
        self._credential.authority = authority
        return self

    def with_code_verifier(self, code_verifier: str) -> "AuthorizationCodeCredentialBuilder":
        self._credential.code_verifier = code_verifier
        return self

    def with_scope(self, scopes: list[str]) -> "AuthorizationCodeCredentialBuilder":
        self._credential.scopes = list(scopes)
        return self

    def build(self) -> AuthorizationCodeCredential:
        return replace(self._credential, scopes=list(self._credential.scopes))


@dataclass
class AuthorizationCodeAuthorizationUrl:
    """Authorization URL of the authorization code grant."""

    client_id: str = ""
    redirect_uri: str = ""
    authority: Authority | str = Authority.COMMON
    response_mode: ResponseMode = ResponseMode.QUERY
    response_type: str = ResponseType.CODE.value
    nonce: str | None = None
    state: str | None = None
    scopes: list[str] = field(default_factory=list)
    prompt: Prompt | None = None
    domain_hint: str | None = None
    login_hint: str | None = None
    code_verifier: str | None = None
    code_challenge: str | None = None
    code_challenge_method: str | None = None

    @classmethod
    def new(cls, client_id: str, redirect_uri: str) -> "AuthorizationCodeAuthorizationUrl":
        return cls(client_id=client_id, redirect_uri=redirect_uri)

    @classmethod
    def builder(cls) -> "AuthorizationCodeAuthorizationUrlBuilder":
        return AuthorizationCodeAuthorizationUrlBuilder()

    @property
    def grant_type(self) -> GrantType:
        return GrantType.AUTHORIZATION_CODE

    def url(self, host: AzureCloudInstance | str = AzureCloudInstance.AZURE_PUBLIC) -> str:
        """Build the authorization URL.

        Raises:
            RequiredParameterMissingError: If the client id, redirect URI or
                scopes are missing
        """
        oauth = OAuthSerializer()
        oauth.redirect_uri(_require(self.redirect_uri, P.REDIRECT_URI))
        oauth.client_id(_require(self.client_id, P.CLIENT_ID))
        oauth.extend_scopes(self.scopes)
        oauth.authority(host, self.authority)
        oauth.response_mode(self.response_mode)
        oauth.response_type(self.response_type)

        optional = {
            P.STATE: self.state,
            P.NONCE: self.nonce,
            P.PROMPT: self.prompt.value if self.prompt else None,
            P.DOMAIN_HINT: self.domain_hint,
            P.LOGIN_HINT: self.login_hint,
            P.CODE_CHALLENGE: self.code_challenge,
            P.CODE_CHALLENGE_METHOD: self.code_challenge_method,
        }
        oauth.extend((p, v) for p, v in optional.items() if v is not None)
        return oauth.authorization_url_for(self.grant_type)


class AuthorizationCodeAuthorizationUrlBuilder:
    def __init__(self):
        self._url = AuthorizationCodeAuthorizationUrl()

    def with_redirect_uri(self, redirect_uri: str) -> "AuthorizationCodeAuthorizationUrlBuilder":
        self._url.redirect_uri = redirect_uri
        return self

    def with_client_id(self, client_id: str) -> "AuthorizationCodeAuthorizationUrlBuilder":
        self._url.client_id = client_id
        return self

    def with_tenant(self, tenant: str) -> "AuthorizationCodeAuthorizationUrlBuilder":
        self._url.authority = tenant
        return self

    def with_authority(self, authority: Authority | str) -> "AuthorizationCodeAuthorizationUrlBuilder":
        self._url.authority = authority
        return self

    def with_response_type(self, response_type: ResponseType | str) -> "AuthorizationCodeAuthorizationUrlBuilder":
        self._url.response_type = ResponseType(response_type).value
        return self

    def with_response_mode(self, response_mode: ResponseMode) -> "AuthorizationCodeAuthorizationUrlBuilder":
        self._url.response_mode = response_mode
        return self

    def with_nonce(self, nonce: str) -> "AuthorizationCodeAuthorizationUrlBuilder":
        self._url.nonce = nonce
        return self

    def with_state(self, state: str) -> "AuthorizationCodeAuthorizationUrlBuilder":
        self._url.state = state
        return self

    def with_scope(self, scopes: list[str]) -> "AuthorizationCodeAuthorizationUrlBuilder":
        self._url.scopes = list(scopes)
        return self

    def with_prompt(self, prompt: Prompt) -> "AuthorizationCodeAuthorizationUrlBuilder":
        self._url.prompt = prompt
        return self

    def with_domain_hint(self, domain_hint: str) -> "AuthorizationCodeAuthorizationUrlBuilder":
        self._url.domain_hint = domain_hint
        return self

    def with_login_hint(self, login_hint: str) -> "AuthorizationCodeAuthorizationUrlBuilder":
        self._url.login_hint = login_hint
        return self

    def with_code_challenge(self, code_challenge: str) -> "AuthorizationCodeAuthorizationUrlBuilder":
        self._url.code_challenge = code_challenge
        return self

    def with_code_challenge_method(self, method: str) -> "AuthorizationCodeAuthorizationUrlBuilder":
        self._url.code_challenge_method = method
        return self

    def with_pkce(self) -> "AuthorizationCodeAuthorizationUrlBuilder":
        """Generate a PKCE pair; the verifier is kept on the built URL for the token request."""
        code_verifier, code_challenge, method = generate_pkce_pair()
        self._url.code_verifier = code_verifier
        self._url.code_challenge = code_challenge
        self._url.code_challenge_method = method
        return self

    def build(self) -> AuthorizationCodeAuthorizationUrl:
        return replace(self._url, scopes=list(self._url.scopes))

    def url(self, host: AzureCloudInstance | str = AzureCloudInstance.AZURE_PUBLIC) -> str:
        return self._url.url(host)


@dataclass
class TokenFlowAuthorizationUrl:
    """Authorization URL of the legacy token flow on login.live.com."""

    client_id: str = ""
    redirect_uri: str = ""
    scopes: list[str] = field(default_factory=list)
    response_type: ResponseType = ResponseType.TOKEN

    @classmethod
    def new(cls, client_id: str, redirect_uri: str, scopes: list[str]) -> "TokenFlowAuthorizationUrl":
        return cls(client_id=client_id, redirect_uri=redirect_uri, scopes=list(scopes))

    @classmethod
    def builder(cls) -> "TokenFlowAuthorizationUrlBuilder":
        return TokenFlowAuthorizationUrlBuilder()

    def url(self) -> str:
        oauth = OAuthSerializer()
        oauth.redirect_uri(_require(self.redirect_uri, P.REDIRECT_URI))
        oauth.client_id(_require(self.client_id, P.CLIENT_ID))
        if not self.scopes:
            raise RequiredParameterMissingError(P.SCOPE.alias)
        oauth.extend_scopes(self.scopes)
        oauth.legacy_authority()
        oauth.response_type(self.response_type)
        return oauth.authorization_url_for(GrantType.TOKEN_FLOW)


class TokenFlowAuthorizationUrlBuilder:
    def __init__(self):
        self._url = TokenFlowAuthorizationUrl()

    def with_client_id(self, client_id: str) -> "TokenFlowAuthorizationUrlBuilder":
        self._url.client_id = client_id
        return self

    def with_redirect_uri(self, redirect_uri: str) -> "TokenFlowAuthorizationUrlBuilder":
        self._url.redirect_uri = redirect_uri
        return self

    def with_scope(self, scopes: list[str]) -> "TokenFlowAuthorizationUrlBuilder":
        self._url.scopes = list(scopes)
        return self

    def build(self) -> TokenFlowAuthorizationUrl:
        return replace(self._url, scopes=list(self._url.scopes))

    def url(self) -> str:
        return self._url.url()


@dataclass
class OpenIdAuthorizationUrl:
    """Authorization URL of an OpenID Connect sign-in.

    A random nonce is generated and the ``openid`` scope is requested unless
    set otherwise.
    """

    client_id: str = ""
    redirect_uri: str = ""
    response_types: list[ResponseType] = field(default_factory=lambda: [ResponseType.CODE])
    response_mode: ResponseMode | None = None
    nonce: str = field(default_factory=secure_random_string)
    state: str | None = None
    scopes: list[str] = field(default_factory=lambda: ["openid"])
    prompts: list[Prompt] = field(default_factory=list)
    domain_hint: str | None = None
    login_hint: str | None = None
    authority: Authority | str = Authority.COMMON

    @classmethod
    def new(cls, client_id: str, redirect_uri: str) -> "OpenIdAuthorizationUrl":
        return cls(client_id=client_id, redirect_uri=redirect_uri)

    @classmethod
    def builder(cls) -> "OpenIdAuthorizationUrlBuilder":
        return OpenIdAuthorizationUrlBuilder()

    @property
    def grant_type(self) -> GrantType:
        return GrantType.OPEN_ID

    def url(self, host: AzureCloudInstance | str = AzureCloudInstance.AZURE_PUBLIC) -> str:
        oauth = OAuthSerializer()
        oauth.redirect_uri(_require(self.redirect_uri, P.REDIRECT_URI))
        oauth.client_id(_require(self.client_id, P.CLIENT_ID))
        oauth.nonce(_require(self.nonce, P.NONCE))
        oauth.extend_scopes(self.scopes)
        oauth.authority(host, self.authority)
        oauth.response_types(self.response_types)
        if self.response_mode is not None:
            oauth.response_mode(self.response_mode)
        if self.state is not None:
            oauth.state(self.state)
        if self.prompts:
            oauth.prompts(self.prompts)
        if self.domain_hint is not None:
            oauth.domain_hint(self.domain_hint)
        if self.login_hint is not None:
            oauth.login_hint(self.login_hint)
        return oauth.authorization_url_for(self.grant_type)


class OpenIdAuthorizationUrlBuilder:
    def __init__(self):
        self._url = OpenIdAuthorizationUrl()

    def with_redirect_uri(self, redirect_uri: str) -> "OpenIdAuthorizationUrlBuilder":
        self._url.redirect_uri = redirect_uri
        return self

    def with_client_id(self, client_id: str) -> "OpenIdAuthorizationUrlBuilder":
        self._url.client_id = client_id
        return self

    def with_tenant(self, tenant: str) -> "OpenIdAuthorizationUrlBuilder":
        self._url.authority = tenant
        return self

    def with_authority(self, authority: Authority | str) -> "OpenIdAuthorizationUrlBuilder":
        self._url.authority = authority
        return self

    def with_response_type(self, response_types: list[ResponseType]) -> "OpenIdAuthorizationUrlBuilder":
        self._url.response_types = list(response_types)
        return self

    def with_response_mode(self, response_mode: ResponseMode) -> "OpenIdAuthorizationUrlBuilder":
        self._url.response_mode = response_mode
        return self

    def with_nonce(self, nonce: str) -> "OpenIdAuthorizationUrlBuilder":
        self._url.nonce = nonce
        return self

    def with_state(self, state: str) -> "OpenIdAuthorizationUrlBuilder":
        self._url.state = state
        return self

    def with_scope(self, scopes: list[str]) -> "OpenIdAuthorizationUrlBuilder":
        self._url.scopes = list(scopes)
        return self

    def with_default_scope(self) -> "OpenIdAuthorizationUrlBuilder":
        """Request code and id token by form post with the usual profile scopes."""
        self._url.nonce = secure_random_string()
        self._url.response_mode = ResponseMode.FORM_POST
        self._url.response_types = [ResponseType.CODE, ResponseType.ID_TOKEN]
        self._url.scopes = ["profile", "email", "id_token", "offline_access"]
        return self

    def with_prompt(self, prompts: list[Prompt]) -> "OpenIdAuthorizationUrlBuilder":
        self._url.prompts = list(prompts)
        return self

    def with_domain_hint(self, domain_hint: str) -> "OpenIdAuthorizationUrlBuilder":
        self._url.domain_hint = domain_hint
        return self

    def with_login_hint(self, login_hint: str) -> "OpenIdAuthorizationUrlBuilder":
        self._url.login_hint = login_hint
        return self

    def build(self) -> OpenIdAuthorizationUrl:
        return replace(
            self._url,
            response_types=list(self._url.response_types),
            scopes=list(self._url.scopes),
            prompts=list(self._url.prompts),
        )

    def url(self, host: AzureCloudInstance | str = AzureCloudInstance.AZURE_PUBLIC) -> str:
        return self._url.url(host)
