"""OAuth credential store and request encoder.

``OAuthSerializer`` holds the parameters of a flow (client id, endpoints,
scopes, codes and tokens) and encodes them into an authorization URL query
string or a token endpoint form body according to the rules in
``grants.GRANT_REQUESTS``.

Example:
    oauth = OAuthSerializer()
    oauth.client_id("abc").redirect_uri("https://localhost:8080").tenant_id("common")
    oauth.extend_scopes(["read", "write"])
    url = oauth.build().authorization_code_grant().authorization_url()
"""

import copy
import logging
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING
from urllib.parse import quote, urlencode, urlsplit

import httpx

from ..utils.errors import (
    GrantNotSupportedError,
    InvalidUrlError,
    RequiredParameterMissingError,
)
from .authority import (
    LEGACY_AUTHORIZATION_URL,
    LEGACY_TOKEN_URL,
    Authority,
    AzureCloudInstance,
    Prompt,
    ResponseMode,
    ResponseType,
    authority_value,
    endpoint_urls,
    join_values,
)
from .grants import GrantRequest, GrantRequestDescriptor, GrantType
from .id_token import IdToken
from .parameters import REDACTED_PLACEHOLDER, OAuthParameter
from .pkce import generate_pkce_pair
from .tokens import MsalToken

if TYPE_CHECKING:
    from ..core.config import Settings
    from .selector import AsyncGrantSelector, GrantSelector

logger = logging.getLogger(__name__)

P = OAuthParameter


def _parameter(parameter: "OAuthParameter | str") -> OAuthParameter:
    if isinstance(parameter, OAuthParameter):
        return parameter
    found = OAuthParameter.from_alias(parameter)
    if found is None:
        raise KeyError(f"Unknown OAuth parameter: {parameter}")
    return found


def _validate_url(parameter: OAuthParameter, value: str) -> None:
    try:
        url = httpx.URL(value)
    except (httpx.InvalidURL, TypeError) as e:
        raise InvalidUrlError(parameter.alias, value) from e
    if not url.scheme:
        raise InvalidUrlError(parameter.alias, value)


def append_query(base_url: str, query: str) -> str:
    """Append an encoded query string to a URL.

    Uses the URL's trailing ``?`` or ``&`` if present, ``&`` if the URL
    already has a query, and a new ``?`` otherwise.
    """
    if not query:
        return base_url
    if base_url.endswith(("?", "&")):
        return f"{base_url}{query}"
    if urlsplit(base_url).query:
        return f"{base_url}&{query}"
    return f"{base_url}?{query}"


class OAuthSerializer:
    """Credential store for a single OAuth flow.

    Values are stored by parameter alias; setting a parameter twice keeps the
    last value. Scopes are kept separately as a set and joined in sorted
    order when encoded.
    """

    def __init__(self):
        self._credentials: dict[str, str] = {}
        self._scopes: set[str] = set()
        self._access_token: MsalToken | None = None

    @classmethod
    def from_settings(cls, settings: "Settings | None" = None) -> "OAuthSerializer":
        """Create a serializer seeded from configuration.

        Args:
            settings: Settings to read; defaults to the global settings

        Returns:
            Serializer with client credentials and endpoints set
        """
        if settings is None:
            from ..core.config import settings as global_settings

            settings = global_settings

        oauth = cls()
        if settings.client_id:
            oauth.client_id(settings.client_id)
        if settings.client_secret:
            oauth.client_secret(settings.client_secret)
        if settings.redirect_uri:
            oauth.redirect_uri(settings.redirect_uri)
        oauth.authority(settings.cloud_instance, settings.tenant)
        return oauth

    # Store operations

    def insert(self, parameter: "OAuthParameter | str", value: str) -> "OAuthSerializer":
        """Set a parameter, replacing any previous value.

        Inserting ``scope`` adds the space-delimited values to the scope set.

        Raises:
            InvalidUrlError: If a URL parameter is not an absolute URL with a scheme.
                The store is left unchanged.
        """
        parameter = _parameter(parameter)
        value = str(value)
        if parameter is P.SCOPE:
            return self.extend_scopes(value.split())
        if parameter.is_url:
            _validate_url(parameter, value)

        if parameter.is_redacted:
            logger.debug(f"Set {parameter.alias}")
        else:
            logger.debug(f"Set {parameter.alias}={value}")
        self._credentials[parameter.alias] = value
        return self

    def entry_with(self, parameter: "OAuthParameter | str", value: str) -> str:
        """Set a parameter only if it is absent.

        Returns:
            The value now stored for the parameter
        """
        parameter = _parameter(parameter)
        if parameter is P.SCOPE:
            if not self._scopes:
                self.insert(parameter, value)
            return self.join_scopes()
        if parameter.alias not in self._credentials:
            self.insert(parameter, value)
        return self._credentials[parameter.alias]

    def get(self, parameter: "OAuthParameter | str") -> str | None:
        parameter = _parameter(parameter)
        if parameter is P.SCOPE:
            return self.join_scopes() if self._scopes else None
        return self._credentials.get(parameter.alias)

    def get_or_else(self, parameter: "OAuthParameter | str") -> str:
        """Get a parameter that must be present.

        Raises:
            RequiredParameterMissingError: If the parameter is not set
        """
        parameter = _parameter(parameter)
        value = self.get(parameter)
        if value is None:
            raise RequiredParameterMissingError(parameter.alias)
        return value

    def contains(self, parameter: "OAuthParameter | str") -> bool:
        """Check if a parameter is set. Scope is set when any scope was added."""
        parameter = _parameter(parameter)
        if parameter is P.SCOPE:
            return bool(self._scopes)
        return parameter.alias in self._credentials

    def contains_key(self, alias: str) -> bool:
        return alias in self._credentials

    def remove(self, parameter: "OAuthParameter | str") -> "OAuthSerializer":
        parameter = _parameter(parameter)
        if parameter is P.SCOPE:
            self._scopes.clear()
        else:
            self._credentials.pop(parameter.alias, None)
        return self

    def extend(
        self, values: "Mapping[OAuthParameter | str, str] | Iterable[tuple[OAuthParameter | str, str]]"
    ) -> "OAuthSerializer":
        """Insert many parameters at once."""
        items = values.items() if isinstance(values, Mapping) else values
        for parameter, value in items:
            self.insert(parameter, value)
        return self

    # Fluent setters

    def client_id(self, value: str) -> "OAuthSerializer":
        return self.insert(P.CLIENT_ID, value)

    def client_secret(self, value: str) -> "OAuthSerializer":
        return self.insert(P.CLIENT_SECRET, value)

    def authorization_url(self, value: str) -> "OAuthSerializer":
        return self.insert(P.AUTHORIZATION_URL, value)

    def access_token_url(self, value: str) -> "OAuthSerializer":
        return self.insert(P.ACCESS_TOKEN_URL, value)

    def refresh_token_url(self, value: str) -> "OAuthSerializer":
        return self.insert(P.REFRESH_TOKEN_URL, value)

    def redirect_uri(self, value: str) -> "OAuthSerializer":
        return self.insert(P.REDIRECT_URI, value)

    def authorization_code(self, value: str) -> "OAuthSerializer":
        return self.insert(P.AUTHORIZATION_CODE, value)

    def refresh_token(self, value: str) -> "OAuthSerializer":
        return self.insert(P.REFRESH_TOKEN, value)

    def response_mode(self, value: "ResponseMode | str") -> "OAuthSerializer":
        return self.insert(P.RESPONSE_MODE, join_values([value]))

    def response_type(self, value: "ResponseType | str") -> "OAuthSerializer":
        return self.insert(P.RESPONSE_TYPE, join_values([value]))

    def response_types(self, values: "Iterable[ResponseType | str]") -> "OAuthSerializer":
        """Set several response types, e.g. ``code id_token``."""
        return self.insert(P.RESPONSE_TYPE, join_values(values))

    def state(self, value: str) -> "OAuthSerializer":
        return self.insert(P.STATE, value)

    def session_state(self, value: str) -> "OAuthSerializer":
        return self.insert(P.SESSION_STATE, value)

    def grant_type(self, value: str) -> "OAuthSerializer":
        return self.insert(P.GRANT_TYPE, value)

    def nonce(self, value: str) -> "OAuthSerializer":
        return self.insert(P.NONCE, value)

    def prompt(self, value: "Prompt | str") -> "OAuthSerializer":
        return self.insert(P.PROMPT, join_values([value]))

    def prompts(self, values: "Iterable[Prompt | str]") -> "OAuthSerializer":
        return self.insert(P.PROMPT, join_values(values))

    def resource(self, value: str) -> "OAuthSerializer":
        return self.insert(P.RESOURCE, value)

    def domain_hint(self, value: str) -> "OAuthSerializer":
        return self.insert(P.DOMAIN_HINT, value)

    def login_hint(self, value: str) -> "OAuthSerializer":
        return self.insert(P.LOGIN_HINT, value)

    def client_assertion(self, value: str) -> "OAuthSerializer":
        return self.insert(P.CLIENT_ASSERTION, value)

    def client_assertion_type(self, value: str) -> "OAuthSerializer":
        return self.insert(P.CLIENT_ASSERTION_TYPE, value)

    def code_verifier(self, value: str) -> "OAuthSerializer":
        return self.insert(P.CODE_VERIFIER, value)

    def code_challenge(self, value: str) -> "OAuthSerializer":
        return self.insert(P.CODE_CHALLENGE, value)

    def code_challenge_method(self, value: str) -> "OAuthSerializer":
        return self.insert(P.CODE_CHALLENGE_METHOD, value)

    def post_logout_redirect_uri(self, value: str) -> "OAuthSerializer":
        return self.insert(P.POST_LOGOUT_REDIRECT_URI, value)

    def logout_url(self, value: str) -> "OAuthSerializer":
        return self.insert(P.LOGOUT_URL, value)

    def admin_consent(self, value: bool | str) -> "OAuthSerializer":
        if isinstance(value, bool):
            value = str(value).lower()
        return self.insert(P.ADMIN_CONSENT, value)

    def username(self, value: str) -> "OAuthSerializer":
        return self.insert(P.USERNAME, value)

    def password(self, value: str) -> "OAuthSerializer":
        return self.insert(P.PASSWORD, value)

    def device_code(self, value: str) -> "OAuthSerializer":
        return self.insert(P.DEVICE_CODE, value)

    # Endpoints

    def tenant_id(self, tenant: str) -> "OAuthSerializer":
        """Set the authorization, access token and refresh token URLs for a tenant."""
        return self.authority(AzureCloudInstance.AZURE_PUBLIC, tenant)

    def authority(
        self,
        host: AzureCloudInstance | str = AzureCloudInstance.AZURE_PUBLIC,
        authority: "Authority | str" = Authority.COMMON,
    ) -> "OAuthSerializer":
        """Set the endpoint URLs for a cloud instance and authority.

        The OneDrive and SharePoint host uses the legacy live.com endpoints.
        """
        host = AzureCloudInstance(host)
        if host is AzureCloudInstance.ONE_DRIVE_AND_SHAREPOINT:
            return self.legacy_authority()

        authorization_url, token_url = endpoint_urls(host, authority)
        return (
            self.authorization_url(authorization_url)
            .access_token_url(token_url)
            .refresh_token_url(token_url)
        )

    def authority_admin_consent(
        self,
        host: AzureCloudInstance | str = AzureCloudInstance.AZURE_PUBLIC,
        authority: "Authority | str" = Authority.COMMON,
    ) -> "OAuthSerializer":
        """Point the authorization URL at the tenant admin consent endpoint."""
        host = AzureCloudInstance(host)
        _, token_url = endpoint_urls(host, authority)
        consent_url = f"{host.value}/{authority_value(authority)}/adminconsent"
        return (
            self.authorization_url(consent_url)
            .access_token_url(token_url)
            .refresh_token_url(token_url)
        )

    def legacy_authority(self) -> "OAuthSerializer":
        """Use the login.live.com endpoints for personal accounts."""
        return (
            self.authorization_url(LEGACY_AUTHORIZATION_URL)
            .access_token_url(LEGACY_TOKEN_URL)
            .refresh_token_url(LEGACY_TOKEN_URL)
        )

    def generate_sha256_challenge_and_verifier(self) -> "OAuthSerializer":
        """Generate and store a PKCE verifier, challenge and method."""
        code_verifier, code_challenge, method = generate_pkce_pair()
        self.code_verifier(code_verifier)
        self.code_challenge(code_challenge)
        return self.code_challenge_method(method)

    # Tokens

    def id_token(self, id_token: IdToken) -> "OAuthSerializer":
        """Store the values of an OpenID Connect redirect response.

        An existing state is kept so the caller's original value can be
        compared with the returned one.
        """
        if id_token.code:
            self.authorization_code(id_token.code)
        if id_token.state:
            self.entry_with(P.STATE, id_token.state)
        if id_token.session_state:
            self.session_state(id_token.session_state)
        return self.insert(P.ID_TOKEN, id_token.id_token)

    def access_token(self, token: MsalToken) -> "OAuthSerializer":
        """Store a token response; its refresh token becomes the stored one."""
        if token.refresh_token:
            self.refresh_token(token.refresh_token)
        self._access_token = token
        return self

    def get_access_token(self) -> MsalToken | None:
        return self._access_token

    def get_refresh_token(self) -> str:
        """Get the refresh token, falling back to the stored token response.

        Raises:
            RequiredParameterMissingError: If no refresh token is available
        """
        value = self.get(P.REFRESH_TOKEN) or self._stored_refresh_token()
        if value is None:
            raise RequiredParameterMissingError(P.REFRESH_TOKEN.alias)
        return value

    def _stored_refresh_token(self) -> str | None:
        if self._access_token is None:
            return None
        return self._access_token.refresh_token or None

    # Scopes

    def add_scope(self, scope: str) -> "OAuthSerializer":
        self._scopes.add(scope)
        return self

    def extend_scopes(self, scopes: Iterable[str]) -> "OAuthSerializer":
        self._scopes.update(scopes)
        return self

    def remove_scope(self, scope: str) -> "OAuthSerializer":
        self._scopes.discard(scope)
        return self

    def clear_scopes(self) -> "OAuthSerializer":
        self._scopes.clear()
        return self

    def contains_scope(self, scope: str) -> bool:
        return scope in self._scopes

    def get_scopes(self) -> set[str]:
        return set(self._scopes)

    def join_scopes(self, sep: str = " ") -> str:
        return sep.join(sorted(self._scopes))

    # Encoding

    def pre_request_check(
        self, grant: GrantType, request: GrantRequest
    ) -> GrantRequestDescriptor:
        """Fill in the fixed values a request phase needs.

        Returns:
            Parameter rules for the request phase

        Raises:
            GrantNotSupportedError: If the grant has no such request phase
        """
        descriptor = grant.descriptor(request)
        if not descriptor.supported:
            raise GrantNotSupportedError(grant.value, request.value, descriptor.unsupported)
        for parameter, value in descriptor.defaults:
            self.entry_with(parameter, value)
        return descriptor

    def _pairs(
        self,
        required: Iterable[OAuthParameter],
        optional: Iterable[OAuthParameter],
        refresh_fallback: bool = False,
    ) -> list[tuple[str, str]]:
        pairs: list[tuple[str, str]] = []
        for parameter in required:
            if refresh_fallback and parameter is P.REFRESH_TOKEN:
                pairs.append((parameter.alias, self.get_refresh_token()))
            else:
                pairs.append((parameter.alias, self.get_or_else(parameter)))

        for parameter in optional:
            value = self.get(parameter)
            if value is None and refresh_fallback and parameter is P.REFRESH_TOKEN:
                value = self._stored_refresh_token()
            if value is not None:
                pairs.append((parameter.alias, value))
        return pairs

    def encode_query(
        self,
        required: Iterable[OAuthParameter],
        optional: Iterable[OAuthParameter] = (),
    ) -> str:
        """Encode parameters as a URL query string.

        Required parameters come first in the given order, followed by the
        optional parameters that are set.

        Raises:
            RequiredParameterMissingError: On the first missing required parameter
        """
        return urlencode(self._pairs(required, optional), quote_via=quote)

    def form_params(
        self,
        required: Iterable[OAuthParameter],
        optional: Iterable[OAuthParameter] = (),
    ) -> dict[str, str]:
        """Build a token endpoint form body as an alias to value mapping.

        The refresh token falls back to the stored token response.

        Raises:
            RequiredParameterMissingError: If a required parameter is missing
        """
        return dict(self._pairs(required, optional, refresh_fallback=True))

    def authorization_url_for(self, grant: GrantType) -> str:
        """Build the full authorization URL for a grant.

        Raises:
            GrantNotSupportedError: If the grant has no authorization phase
            RequiredParameterMissingError: If a required parameter is missing
        """
        descriptor = self.pre_request_check(grant, GrantRequest.AUTHORIZATION)
        base_url = self.get_or_else(descriptor.endpoint)
        query = self.encode_query(descriptor.required, descriptor.optional)
        return append_query(base_url, query)

    def form_request_for(
        self, grant: GrantType, request: GrantRequest
    ) -> tuple[str, dict[str, str]]:
        """Build the endpoint URL and form body of a POST request phase.

        Returns:
            Tuple of (endpoint_url, form_params)
        """
        descriptor = self.pre_request_check(grant, request)
        uri = self.get_or_else(descriptor.endpoint)
        params = self.form_params(descriptor.required, descriptor.optional)
        return uri, params

    def encode_uri(self, grant: GrantType, request: GrantRequest) -> str:
        """Encode a request phase.

        Returns:
            The full authorization URL for the authorization phase, or the
            form-urlencoded body for token endpoint phases
        """
        if request is GrantRequest.AUTHORIZATION:
            return self.authorization_url_for(grant)
        _, params = self.form_request_for(grant, request)
        return urlencode(params, quote_via=quote)

    # Selectors

    def build(self) -> "GrantSelector":
        from .selector import GrantSelector

        return GrantSelector(copy.deepcopy(self))

    def build_async(self) -> "AsyncGrantSelector":
        from .selector import AsyncGrantSelector

        return AsyncGrantSelector(copy.deepcopy(self))

    def __repr__(self) -> str:
        fields = []
        for alias, value in sorted(self._credentials.items()):
            parameter = OAuthParameter.from_alias(alias)
            if parameter is not None and parameter.is_redacted:
                value = REDACTED_PLACEHOLDER
            fields.append(f"{alias}={value!r}")
        fields.append(f"scopes={sorted(self._scopes)!r}")
        return f"OAuthSerializer({', '.join(fields)})"
