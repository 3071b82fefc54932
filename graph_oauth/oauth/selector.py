"""Grant selection and deferred requests.

``OAuthSerializer.build()`` returns a ``GrantSelector`` and
``OAuthSerializer.build_async()`` an ``AsyncGrantSelector``. Each selector
method returns a handle bound to one grant type, holding its own copy of the
serializer. Handles build request objects; a request object carries either a
ready request or the error that prevented building it, and that error is only
raised when the request is sent or opened.
"""

import copy
import logging
import webbrowser
from dataclasses import dataclass, field

import httpx

from ..core import config
from ..utils.errors import BrowserLaunchError, OAuthError, TransportError
from .grants import GrantRequest, GrantType
from .serializer import OAuthSerializer

logger = logging.getLogger(__name__)

FORM_HEADERS = {"Content-Type": "application/x-www-form-urlencoded"}


@dataclass
class AuthorizationRequest:
    """Browser authorization request.

    Attributes:
        uri: Authorization URL to open
        error: Error captured while building the URL
    """

    uri: str = ""
    error: OAuthError | None = None

    def open(self) -> None:
        """Open the authorization URL in the default browser.

        Raises:
            OAuthError: The error captured while building the request
            BrowserLaunchError: If no browser could be started
        """
        if self.error is not None:
            raise self.error

        logger.info("Opening browser for authorization...")
        if not webbrowser.open(self.uri):
            logger.warning("Could not open a browser for authorization")
            raise BrowserLaunchError(self.uri)


@dataclass
class AccessTokenRequest:
    """Form POST to a token or device authorization endpoint.

    Attributes:
        uri: Endpoint URL
        params: Form body fields
        error: Error captured while building the request
    """

    uri: str = ""
    params: dict[str, str] = field(default_factory=dict)
    error: OAuthError | None = None

    def _timeout(self, timeout: float | None) -> float:
        return timeout if timeout is not None else config.settings.http_timeout

    def send(self, timeout: float | None = None) -> httpx.Response:
        """Send the request.

        Args:
            timeout: Request timeout in seconds (defaults to settings.http_timeout)

        Returns:
            The raw HTTP response; use ``MsalToken.from_response`` to parse it

        Raises:
            OAuthError: The error captured while building the request
            TransportError: If the request could not be sent
        """
        if self.error is not None:
            raise self.error

        logger.debug(f"POST {self.uri} (fields: {', '.join(self.params)})")
        with httpx.Client(timeout=self._timeout(timeout)) as client:
            try:
                response = client.post(self.uri, data=self.params, headers=FORM_HEADERS)
            except httpx.HTTPError as e:
                logger.error(f"Request to {self.uri} failed: {e}")
                raise TransportError(f"Request to {self.uri} failed: {e}") from e

        logger.debug(f"Response status: {response.status_code}")
        return response


@dataclass
class AsyncAccessTokenRequest(AccessTokenRequest):
    """Form POST sent with a non-blocking client."""

    async def send(self, timeout: float | None = None) -> httpx.Response:
        """Send the request.

        Raises:
            OAuthError: The error captured while building the request
            TransportError: If the request could not be sent
        """
        if self.error is not None:
            raise self.error

        logger.debug(f"POST {self.uri} (fields: {', '.join(self.params)})")
        async with httpx.AsyncClient(timeout=self._timeout(timeout)) as client:
            try:
                response = await client.post(
                    self.uri, data=self.params, headers=FORM_HEADERS
                )
            except httpx.HTTPError as e:
                logger.error(f"Request to {self.uri} failed: {e}")
                raise TransportError(f"Request to {self.uri} failed: {e}") from e

        logger.debug(f"Response status: {response.status_code}")
        return response


class GrantHandle:
    """Base for handles bound to one grant type.

    Every request is built from a fresh copy of the handle's serializer so
    that defaults filled in for one phase never leak into another.
    """

    request_class: type[AccessTokenRequest] = AccessTokenRequest

    def __init__(self, oauth: OAuthSerializer, grant: GrantType):
        self.oauth = oauth
        self.grant = grant

    def authorization_url(self) -> str:
        """Build the authorization URL.

        Raises:
            GrantNotSupportedError: If the grant has no authorization phase
            RequiredParameterMissingError: If a required parameter is missing
        """
        return copy.deepcopy(self.oauth).authorization_url_for(self.grant)

    def browser_authorization(self) -> AuthorizationRequest:
        try:
            uri = self.authorization_url()
        except OAuthError as e:
            logger.debug(f"Authorization request for {self.grant.value} not built: {e}")
            return AuthorizationRequest(error=e)
        return AuthorizationRequest(uri=uri)

    def _form_request(self, request: GrantRequest) -> AccessTokenRequest:
        oauth = copy.deepcopy(self.oauth)
        try:
            uri, params = oauth.form_request_for(self.grant, request)
        except OAuthError as e:
            logger.debug(f"{request.value} request for {self.grant.value} not built: {e}")
            return self.request_class(error=e)
        return self.request_class(uri=uri, params=params)


class ImplicitGrant(GrantHandle):
    """Handle for grants that only use the browser (token flow, implicit)."""

    def url(self) -> str:
        return self.authorization_url()


class AccessTokenGrant(GrantHandle):
    """Handle for grants that exchange credentials at the token endpoint."""

    def access_token(self) -> AccessTokenRequest:
        return self._form_request(GrantRequest.ACCESS_TOKEN)

    def refresh_token(self) -> AccessTokenRequest:
        return self._form_request(GrantRequest.REFRESH_TOKEN)


class AsyncAccessTokenGrant(AccessTokenGrant):
    request_class = AsyncAccessTokenRequest


class DeviceCodeGrant(AccessTokenGrant):
    """Handle for the device authorization grant (RFC 8628)."""

    def authorization(self) -> AccessTokenRequest:
        """POST the client id and scopes to the device authorization endpoint."""
        return self._form_request(GrantRequest.AUTHORIZATION)


class AsyncDeviceCodeGrant(DeviceCodeGrant):
    request_class = AsyncAccessTokenRequest


class GrantSelector:
    """Chooses the grant type for a serializer."""

    access_token_grant: type[AccessTokenGrant] = AccessTokenGrant
    device_code_grant: type[DeviceCodeGrant] = DeviceCodeGrant

    def __init__(self, oauth: OAuthSerializer):
        self.oauth = oauth

    def _copy(self) -> OAuthSerializer:
        return copy.deepcopy(self.oauth)

    def token_flow(self) -> ImplicitGrant:
        return ImplicitGrant(self._copy(), GrantType.TOKEN_FLOW)

    def code_flow(self) -> AccessTokenGrant:
        return self.access_token_grant(self._copy(), GrantType.CODE_FLOW)

    def implicit_grant(self) -> ImplicitGrant:
        return ImplicitGrant(self._copy(), GrantType.IMPLICIT)

    def authorization_code_grant(self) -> AccessTokenGrant:
        return self.access_token_grant(self._copy(), GrantType.AUTHORIZATION_CODE)

    def device_code(self) -> DeviceCodeGrant:
        return self.device_code_grant(self._copy(), GrantType.DEVICE_CODE)

    def open_id_connect(self) -> AccessTokenGrant:
        return self.access_token_grant(self._copy(), GrantType.OPEN_ID)

    def client_credentials(self) -> AccessTokenGrant:
        return self.access_token_grant(self._copy(), GrantType.CLIENT_CREDENTIALS)

    def resource_owner_password_credentials(self) -> AccessTokenGrant:
        return self.access_token_grant(
            self._copy(), GrantType.RESOURCE_OWNER_PASSWORD_CREDENTIALS
        )


class AsyncGrantSelector(GrantSelector):
    """Grant selector whose requests are sent with ``httpx.AsyncClient``."""

    access_token_grant = AsyncAccessTokenGrant
    device_code_grant = AsyncDeviceCodeGrant
