"""OAuth wire-protocol parameters.

Every field the serializer knows about is listed here with its on-wire
alias. The aliases are part of the protocol and must never change.
"""

from enum import Enum


class OAuthParameter(Enum):
    """Fields that represent common OAuth credentials."""

    CLIENT_ID = "client_id"
    CLIENT_SECRET = "client_secret"
    AUTHORIZATION_URL = "authorization_url"
    ACCESS_TOKEN_URL = "access_token_url"
    REFRESH_TOKEN_URL = "refresh_token_url"
    REDIRECT_URI = "redirect_uri"
    AUTHORIZATION_CODE = "code"
    ACCESS_TOKEN = "access_token"
    REFRESH_TOKEN = "refresh_token"
    RESPONSE_MODE = "response_mode"
    STATE = "state"
    SESSION_STATE = "session_state"
    RESPONSE_TYPE = "response_type"
    GRANT_TYPE = "grant_type"
    NONCE = "nonce"
    PROMPT = "prompt"
    ID_TOKEN = "id_token"
    RESOURCE = "resource"
    DOMAIN_HINT = "domain_hint"
    SCOPE = "scope"
    LOGIN_HINT = "login_hint"
    CLIENT_ASSERTION = "client_assertion"
    CLIENT_ASSERTION_TYPE = "client_assertion_type"
    CODE_VERIFIER = "code_verifier"
    CODE_CHALLENGE = "code_challenge"
    CODE_CHALLENGE_METHOD = "code_challenge_method"
    POST_LOGOUT_REDIRECT_URI = "post_logout_redirect_uri"
    LOGOUT_URL = "logout_url"
    ADMIN_CONSENT = "admin_consent"
    USERNAME = "username"
    PASSWORD = "password"
    DEVICE_CODE = "device_code"

    @property
    def alias(self) -> str:
        """Name of the field on the wire."""
        return self.value

    @property
    def is_redacted(self) -> bool:
        """Whether the value must be hidden in logs and repr output."""
        return self in _REDACTED

    @property
    def is_url(self) -> bool:
        """Whether the value must be a valid absolute URL."""
        return self in _URL_PARAMETERS

    @classmethod
    def from_alias(cls, alias: str) -> "OAuthParameter | None":
        """Look up a parameter by its wire alias."""
        try:
            return cls(alias)
        except ValueError:
            return None

    def __str__(self) -> str:
        return self.value


_REDACTED = frozenset(
    {
        OAuthParameter.CLIENT_ID,
        OAuthParameter.CLIENT_SECRET,
        OAuthParameter.ACCESS_TOKEN,
        OAuthParameter.REFRESH_TOKEN,
        OAuthParameter.ID_TOKEN,
        OAuthParameter.CODE_VERIFIER,
        OAuthParameter.CODE_CHALLENGE,
        OAuthParameter.PASSWORD,
        OAuthParameter.AUTHORIZATION_CODE,
    }
)

_URL_PARAMETERS = frozenset(
    {
        OAuthParameter.AUTHORIZATION_URL,
        OAuthParameter.ACCESS_TOKEN_URL,
        OAuthParameter.REFRESH_TOKEN_URL,
        OAuthParameter.LOGOUT_URL,
        OAuthParameter.POST_LOGOUT_REDIRECT_URI,
    }
)

REDACTED_PLACEHOLDER = "[REDACTED]"
