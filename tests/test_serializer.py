"""Tests for the OAuth credential store."""

import copy

import pytest

from graph_oauth.core.config import Settings
from graph_oauth.oauth.authority import (
    LEGACY_AUTHORIZATION_URL,
    LEGACY_TOKEN_URL,
    Authority,
    AzureCloudInstance,
    Prompt,
    ResponseType,
)
from graph_oauth.oauth.grants import GrantRequest, GrantType
from graph_oauth.oauth.id_token import IdToken
from graph_oauth.oauth.parameters import OAuthParameter as P
from graph_oauth.oauth.selector import AsyncGrantSelector, GrantSelector
from graph_oauth.oauth.serializer import OAuthSerializer
from graph_oauth.oauth.tokens import MsalToken
from graph_oauth.utils.errors import (
    ConfigurationError,
    GrantNotSupportedError,
    InvalidUrlError,
    RequiredParameterMissingError,
)

AUTHORIZE_URL = "https://login.microsoftonline.com/common/oauth2/v2.0/authorize"
TOKEN_URL = "https://login.microsoftonline.com/common/oauth2/v2.0/token"


class TestStore:
    """Tests for insert, get and remove."""

    def test_insert_and_get(self) -> None:
        oauth = OAuthSerializer()
        oauth.insert(P.CLIENT_ID, "abc")
        assert oauth.get(P.CLIENT_ID) == "abc"
        assert oauth.get("client_id") == "abc"

    def test_last_write_wins(self) -> None:
        """Test that setting a parameter twice keeps the latest value."""
        oauth = OAuthSerializer().client_id("first").client_id("second")
        assert oauth.get(P.CLIENT_ID) == "second"

    def test_entry_with_keeps_existing_value(self) -> None:
        oauth = OAuthSerializer().state("mine")
        assert oauth.entry_with(P.STATE, "theirs") == "mine"
        assert oauth.get(P.STATE) == "mine"

    def test_entry_with_sets_missing_value(self) -> None:
        oauth = OAuthSerializer()
        assert oauth.entry_with(P.RESPONSE_MODE, "query") == "query"
        assert oauth.get(P.RESPONSE_MODE) == "query"

    def test_get_missing_returns_none(self) -> None:
        assert OAuthSerializer().get(P.NONCE) is None

    def test_get_or_else_raises_with_alias(self) -> None:
        """Test that a missing parameter error names the wire alias."""
        with pytest.raises(RequiredParameterMissingError) as exc_info:
            OAuthSerializer().get_or_else(P.AUTHORIZATION_CODE)
        assert exc_info.value.alias == "code"
        assert "missing required field `code`" in str(exc_info.value)

    def test_contains_and_remove(self) -> None:
        oauth = OAuthSerializer().nonce("n-1")
        assert oauth.contains(P.NONCE)
        assert oauth.contains_key("nonce")
        oauth.remove(P.NONCE)
        assert not oauth.contains(P.NONCE)

    def test_unknown_alias_raises(self) -> None:
        with pytest.raises(KeyError):
            OAuthSerializer().insert("not_a_parameter", "x")

    def test_extend(self) -> None:
        """Test bulk insertion from a mapping."""
        oauth = OAuthSerializer().extend({P.CLIENT_ID: "abc", "client_secret": "secret"})
        assert oauth.get(P.CLIENT_ID) == "abc"
        assert oauth.get(P.CLIENT_SECRET) == "secret"

    def test_admin_consent_bool(self) -> None:
        assert OAuthSerializer().admin_consent(True).get(P.ADMIN_CONSENT) == "true"

    def test_enum_setters(self) -> None:
        oauth = OAuthSerializer()
        oauth.response_types([ResponseType.CODE, ResponseType.ID_TOKEN])
        oauth.prompts([Prompt.LOGIN, Prompt.CONSENT])
        assert oauth.get(P.RESPONSE_TYPE) == "code id_token"
        assert oauth.get(P.PROMPT) == "login consent"


class TestUrlValidation:
    """Tests for URL parameter validation at insert time."""

    @pytest.mark.parametrize("value", ["not a url", "login.microsoftonline.com/token", "/oauth2/token", ""])
    def test_invalid_url_rejected(self, value: str) -> None:
        oauth = OAuthSerializer()
        with pytest.raises(InvalidUrlError) as exc_info:
            oauth.access_token_url(value)
        assert exc_info.value.parameter == "access_token_url"
        assert isinstance(exc_info.value, ConfigurationError)

    def test_invalid_url_leaves_state_unchanged(self) -> None:
        """Test that a rejected URL does not replace the previous value."""
        oauth = OAuthSerializer().authorization_url("https://example.com/authorize")
        with pytest.raises(InvalidUrlError):
            oauth.authorization_url("nope")
        assert oauth.get(P.AUTHORIZATION_URL) == "https://example.com/authorize"

    @pytest.mark.parametrize("value", ["msal-app://logout", "ftp://host/x"])
    def test_any_scheme_accepted(self, value: str) -> None:
        """Test that absolute URLs with a non-http scheme are accepted."""
        oauth = OAuthSerializer().post_logout_redirect_uri(value)
        assert oauth.get(P.POST_LOGOUT_REDIRECT_URI) == value

    def test_redirect_uri_not_validated(self) -> None:
        """Test that native client redirect URIs are accepted as-is."""
        oauth = OAuthSerializer().redirect_uri("msal-app://auth")
        assert oauth.get(P.REDIRECT_URI) == "msal-app://auth"


class TestScopes:
    """Tests for the scope set."""

    def test_scopes_are_deduplicated_and_sorted(self) -> None:
        oauth = OAuthSerializer().extend_scopes(["write", "read", "write"])
        assert oauth.get_scopes() == {"read", "write"}
        assert oauth.join_scopes() == "read write"
        assert oauth.join_scopes(",") == "read,write"

    def test_contains_scope_parameter(self) -> None:
        """Test that scope counts as present only when the set is non-empty."""
        oauth = OAuthSerializer()
        assert not oauth.contains(P.SCOPE)
        oauth.add_scope("read")
        assert oauth.contains(P.SCOPE)
        assert oauth.contains_scope("read")

    def test_remove_and_clear(self) -> None:
        oauth = OAuthSerializer().extend_scopes(["read", "write"])
        oauth.remove_scope("read")
        assert oauth.get_scopes() == {"write"}
        oauth.clear_scopes()
        assert oauth.get(P.SCOPE) is None

    def test_insert_scope_adds_to_set(self) -> None:
        oauth = OAuthSerializer().insert(P.SCOPE, "User.Read offline_access")
        assert oauth.get_scopes() == {"User.Read", "offline_access"}


class TestEndpoints:
    """Tests for the authority helpers."""

    def test_tenant_id(self) -> None:
        oauth = OAuthSerializer().tenant_id("contoso")
        base = "https://login.microsoftonline.com/contoso/oauth2/v2.0"
        assert oauth.get(P.AUTHORIZATION_URL) == f"{base}/authorize"
        assert oauth.get(P.ACCESS_TOKEN_URL) == f"{base}/token"
        assert oauth.get(P.REFRESH_TOKEN_URL) == f"{base}/token"

    def test_authority_national_cloud(self) -> None:
        oauth = OAuthSerializer().authority(AzureCloudInstance.AZURE_CHINA, Authority.ORGANIZATIONS)
        assert oauth.get(P.ACCESS_TOKEN_URL) == (
            "https://login.chinacloudapi.cn/organizations/oauth2/v2.0/token"
        )

    def test_authority_one_drive_uses_legacy_endpoints(self) -> None:
        oauth = OAuthSerializer().authority(AzureCloudInstance.ONE_DRIVE_AND_SHAREPOINT)
        assert oauth.get(P.AUTHORIZATION_URL) == LEGACY_AUTHORIZATION_URL
        assert oauth.get(P.ACCESS_TOKEN_URL) == LEGACY_TOKEN_URL

    def test_admin_consent(self) -> None:
        oauth = OAuthSerializer().authority_admin_consent(authority="contoso")
        assert oauth.get(P.AUTHORIZATION_URL) == (
            "https://login.microsoftonline.com/contoso/adminconsent"
        )
        assert oauth.get(P.ACCESS_TOKEN_URL).endswith("/contoso/oauth2/v2.0/token")

    def test_from_settings(self) -> None:
        settings = Settings(
            client_id="abc",
            client_secret="secret",
            redirect_uri="https://localhost:8080",
            tenant="contoso",
            _env_file=None,
        )
        oauth = OAuthSerializer.from_settings(settings)
        assert oauth.get(P.CLIENT_ID) == "abc"
        assert oauth.get(P.CLIENT_SECRET) == "secret"
        assert oauth.get(P.REDIRECT_URI) == "https://localhost:8080"
        assert "/contoso/" in oauth.get(P.AUTHORIZATION_URL)


class TestTokens:
    """Tests for storing id tokens and token responses."""

    def test_pkce_generation(self) -> None:
        oauth = OAuthSerializer().generate_sha256_challenge_and_verifier()
        assert len(oauth.get(P.CODE_VERIFIER)) == 43
        assert oauth.get(P.CODE_CHALLENGE)
        assert oauth.get(P.CODE_CHALLENGE_METHOD) == "S256"

    def test_id_token_keeps_existing_state(self) -> None:
        oauth = OAuthSerializer().state("original")
        oauth.id_token(IdToken.new("jwt", "code-1", "returned", "session-1"))
        assert oauth.get(P.STATE) == "original"
        assert oauth.get(P.AUTHORIZATION_CODE) == "code-1"
        assert oauth.get(P.SESSION_STATE) == "session-1"
        assert oauth.get(P.ID_TOKEN) == "jwt"

    def test_access_token_copies_refresh_token(self, sample_token: MsalToken) -> None:
        oauth = OAuthSerializer().access_token(sample_token)
        assert oauth.get(P.REFRESH_TOKEN) == "test_refresh_token_67890"
        assert oauth.get_access_token() is sample_token

    def test_refresh_token_falls_back_to_stored_token(self, sample_token: MsalToken) -> None:
        """Test the fallback to the stored token's refresh token."""
        oauth = OAuthSerializer().access_token(sample_token)
        oauth.remove(P.REFRESH_TOKEN)
        assert oauth.get_refresh_token() == "test_refresh_token_67890"

    def test_refresh_token_prefers_explicit_value(self, sample_token: MsalToken) -> None:
        oauth = OAuthSerializer().access_token(sample_token).refresh_token("explicit")
        assert oauth.get_refresh_token() == "explicit"

    def test_refresh_token_missing(self) -> None:
        with pytest.raises(RequiredParameterMissingError) as exc_info:
            OAuthSerializer().get_refresh_token()
        assert exc_info.value.alias == "refresh_token"


class TestPreRequestCheck:
    """Tests for default injection before encoding."""

    def test_defaults_injected(self) -> None:
        oauth = OAuthSerializer()
        oauth.pre_request_check(GrantType.CODE_FLOW, GrantRequest.AUTHORIZATION)
        assert oauth.get(P.RESPONSE_TYPE) == "code"
        assert oauth.get(P.RESPONSE_MODE) == "query"

    def test_defaults_do_not_overwrite(self) -> None:
        oauth = OAuthSerializer().response_mode("fragment")
        oauth.pre_request_check(GrantType.AUTHORIZATION_CODE, GrantRequest.AUTHORIZATION)
        assert oauth.get(P.RESPONSE_MODE) == "fragment"

    def test_unsupported_phase(self) -> None:
        with pytest.raises(GrantNotSupportedError) as exc_info:
            OAuthSerializer().pre_request_check(GrantType.IMPLICIT, GrantRequest.ACCESS_TOKEN)
        assert exc_info.value.grant == "implicit"
        assert "browser-based authorization" in str(exc_info.value)


class TestBuild:
    """Tests for selector creation and repr."""

    def test_build_returns_independent_copy(self, oauth: OAuthSerializer) -> None:
        selector = oauth.build()
        oauth.client_id("changed")
        assert isinstance(selector, GrantSelector)
        assert selector.oauth.get(P.CLIENT_ID) == "abc"

    def test_build_async(self, oauth: OAuthSerializer) -> None:
        assert isinstance(oauth.build_async(), AsyncGrantSelector)

    def test_deepcopy(self, scoped_oauth: OAuthSerializer) -> None:
        clone = copy.deepcopy(scoped_oauth)
        clone.add_scope("admin")
        assert not scoped_oauth.contains_scope("admin")

    def test_repr_redacts_secrets(self) -> None:
        oauth = OAuthSerializer().client_secret("super-secret").password("hunter2").state("s-1")
        text = repr(oauth)
        assert "super-secret" not in text
        assert "hunter2" not in text
        assert "[REDACTED]" in text
        assert "state='s-1'" in text

    def test_endpoint_constants(self, oauth: OAuthSerializer) -> None:
        assert oauth.get(P.AUTHORIZATION_URL) == AUTHORIZE_URL
        assert oauth.get(P.ACCESS_TOKEN_URL) == TOKEN_URL
