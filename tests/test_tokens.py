"""Tests for token endpoint responses."""

import json
from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import httpx
import pytest

from graph_oauth.oauth.id_token import IdToken
from graph_oauth.oauth.tokens import MsalToken, parse_oauth_error
from graph_oauth.utils.errors import DeserializationError, TransportError


class TestMsalTokenParsing:
    """Tests for building tokens from the wire format."""

    def test_expires_in_as_string_or_number(self) -> None:
        """Test that a numeric string lifetime equals the integer form."""
        from_int = MsalToken.from_json('{"access_token": "a", "token_type": "Bearer", "expires_in": 65874}')
        from_str = MsalToken.from_json('{"access_token": "a", "token_type": "Bearer", "expires_in": "65874"}')
        assert from_int.expires_in == from_str.expires_in == 65874

    def test_scope_split(self, sample_token: MsalToken) -> None:
        assert sample_token.scope == ["User.Read", "Mail.Read"]

    def test_additional_fields_preserved(self) -> None:
        token = MsalToken.from_dict(
            {"access_token": "a", "token_type": "Bearer", "expires_in": 10, "foci": "1"}
        )
        assert token.additional_fields == {"foci": "1"}

    def test_invalid_json(self) -> None:
        with pytest.raises(DeserializationError):
            MsalToken.from_json("not json")

    def test_json_must_be_object(self) -> None:
        with pytest.raises(DeserializationError):
            MsalToken.from_json(json.dumps(["a"]))

    def test_invalid_field_type(self) -> None:
        with pytest.raises(DeserializationError):
            MsalToken.from_dict({"access_token": "a", "token_type": "Bearer", "expires_in": "soon"})

    @pytest.mark.parametrize(
        "payload",
        [
            "{}",
            '{"access_token": "a", "token_type": "Bearer"}',
            '{"token_type": "Bearer", "expires_in": 3600}',
            '{"access_token": "a", "expires_in": 3600}',
            '{"access_token": "a", "token_type": "Bearer", "expires_in": null}',
        ],
    )
    def test_missing_required_field(self, payload: str) -> None:
        """Test that a response without access_token, token_type or expires_in is rejected."""
        with pytest.raises(DeserializationError) as exc_info:
            MsalToken.from_json(payload)
        assert "missing" in str(exc_info.value)

    def test_from_response_missing_lifetime(self) -> None:
        response = httpx.Response(200, json={"access_token": "a", "token_type": "Bearer"})
        with pytest.raises(DeserializationError):
            MsalToken.from_response(response)

    def test_from_response_error(self) -> None:
        """Test that provider errors are carried on the TransportError."""
        response = httpx.Response(
            400,
            json={"error": "invalid_grant", "error_description": "AADSTS70008: expired"},
        )
        with pytest.raises(TransportError) as exc_info:
            MsalToken.from_response(response)
        assert exc_info.value.status_code == 400
        assert exc_info.value.error == "invalid_grant"
        assert "AADSTS70008" in exc_info.value.error_description

    def test_from_response_error_without_body(self) -> None:
        with pytest.raises(TransportError) as exc_info:
            MsalToken.from_response(httpx.Response(503, text="Service Unavailable"))
        assert exc_info.value.error is None
        assert "HTTP 503" in str(exc_info.value)

    def test_parse_oauth_error(self) -> None:
        assert parse_oauth_error(httpx.Response(400, json={"error": "invalid_client"})) == (
            "invalid_client",
            None,
        )
        assert parse_oauth_error(httpx.Response(500, text="<html>")) == (None, None)


class TestMsalTokenTimestamps:
    """Tests for issue and expiry times."""

    def test_timestamps_set_on_creation(self) -> None:
        token = MsalToken.new("Bearer", 3600, "access")
        assert token.timestamp is not None
        assert token.expires_on - token.timestamp == timedelta(seconds=3600)

    def test_elapsed(self) -> None:
        assert MsalToken.new("Bearer", 120, "access").elapsed() == timedelta(seconds=120)

    def test_not_expired(self) -> None:
        assert not MsalToken.new("Bearer", 3600, "access").is_expired()

    def test_expired(self) -> None:
        """Test expiry once the clock has moved past expires_on."""
        token = MsalToken.new("Bearer", 1, "access")
        later = datetime.now(UTC) + timedelta(seconds=5)
        with patch("graph_oauth.oauth.tokens._utcnow", return_value=later):
            assert token.is_expired()
            assert token.time_until_expiry() < timedelta(0)

    def test_with_expires_in_restarts_clock(self) -> None:
        issued = datetime(2024, 1, 1, tzinfo=UTC)
        token = MsalToken.new("Bearer", 1, "access")
        with patch("graph_oauth.oauth.tokens._utcnow", return_value=issued):
            token.with_expires_in(7200)
        assert token.timestamp == issued
        assert token.expires_on == issued + timedelta(seconds=7200)

    def test_not_expired_within_lifetime(self) -> None:
        """Test that an 8 second token is still valid 4 seconds after issue."""
        issued = datetime(2024, 1, 1, tzinfo=UTC)
        with patch("graph_oauth.oauth.tokens._utcnow", return_value=issued):
            token = MsalToken.new("Bearer", 8, "access")
        with patch("graph_oauth.oauth.tokens._utcnow", return_value=issued + timedelta(seconds=4)):
            assert not token.is_expired()
        with patch("graph_oauth.oauth.tokens._utcnow", return_value=issued + timedelta(seconds=9)):
            assert token.is_expired()

    def test_with_expires_in_numeric_string(self) -> None:
        """Test that a string lifetime is coerced before the expiry is recomputed."""
        issued = datetime(2024, 1, 1, tzinfo=UTC)
        token = MsalToken.new("Bearer", 10, "access")
        with patch("graph_oauth.oauth.tokens._utcnow", return_value=issued):
            token.with_expires_in("3600")
        assert token.expires_in == 3600
        assert token.expires_on == issued + timedelta(seconds=3600)

    def test_invalid_expires_in_leaves_token_unchanged(self) -> None:
        token = MsalToken.new("Bearer", 10, "access")
        expires_on = token.expires_on
        with pytest.raises(ValueError):
            token.with_expires_in("soon")
        with pytest.raises(TypeError):
            token.with_expires_in(None)
        assert token.expires_in == 10
        assert token.expires_on == expires_on

    def test_gen_timestamp(self) -> None:
        token = MsalToken.new("Bearer", 60, "access")
        now = datetime(2030, 6, 1, tzinfo=UTC)
        with patch("graph_oauth.oauth.tokens._utcnow", return_value=now):
            token.gen_timestamp()
        assert token.expires_on == now + timedelta(seconds=60)


class TestMsalTokenAccessors:
    """Tests for mutators and helpers."""

    def test_with_mutators(self) -> None:
        token = (
            MsalToken()
            .with_token_type("Bearer")
            .with_access_token("access")
            .with_refresh_token("refresh")
            .with_scope(["User.Read"])
            .with_user_id("user-1")
            .with_state("s-1")
        )
        assert token.bearer_token() == "access"
        assert token.refresh_token == "refresh"
        assert token.scope == ["User.Read"]
        assert token.user_id == "user-1"
        assert token.state == "s-1"

    def test_with_id_token_object(self) -> None:
        token = MsalToken().with_id_token(IdToken(id_token="jwt"))
        assert token.id_token == "jwt"

    def test_parse_id_token(self) -> None:
        token = MsalToken().with_id_token("id_token=jwt&state=s-1")
        parsed = token.parse_id_token()
        assert parsed.id_token == "jwt"
        assert parsed.state == "s-1"

    def test_parse_id_token_bare_jwt(self) -> None:
        token = MsalToken.new("Bearer", 3600, "access").with_id_token("header.payload.signature")
        assert token.parse_id_token().id_token == "header.payload.signature"

    def test_parse_id_token_absent(self) -> None:
        assert MsalToken().parse_id_token() is None


class TestMsalTokenRedaction:
    """Tests for secret redaction in repr output."""

    def test_repr_redacts_tokens(self, sample_token: MsalToken) -> None:
        text = repr(sample_token)
        assert "test_access_token_12345" not in text
        assert "test_refresh_token_67890" not in text
        assert "[REDACTED]" in text

    def test_repr_with_pii_logging(self, sample_token: MsalToken) -> None:
        sample_token.enable_pii_logging(True)
        assert "test_access_token_12345" in repr(sample_token)
