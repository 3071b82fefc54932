"""Token endpoint responses.

``MsalToken`` is the deserialized response of a token request. The issue
time is taken from the local clock when the token is built, never from the
wire, and the expiry is derived from it.
"""

import json
import logging
from datetime import datetime, timedelta, timezone
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError, field_validator

from ..utils.errors import DeserializationError, TransportError
from .id_token import IdToken
from .parameters import REDACTED_PLACEHOLDER

logger = logging.getLogger(__name__)

PII_HINT = f"{REDACTED_PLACEHOLDER} - call enable_pii_logging(True) to log value"

# Fields every token endpoint response carries
REQUIRED_TOKEN_FIELDS = ("access_token", "token_type", "expires_in")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _coerce_lifetime(value: Any) -> Any:
    # Some endpoints send the lifetime as a string
    if isinstance(value, str):
        return int(value.strip())
    return value


def parse_oauth_error(response: httpx.Response) -> tuple[str | None, str | None]:
    """Parse OAuth error response (RFC 6749 Section 5.2).

    Args:
        response: HTTP response from token endpoint

    Returns:
        Tuple of (error, error_description); both None if the body is not an
        OAuth error payload
    """
    try:
        error_data = response.json()
    except ValueError:
        return None, None

    if not isinstance(error_data, dict):
        return None, None
    return error_data.get("error"), error_data.get("error_description")


class MsalToken(BaseModel):
    """Access token response with issue and expiry timestamps.

    Direct construction fills in empty defaults for use with the ``with_*``
    mutators; responses read with ``from_dict``/``from_json`` must carry
    ``access_token``, ``token_type`` and ``expires_in``.
    """

    model_config = ConfigDict(extra="allow")

    access_token: str = Field(default="", description="Bearer token")
    token_type: str = Field(default="", description="Token type, usually Bearer")
    expires_in: int = Field(default=0, description="Lifetime in seconds")
    ext_expires_in: int | None = Field(default=None, description="Extended lifetime")
    scope: list[str] = Field(default_factory=list, description="Granted scopes")
    refresh_token: str | None = None
    user_id: str | None = None
    id_token: str | None = None
    state: str | None = None
    correlation_id: str | None = None
    client_info: str | None = None
    timestamp: datetime | None = Field(default=None, description="Local issue time")
    expires_on: datetime | None = Field(default=None, description="Local expiry time")

    _log_pii: bool = PrivateAttr(default=False)

    @field_validator("scope", mode="before")
    @classmethod
    def split_scope(cls, v: Any) -> list[str]:
        """Accept the space-delimited wire form of the scope."""
        if v is None:
            return []
        if isinstance(v, str):
            return [s for s in v.split(" ") if s]
        return v

    @field_validator("expires_in", mode="before")
    @classmethod
    def coerce_expires_in(cls, v: Any) -> Any:
        return _coerce_lifetime(v)

    def model_post_init(self, context: Any) -> None:
        self.gen_timestamp()

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "expires_in":
            value = _coerce_lifetime(value)
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"expires_in must be an integer, got {type(value).__name__}")
        super().__setattr__(name, value)
        if name == "expires_in":
            self.gen_timestamp()

    @classmethod
    def new(
        cls,
        token_type: str,
        expires_in: int,
        access_token: str,
        scope: list[str] | None = None,
    ) -> "MsalToken":
        """Create a token with timestamps set from the current time."""
        return cls(
            token_type=token_type,
            expires_in=expires_in,
            access_token=access_token,
            scope=list(scope or []),
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MsalToken":
        """Create from a decoded token endpoint response.

        Raises:
            DeserializationError: If a required field is missing or the
                payload has the wrong shape
        """
        missing = [name for name in REQUIRED_TOKEN_FIELDS if data.get(name) is None]
        if missing:
            raise DeserializationError(
                f"Invalid token response: missing {', '.join(missing)}"
            )
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise DeserializationError(f"Invalid token response: {e}") from e

    @classmethod
    def from_json(cls, text: str | bytes) -> "MsalToken":
        """Create from a JSON token endpoint response body."""
        try:
            data = json.loads(text)
        except ValueError as e:
            raise DeserializationError(f"Token response is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise DeserializationError("Token response must be a JSON object")
        return cls.from_dict(data)

    @classmethod
    def from_response(cls, response: httpx.Response) -> "MsalToken":
        """Create from the HTTP response of a token request.

        Raises:
            TransportError: If the provider returned a non-2xx status
            DeserializationError: If the body is not a token response
        """
        if not response.is_success:
            error, error_description = parse_oauth_error(response)
            if error:
                detail = f"{error}: {error_description}" if error_description else error
            else:
                detail = f"HTTP {response.status_code}"
            logger.error(f"Token request failed ({response.status_code}): {detail}")
            raise TransportError(
                f"Token request failed: {detail}",
                status_code=response.status_code,
                error=error,
                error_description=error_description,
            )
        return cls.from_json(response.content)

    @property
    def additional_fields(self) -> dict[str, Any]:
        """Wire fields without a dedicated attribute."""
        return dict(self.model_extra or {})

    def with_token_type(self, token_type: str) -> "MsalToken":
        self.token_type = token_type
        return self

    def with_expires_in(self, expires_in: int) -> "MsalToken":
        """Set the lifetime and restart the clock from now."""
        self.expires_in = expires_in
        return self

    def with_scope(self, scope: list[str]) -> "MsalToken":
        self.scope = list(scope)
        return self

    def with_access_token(self, access_token: str) -> "MsalToken":
        self.access_token = access_token
        return self

    def with_refresh_token(self, refresh_token: str) -> "MsalToken":
        self.refresh_token = refresh_token
        return self

    def with_user_id(self, user_id: str) -> "MsalToken":
        self.user_id = user_id
        return self

    def with_id_token(self, id_token: "IdToken | str") -> "MsalToken":
        if isinstance(id_token, IdToken):
            id_token = id_token.id_token
        self.id_token = id_token
        return self

    def with_state(self, state: str) -> "MsalToken":
        self.state = state
        return self

    def enable_pii_logging(self, log_pii: bool) -> None:
        """Show secret values in repr output."""
        self._log_pii = log_pii

    def gen_timestamp(self) -> None:
        """Set the issue time to now and recompute the expiry."""
        self.timestamp = _utcnow()
        self.expires_on = self.timestamp + timedelta(seconds=self.expires_in)

    def bearer_token(self) -> str:
        return self.access_token

    def parse_id_token(self) -> IdToken | None:
        """Parse the id_token field, if present."""
        if self.id_token is None:
            return None
        return IdToken.from_str(self.id_token)

    def is_expired(self) -> bool:
        """Check if the token has expired.

        Returns:
            True if the expiry time is in the past. A token without an expiry
            time is never considered expired.
        """
        if self.expires_on is None:
            return False
        return self.expires_on < _utcnow()

    def elapsed(self) -> timedelta | None:
        """Get the full lifetime of the token (expiry minus issue time)."""
        if self.expires_on is None or self.timestamp is None:
            return None
        return self.expires_on - self.timestamp

    def time_until_expiry(self) -> timedelta | None:
        """Get time until token expires."""
        if self.expires_on is None:
            return None
        return self.expires_on - _utcnow()

    def __repr_args__(self):
        for name, value in super().__repr_args__():
            if not self._log_pii and name in ("access_token", "refresh_token", "id_token"):
                yield name, PII_HINT
            else:
                yield name, value
