"""OpenID Connect id token responses.

The redirect after an OpenID Connect authorization carries ``code``,
``id_token``, ``state`` and ``session_state`` either as a JSON body or as a
form-urlencoded query string or fragment. The id token itself is kept as an
opaque string; verifying the JWT is left to the caller.
"""

import json
from typing import Any
from urllib.parse import parse_qsl

from pydantic import BaseModel, ConfigDict, PrivateAttr, ValidationError

from ..utils.errors import DeserializationError
from .parameters import REDACTED_PLACEHOLDER

_KNOWN_FIELDS = ("code", "id_token", "state", "session_state")


class IdToken(BaseModel):
    """Id token and the values returned alongside it."""

    model_config = ConfigDict(extra="allow")

    code: str | None = None
    id_token: str = ""
    state: str | None = None
    session_state: str | None = None

    _log_pii: bool = PrivateAttr(default=False)

    @classmethod
    def new(cls, id_token: str, code: str, state: str, session_state: str) -> "IdToken":
        return cls(id_token=id_token, code=code, state=state, session_state=session_state)

    @classmethod
    def from_str(cls, value: str | bytes) -> "IdToken":
        """Parse a JSON object or a form-urlencoded string.

        A leading ``#`` or ``?`` (as copied from a redirect URL) is ignored.
        A value with no key/value pairs is taken as the id token itself.

        Raises:
            DeserializationError: If the value is neither form nor JSON
        """
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        text = value.strip().lstrip("#?")

        if text.startswith("{"):
            try:
                data = json.loads(text)
            except ValueError as e:
                raise DeserializationError(f"Invalid id token JSON: {e}") from e
            try:
                return cls.model_validate(data)
            except ValidationError as e:
                raise DeserializationError(f"Invalid id token: {e}") from e

        # A bare JWT, as found in the id_token field of a token response
        if text and "=" not in text and "&" not in text:
            return cls(id_token=text)

        try:
            pairs = parse_qsl(text, keep_blank_values=True, strict_parsing=True)
        except ValueError as e:
            raise DeserializationError(f"Invalid id token form data: {e}") from e
        return cls.from_pairs(pairs)

    @classmethod
    def from_pairs(cls, pairs: list[tuple[str, str]]) -> "IdToken":
        """Build from decoded form key/value pairs; unknown keys are kept."""
        known: dict[str, str] = {}
        extra: dict[str, Any] = {}
        for key, value in pairs:
            if key in _KNOWN_FIELDS:
                known[key] = value
            else:
                extra[key] = value
        return cls(**known, **extra)

    @property
    def additional_fields(self) -> dict[str, Any]:
        return dict(self.model_extra or {})

    def enable_pii_logging(self, log_pii: bool) -> None:
        self._log_pii = log_pii

    def __repr_args__(self):
        for name, value in super().__repr_args__():
            if name == "id_token" and not self._log_pii:
                yield name, REDACTED_PLACEHOLDER
            else:
                yield name, value
