"""Error types for the OAuth client library."""


class OAuthError(Exception):
    """Base exception for OAuth client errors."""

    pass


# Configuration errors
class ConfigurationError(OAuthError):
    """Raised when configuration is missing or invalid."""

    pass


class InvalidUrlError(ConfigurationError):
    """Raised when a URL-typed parameter is not a valid absolute URL."""

    def __init__(self, parameter: str, value: str):
        super().__init__(f"Invalid URL for '{parameter}': {value!r}")
        self.parameter = parameter
        self.value = value


# Request validation errors
class RequiredParameterMissingError(OAuthError):
    """Raised when a required field for a grant request is absent."""

    def __init__(self, alias: str, message: str | None = None):
        detail = f"missing required field `{alias}`"
        super().__init__(f"{detail}: {message}" if message else detail)
        self.alias = alias
        self.message = message


class MutuallyExclusiveParametersError(RequiredParameterMissingError):
    """Raised when two parameters that cannot be combined are both set."""

    def __init__(self, first: str, second: str):
        super().__init__(
            f"{first} or {second}",
            f"{first} and {second} are mutually exclusive - choose one or the other",
        )
        self.first = first
        self.second = second


class GrantNotSupportedError(OAuthError):
    """Raised when a grant type has no such request phase."""

    def __init__(self, grant: str, request: str, message: str):
        super().__init__(f"{grant} does not support {request} requests: {message}")
        self.grant = grant
        self.request = request


# Runtime errors
class TransportError(OAuthError):
    """Raised when the HTTP request fails or the provider returns an error."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        error: str | None = None,
        error_description: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.error = error
        self.error_description = error_description


class DeserializationError(OAuthError):
    """Raised when a token or id token payload cannot be parsed."""

    pass


class BrowserLaunchError(OAuthError):
    """Raised when the system browser could not be opened."""

    def __init__(self, uri: str):
        super().__init__("Unable to open a browser for the authorization request")
        self.uri = uri
