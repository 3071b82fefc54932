"""Identity platform hosts, authorities and request option enums."""

from enum import Enum

LEGACY_AUTHORIZATION_URL = "https://login.live.com/oauth20_authorize.srf"
LEGACY_TOKEN_URL = "https://login.live.com/oauth20_token.srf"


class AzureCloudInstance(str, Enum):
    """Login hosts for the national and public clouds."""

    AZURE_PUBLIC = "https://login.microsoftonline.com"
    AZURE_CHINA = "https://login.chinacloudapi.cn"
    AZURE_GERMANY = "https://login.microsoftonline.de"
    AZURE_US_GOVERNMENT = "https://login.microsoftonline.us"
    # Personal accounts on the legacy live.com endpoints
    ONE_DRIVE_AND_SHAREPOINT = "https://login.live.com"


class Authority(str, Enum):
    """Well-known authorities. Any tenant id string is also accepted."""

    COMMON = "common"
    ORGANIZATIONS = "organizations"
    CONSUMERS = "consumers"
    AZURE_DIRECTORY_FEDERATED_SERVICES = "adfs"


class Prompt(str, Enum):
    """Type of user interaction required at the authorization endpoint."""

    NONE = "none"
    LOGIN = "login"
    CONSENT = "consent"
    SELECT_ACCOUNT = "select_account"
    CREATE = "create"


class ResponseMode(str, Enum):
    """How the authorization server returns the result."""

    QUERY = "query"
    FRAGMENT = "fragment"
    FORM_POST = "form_post"


class ResponseType(str, Enum):
    CODE = "code"
    ID_TOKEN = "id_token"
    TOKEN = "token"


def authority_value(authority: "Authority | str") -> str:
    """Get the path segment for an authority or tenant id."""
    if isinstance(authority, Authority):
        return authority.value
    return str(authority)


def endpoint_urls(
    host: AzureCloudInstance | str,
    authority: "Authority | str" = Authority.COMMON,
) -> tuple[str, str]:
    """Build the v2.0 authorize and token endpoint URLs.

    Args:
        host: Cloud instance login host
        authority: Well-known authority or tenant id

    Returns:
        Tuple of (authorization_url, token_url)
    """
    base = f"{AzureCloudInstance(host).value}/{authority_value(authority)}/oauth2/v2.0"
    return f"{base}/authorize", f"{base}/token"


def join_values(values) -> str:
    """Join enum members or strings with a single space."""
    return " ".join(v.value if isinstance(v, Enum) else str(v) for v in values)
