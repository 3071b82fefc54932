"""Utility functions and classes."""

from .errors import (
    BrowserLaunchError,
    ConfigurationError,
    DeserializationError,
    GrantNotSupportedError,
    InvalidUrlError,
    MutuallyExclusiveParametersError,
    OAuthError,
    RequiredParameterMissingError,
    TransportError,
)
from .logging_config import setup_logging

__all__ = [
    "OAuthError",
    "ConfigurationError",
    "InvalidUrlError",
    "RequiredParameterMissingError",
    "MutuallyExclusiveParametersError",
    "GrantNotSupportedError",
    "TransportError",
    "DeserializationError",
    "BrowserLaunchError",
    "setup_logging",
]
