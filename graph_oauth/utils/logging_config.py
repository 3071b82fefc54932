"""Centralized logging configuration.

Library modules only create loggers; applications call ``setup_logging``
once to attach handlers to the package logger. Every handler carries a
filter that masks the values of secret OAuth parameters (``client_secret=...``,
``refresh_token=...``) in case they end up in a formatted message.
"""

import logging
import re
from pathlib import Path

from ..oauth.parameters import REDACTED_PLACEHOLDER, OAuthParameter

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_SECRET_ALIASES = sorted(p.alias for p in OAuthParameter if p.is_redacted)

# Handlers installed by setup_logging, per logger name
_installed: dict[str, list[logging.Handler]] = {}


class RedactingFilter(logging.Filter):
    """Mask ``alias=value`` pairs of secret parameters in log messages."""

    pattern = re.compile(r"\b(" + "|".join(_SECRET_ALIASES) + r")=([^&\s,;]+)")

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = self.pattern.sub(rf"\1={REDACTED_PLACEHOLDER}", message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def setup_logging(
    name: str = "graph_oauth",
    level: str | None = None,
    log_file: Path | None = None,
) -> logging.Logger:
    """Configure a logger with consistent format and secret redaction.

    Calling this again for the same logger replaces the handlers it installed
    before.

    Args:
        name: Logger name (defaults to the package logger)
        level: Log level (defaults to settings.log_level)
        log_file: Optional file path for logging output

    Returns:
        Configured logger instance
    """
    if level is None:
        from ..core.config import settings

        level = settings.log_level

    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))

    for handler in _installed.pop(name, []):
        logger.removeHandler(handler)
        handler.close()

    handlers: list[logging.Handler] = [logging.StreamHandler()]

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    formatter = logging.Formatter(LOG_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(RedactingFilter())
        logger.addHandler(handler)

    _installed[name] = handlers
    return logger
