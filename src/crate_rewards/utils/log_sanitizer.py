"""Keep identity secrets out of the reward logs.

Service logs name users by their opaque id. The identity provider also
hands around emails and sign-in tokens, and those must never reach a log
line even when an exception message carries them along.

Usage:
    from crate_rewards.utils import configure_logging

    configure_logging(get_settings())
"""

import logging
import re
from typing import Any, Optional

from ..config import Settings


# (name, pattern, replacement); JWTs must be matched before bearer tokens
REDACTIONS: list[tuple[str, re.Pattern, str]] = [
    (
        "jwt",
        re.compile(r"\beyJ[\w-]+\.eyJ[\w-]+\.[\w-]+"),
        "[REDACTED_JWT]",
    ),
    (
        "bearer",
        re.compile(r"Bearer\s+[\w.-]+", re.IGNORECASE),
        "Bearer [REDACTED_TOKEN]",
    ),
    (
        "web_api_key",
        re.compile(r"\bAIza[\w-]{35}\b"),
        "[REDACTED_API_KEY]",
    ),
    (
        "credential_field",
        re.compile(
            r"((?:password|secret|api_key|id_token|refresh_token|token)[\"']?\s*[:=]\s*[\"']?)[^\"'&\s,]+",
            re.IGNORECASE,
        ),
        r"\1[REDACTED]",
    ),
    (
        "email",
        re.compile(r"\b[\w.%+-]+@[\w-]+(?:\.[\w-]+)*\.[a-zA-Z]{2,}\b"),
        "[REDACTED_EMAIL]",
    ),
]


def sanitize_string(text: str) -> str:
    """Apply every redaction to a piece of text."""
    for _, pattern, replacement in REDACTIONS:
        text = pattern.sub(replacement, text)
    return text


class LogSanitizationFilter(logging.Filter):
    """
    Redacts the rendered message of every record it sees.

    The message is rendered with its arguments first, so a secret passed as
    an argument is caught as well as one baked into an f-string. The record
    leaves the filter with no arguments.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            rendered = record.getMessage()
        except (TypeError, ValueError):
            # Let the handler report the broken format call itself
            return True
        record.msg = sanitize_string(rendered)
        record.args = None
        return True


def install_log_sanitizer(logger_name: Optional[str] = None) -> LogSanitizationFilter:
    """
    Attach a sanitization filter.

    Args:
        logger_name: Logger to filter. With None the root logger and each of
            its current handlers get the filter, which also covers records
            propagated up from child loggers.

    Returns:
        The filter, so it can be removed again
    """
    sanitizer = LogSanitizationFilter()
    if logger_name:
        logging.getLogger(logger_name).addFilter(sanitizer)
        return sanitizer

    root = logging.getLogger()
    root.addFilter(sanitizer)
    for handler in root.handlers:
        handler.addFilter(sanitizer)
    return sanitizer


def configure_logging(settings: Settings, **basic_config: Any) -> LogSanitizationFilter:
    """
    Set up application logging once at startup.

    Configures the root logger at ``settings.log_level`` and installs the
    sanitizer on it.
    """
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        **basic_config,
    )
    return install_log_sanitizer()
