"""structlog setup for the relay.

Events are rendered as JSON lines (or coloured console output in
development). Shared secrets travel through this service constantly, in
bearer headers, session cookies and signed receive paths, so a redaction
processor runs before rendering unless disabled.
"""

import logging
import re
import sys
from typing import Any, cast

import structlog
from structlog.types import EventDict, WrappedLogger

REDACTED = "[REDACTED]"

# Event keys whose values are never logged, matched case-insensitively
SENSITIVE_KEYS: frozenset[str] = frozenset({
    "access_token",
    "api_key",
    "api_token",
    "apikey",
    "auth",
    "authorization",
    "bearer",
    "channel_access_token",
    "cookie",
    "credential",
    "credentials",
    "email",
    "passwd",
    "password",
    "phone",
    "secret",
    "token",
})

# (pattern, replacement) applied to every string value, in order
_VALUE_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}"), "[EMAIL]"),
    (re.compile(r"(?i)bearer\s+[^\s,;]+"), f"Bearer {REDACTED}"),
    # /w/{endpoint}/{token}: keep the endpoint, mask the token
    (re.compile(r"(/w/[^/\s]+/)[A-Za-z0-9_-]{20,}"), r"\1[TOKEN]"),
)


def _scrub(value: Any) -> Any:
    if isinstance(value, str):
        for pattern, replacement in _VALUE_RULES:
            value = pattern.sub(replacement, value)
        return value
    if isinstance(value, dict):
        return {
            key: REDACTED if str(key).lower() in SENSITIVE_KEYS else _scrub(item)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [_scrub(item) for item in value]
    return value


class PIIRedactor:
    """structlog processor masking secrets, emails and webhook tokens.

    Values under a sensitive key are replaced wholesale; other strings are
    rewritten pattern by pattern. Nested dicts and lists are walked.
    """

    def __call__(
        self,
        _logger: WrappedLogger,
        _method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        return cast(EventDict, _scrub(dict(event_dict)))


def setup_logging(
    level: str = "INFO",
    format: str = "json",
    redact_pii: bool = True,
) -> None:
    """Configure structlog for the process.

    Args:
        level: Minimum level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format: "json" for log shipping, "console" for a terminal
        redact_pii: Mask secrets and PII before rendering
    """
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.format_exc_info,
    ]
    if redact_pii:
        processors.append(PIIRedactor())
    if format == "console":
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    else:
        processors.append(structlog.processors.JSONRenderer())

    min_level = logging.getLevelNamesMapping().get(level.upper(), logging.INFO)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(min_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Module logger; call with ``__name__``."""
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))
