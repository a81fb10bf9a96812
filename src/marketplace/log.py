"""structlog configuration.

Learn: Every module does `logger = structlog.get_logger()` and logs
event names with keyword context (`logger.info("items.created", item_id=7)`).
Request-scoped values (request_id, user_id) are bound through
structlog.contextvars by the middleware and the auth guard, and merged
into each entry here.
"""

import logging

import structlog

# Keys whose values never reach the log output.
SENSITIVE_KEYS = frozenset(
    {"password", "password_hash", "token", "authorization", "jwt_secret"}
)

REDACTED = "***"


def redact_sensitive(logger, method_name, event_dict):
    """structlog processor: mask credentials passed as log context."""
    for key in event_dict.keys() & SENSITIVE_KEYS:
        event_dict[key] = REDACTED
    return event_dict


def configure_logging(level: str = "INFO", json: bool = False) -> None:
    """Install the structlog processor chain for the process."""
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        redact_sensitive,
        structlog.processors.StackInfoRenderer(),
    ]
    if json:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        # ConsoleRenderer prints tracebacks itself
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
        cache_logger_on_first_use=False,
    )
