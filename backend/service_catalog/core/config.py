"""
Centralized configuration module for application-wide settings.

Every setting is read from the environment so tests and deployments can
override it without code changes. When DATABASE_URL is not already defined
the values are loaded from a local .env file first.
"""

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

if not os.getenv("DATABASE_URL"):
    load_dotenv()

TRUTHY_VALUES = ("true", "1", "yes")

DEFAULT_DATABASE_URL = "sqlite:///./service_catalog.db"
DEFAULT_EVENT_MAX_ATTEMPTS = 3


def _get_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in TRUTHY_VALUES


def _get_int(name: str, default: int, minimum: int = 0) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(
            f"Invalid integer '{raw}' for {name}, falling back to {default}",
            extra={"context": {"setting": name, "value": raw}},
        )
        return default
    if value < minimum:
        logger.warning(
            f"{name}={value} is below the minimum of {minimum}, using {minimum}",
            extra={"context": {"setting": name, "value": value}},
        )
        return minimum
    return value


# ===========================
# Database Configuration
# ===========================


def get_database_url() -> str:
    """
    Get the SQLAlchemy database URL.

    Environment Variables:
        DATABASE_URL: SQLAlchemy URL
            Default: 'sqlite:///./service_catalog.db'
            Production: postgresql+psycopg2://...
            Tests: 'sqlite:///:memory:'
    """
    return os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)


def get_sql_echo() -> bool:
    """Whether SQL statements and their timing are logged (SQL_ECHO)."""
    return _get_bool("SQL_ECHO", "false")


# ===========================
# Messaging Configuration
# ===========================


def get_event_max_attempts() -> int:
    """
    Get how many times one inbound event's unit of work is attempted.

    A second attempt only happens when the first one collided with a
    concurrent write on the same service (optimistic version check or a
    duplicate relation row). Any other failure is never retried here.

    Environment Variables:
        EVENT_MAX_ATTEMPTS: positive integer
            Default: 3
    """
    return _get_int("EVENT_MAX_ATTEMPTS", DEFAULT_EVENT_MAX_ATTEMPTS, minimum=1)


@dataclass(frozen=True)
class MessagingSettings:
    """Exchange, queue and binding names used by the event subsystem."""

    service_exchange: str = "service.exchange"
    barber_exchange: str = "barber.exchange"
    reservation_exchange: str = "reservation.exchange"
    barber_listener_queue: str = "service.barber.listener.queue"
    reservation_listener_queue: str = "service.reservation.listener.queue"
    barber_binding_key: str = "barber.#"
    reservation_binding_key: str = "reservation.#"
    event_max_attempts: int = DEFAULT_EVENT_MAX_ATTEMPTS


def get_messaging_settings() -> MessagingSettings:
    """
    Build the messaging settings from the environment.

    Environment Variables:
        SERVICE_EXCHANGE, BARBER_EXCHANGE, RESERVATION_EXCHANGE,
        BARBER_LISTENER_QUEUE, RESERVATION_LISTENER_QUEUE,
        BARBER_BINDING_KEY, RESERVATION_BINDING_KEY, EVENT_MAX_ATTEMPTS
    """
    defaults = MessagingSettings()
    return MessagingSettings(
        service_exchange=os.getenv("SERVICE_EXCHANGE", defaults.service_exchange),
        barber_exchange=os.getenv("BARBER_EXCHANGE", defaults.barber_exchange),
        reservation_exchange=os.getenv(
            "RESERVATION_EXCHANGE", defaults.reservation_exchange
        ),
        barber_listener_queue=os.getenv(
            "BARBER_LISTENER_QUEUE", defaults.barber_listener_queue
        ),
        reservation_listener_queue=os.getenv(
            "RESERVATION_LISTENER_QUEUE", defaults.reservation_listener_queue
        ),
        barber_binding_key=os.getenv(
            "BARBER_BINDING_KEY", defaults.barber_binding_key
        ),
        reservation_binding_key=os.getenv(
            "RESERVATION_BINDING_KEY", defaults.reservation_binding_key
        ),
        event_max_attempts=get_event_max_attempts(),
    )


# ===========================
# Logging Configuration
# ===========================


def get_log_level() -> str:
    """LOG_LEVEL, defaults to DEBUG outside production and INFO in production."""
    default = "INFO" if is_production() else "DEBUG"
    return os.getenv("LOG_LEVEL", default).upper()


def get_log_json() -> bool:
    """LOG_JSON: JSON console output. Defaults to on in production."""
    return _get_bool("LOG_JSON", "true" if is_production() else "false")


def get_log_to_file() -> bool:
    """LOG_TO_FILE: write rotating log files next to the package (default on)."""
    return _get_bool("LOG_TO_FILE", "true")


# ===========================
# Runtime Environment
# ===========================


def get_environment() -> str:
    return os.getenv("FLASK_ENV", "development")


def is_production() -> bool:
    return get_environment() == "production"


def is_testing() -> bool:
    return _get_bool("TESTING", "false")


def get_rate_limit_enabled() -> bool:
    """RATE_LIMIT_ENABLED: set to 0 to disable admin API rate limiting."""
    return _get_bool("RATE_LIMIT_ENABLED", "1")


def get_sentry_dsn() -> str | None:
    """SENTRY_DSN: error tracking is only initialised when this is set."""
    return os.getenv("SENTRY_DSN") or None


def log_messaging_config(settings: MessagingSettings) -> None:
    """
    Log the active messaging configuration.

    Should be called during startup to make exchange and queue names
    visible in the logs.
    """
    logger.info(
        "Messaging configuration initialized",
        extra={
            "context": {
                "service_exchange": settings.service_exchange,
                "barber_binding": f"{settings.barber_exchange}/{settings.barber_binding_key}",
                "reservation_binding": f"{settings.reservation_exchange}/{settings.reservation_binding_key}",
                "event_max_attempts": settings.event_max_attempts,
            }
        },
    )
