import logging
import os
from typing import Optional

from flask import Flask

from service_catalog.container import Container, build_container
from service_catalog.core.config import (
    get_environment,
    get_log_json,
    get_log_level,
    get_log_to_file,
    get_rate_limit_enabled,
    get_sentry_dsn,
    get_sql_echo,
    is_production,
    is_testing,
)

logger = logging.getLogger(__name__)

SENTRY_TRACES_SAMPLE_RATE = 0.1


def _init_sentry(env: str) -> None:
    """Error tracking for the API and for event handler failures."""
    sentry_dsn = get_sentry_dsn()
    if not sentry_dsn:
        logger.info("Sentry disabled (SENTRY_DSN not set)", extra={"context": {"environment": env}})
        return

    import sentry_sdk
    from sentry_sdk.integrations.flask import FlaskIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    sentry_sdk.init(
        dsn=sentry_dsn,
        environment=env,
        release=os.getenv("GIT_SHA", "unknown"),
        integrations=[FlaskIntegration(), SqlalchemyIntegration()],
        traces_sample_rate=SENTRY_TRACES_SAMPLE_RATE,
        send_default_pii=False,
    )
    sentry_sdk.set_tag("bounded_context", "services")
    logger.info("Sentry initialized", extra={"context": {"environment": env}})


def _init_metrics(app: Flask, env: str) -> None:
    """Expose /metrics; the event counters in core.metrics share the default registry."""
    from prometheus_client import CollectorRegistry
    from prometheus_flask_exporter import PrometheusMetrics

    # Tests build many apps in one process; each gets its own HTTP metrics registry
    registry = CollectorRegistry(auto_describe=True) if app.config["TESTING"] else None
    metrics = PrometheusMetrics(app, registry=registry)
    try:
        metrics.info(
            "service_catalog_app_info",
            "Service catalog build information",
            version=os.getenv("GIT_SHA", "unknown"),
            environment=env,
        )
    except ValueError as e:
        logger.debug("app_info metric already registered", extra={"context": {"error": str(e)}})


def _init_rate_limiting(app: Flask):
    from service_catalog.core.limiter_config import limiter

    default_storage = "redis://redis:6379/3" if is_production() else "memory://"
    app.config["RATELIMIT_STORAGE_URI"] = os.getenv("LIMITER_STORAGE_URI", default_storage)
    limiter.init_app(app)
    if not get_rate_limit_enabled():
        limiter.enabled = False
        logger.info("Rate limiting disabled", extra={"context": {"RATE_LIMIT_ENABLED": "0"}})
    return limiter


def create_app(container: Optional[Container] = None, start_consumer: bool = True) -> Flask:
    """
    Application factory for the administrative API.

    The same container also owns the event consumer; when
    ``start_consumer`` is set its bindings are subscribed on the transport.
    """
    app = Flask(__name__)
    env = get_environment()
    app.config["TESTING"] = is_testing()

    from service_catalog.core.logging_config import setup_logging

    setup_logging(
        app=app,
        log_level=get_log_level(),
        enable_sql_echo=get_sql_echo(),
        log_to_file=get_log_to_file(),
        use_json_format=get_log_json(),
    )

    _init_sentry(env)
    # Before the limiter so /metrics is never rate limited
    _init_metrics(app, env)
    limiter = _init_rate_limiting(app)

    container = container or build_container()
    app.extensions["service_catalog"] = container
    if start_consumer:
        container.consumer.start()

    from service_catalog.controllers import category_bp, health_bp, service_bp
    from service_catalog.core.api_utils import register_error_handlers

    register_error_handlers(app)
    for blueprint in (service_bp, category_bp, health_bp):
        app.register_blueprint(blueprint)
    limiter.exempt(health_bp)

    logger.info(
        "Application created",
        extra={
            "context": {
                "environment": env,
                "blueprints": sorted(app.blueprints),
                "consumer_started": container.consumer.started,
            }
        },
    )
    return app
