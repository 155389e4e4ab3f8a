"""
Central pytest configuration for the service catalog tests.

Unit tests run against mock repositories and mock units of work.
Integration tests run against a fresh in-memory SQLite schema per test,
through the real repositories, unit of work, consumer and Flask app.
"""

import os

# Test environment (set early so import-time configuration uses it)
TEST_DATABASE_URL = "sqlite:///:memory:"
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["TESTING"] = "true"
os.environ["RATE_LIMIT_ENABLED"] = "0"  # Disable rate limiting in tests
os.environ["LOG_TO_FILE"] = "0"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ.pop("SENTRY_DSN", None)

import pytest

from service_catalog.container import build_container
from service_catalog.db.session import create_tables, dispose_engine, drop_tables
from service_catalog.messaging.transport import InMemoryTransport
from tests.config.markers import pytest_collection_modifyitems, pytest_configure  # noqa: F401


# =====================================================
# DATABASE FIXTURES
# =====================================================


@pytest.fixture
def db_tables():
    """Create the schema on the shared in-memory database, drop it afterwards."""
    create_tables()
    yield
    drop_tables()


@pytest.fixture(scope="session", autouse=True)
def _dispose_engine_at_end():
    yield
    dispose_engine()


# =====================================================
# WIRING FIXTURES
# =====================================================


@pytest.fixture
def transport() -> InMemoryTransport:
    return InMemoryTransport()


@pytest.fixture
def container(db_tables, transport):
    """Fully wired object graph on the in-memory transport and database."""
    container = build_container(transport=transport)
    container.consumer.start()
    return container


# =====================================================
# FLASK APPLICATION FIXTURES
# =====================================================


@pytest.fixture
def app(container):
    """Create a Flask application sharing the test container."""
    from service_catalog.main import create_app

    # The container fixture already subscribed the consumer
    return create_app(container=container, start_consumer=False)


@pytest.fixture
def client(app):
    """Create a test client for the Flask application."""
    return app.test_client()
