"""
Health endpoint: database reachability and whether the event consumer is
subscribed. Exempt from rate limiting.
"""

import logging

from flask import Blueprint, current_app, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from service_catalog.db.session import SessionLocal

logger = logging.getLogger(__name__)

health_bp = Blueprint("health", __name__)


def database_reachable() -> bool:
    try:
        with SessionLocal() as session:
            session.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("Health check: database unreachable", extra={"context": {"error": str(e)}})
        return False
    return True


def consumer_status() -> dict:
    consumer = current_app.extensions["service_catalog"].consumer
    return {
        "listening": consumer.started,
        "queues": [binding.queue for binding in consumer.bindings],
    }


@health_bp.route("/health", methods=["GET"])
def health_check():
    # A stopped consumer only delays mirror updates; the database decides health
    database_ok = database_reachable()
    body = {
        "status": "healthy" if database_ok else "unhealthy",
        "database": "connected" if database_ok else "disconnected",
        "consumer": consumer_status(),
    }
    return jsonify(body), (200 if database_ok else 503)
