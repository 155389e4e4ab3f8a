"""
Response envelopes and error handlers for the administrative API.

Catalog errors map to their GC-000x code and HTTP status. Anything else is
sent to Sentry and answered with GC-0001.
"""

import logging
from typing import Any, Optional

import sentry_sdk
from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from service_catalog.core.exceptions import ErrorCode, ServiceCatalogError

logger = logging.getLogger(__name__)


def api_response(
    success: bool, message: str, data: Optional[Any] = None, status_code: int = 200
) -> tuple:
    """Success envelope: ``{"success", "message"[, "data"]}``."""
    response = {"success": success, "message": message}
    if data is not None:
        response["data"] = data
    return jsonify(response), status_code


def error_response(code: str, message: str, status_code: int) -> tuple:
    """Structured error body shared by every error handler."""
    return (
        jsonify(
            {
                "success": False,
                "code": code,
                "message": message,
                "path": request.path,
                "method": request.method,
            }
        ),
        status_code,
    )


def json_body() -> dict:
    """Return the JSON object body of the current request, or {}."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ServiceCatalogError)
    def handle_catalog_error(error: ServiceCatalogError):
        log = logger.error if error.http_status >= 500 else logger.warning
        log(
            f"Request rejected: {error.message}",
            extra={
                "context": {
                    "code": error.code,
                    "status": error.http_status,
                    "path": request.path,
                    "method": request.method,
                }
            },
        )
        return error_response(error.code, error.message, error.http_status)

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        return error_response(
            ErrorCode.GENERIC.code, error.description or error.name, error.code or 500
        )

    @app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):
        logger.error(
            "Unhandled error in request",
            extra={
                "context": {
                    "path": request.path,
                    "method": request.method,
                    "error": str(error),
                }
            },
            exc_info=True,
        )
        sentry_sdk.capture_exception(error)
        return error_response(
            ErrorCode.GENERIC.code, ErrorCode.GENERIC.default_message, 500
        )
