"""
Service Controller - HTTP route handlers for the administrative service API.

Controllers only translate HTTP to DTOs and back; rules live in
ServiceCatalogService and errors are rendered by the app error handlers.
"""

import logging

from flask import Blueprint, current_app, request

from service_catalog.core.api_utils import api_response, json_body
from service_catalog.core.limiter_config import ADMIN_WRITE_LIMIT, limiter
from service_catalog.schemas.dtos import (
    AssignBarbersRequest,
    ServiceCreateRequest,
    ServiceResponse,
    ServiceUpdateRequest,
)
from service_catalog.services.catalog_service import ServiceCatalogService

logger = logging.getLogger(__name__)

service_bp = Blueprint("services", __name__, url_prefix="/api/services")

TRUTHY_VALUES = ("true", "1", "yes")


def _get_catalog_service() -> ServiceCatalogService:
    """Resolve the application service from the app container."""
    return current_app.extensions["service_catalog"].catalog_service


@service_bp.route("", methods=["POST"])
@limiter.limit(ADMIN_WRITE_LIMIT)
def create_service():
    """Create a new service.

    Expected JSON payload:
    {
        "name": "Corte Clasico",
        "description": "Corte tradicional con tijera",
        "price": 15000,
        "duration": 30,
        "categoryId": 1
    }
    """
    dto = ServiceCreateRequest.from_dict(json_body())
    service = _get_catalog_service().create_service(dto)
    return api_response(
        True, "Service created", ServiceResponse.from_domain(service).to_dict(), 201
    )


@service_bp.route("", methods=["GET"])
def list_services():
    """List active services; ?includeInactive=true lists every service."""
    include_inactive = (
        request.args.get("includeInactive", "").strip().lower() in TRUTHY_VALUES
    )
    services = _get_catalog_service().list_services(include_inactive=include_inactive)
    return api_response(
        True,
        f"{len(services)} service(s) found",
        [ServiceResponse.from_domain(s).to_dict() for s in services],
    )


@service_bp.route("/<int:service_id>", methods=["GET"])
def get_service(service_id: int):
    service = _get_catalog_service().get_service(service_id)
    return api_response(True, "Service found", ServiceResponse.from_domain(service).to_dict())


@service_bp.route("/<int:service_id>", methods=["PUT"])
@limiter.limit(ADMIN_WRITE_LIMIT)
def update_service(service_id: int):
    """Update a service. The payload also carries "availabilityStatus"."""
    dto = ServiceUpdateRequest.from_dict(json_body())
    service = _get_catalog_service().update_service(service_id, dto)
    return api_response(True, "Service updated", ServiceResponse.from_domain(service).to_dict())


@service_bp.route("/<int:service_id>", methods=["DELETE"])
@limiter.limit(ADMIN_WRITE_LIMIT)
def inactivate_service(service_id: int):
    """Soft delete: the service becomes Inactive and Unavailable."""
    service = _get_catalog_service().inactivate_service(service_id)
    return api_response(
        True, "Service inactivated", ServiceResponse.from_domain(service).to_dict()
    )


@service_bp.route("/<int:service_id>/barbers", methods=["GET"])
def get_service_barbers(service_id: int):
    barber_ids = _get_catalog_service().get_barber_ids(service_id)
    return api_response(
        True,
        "Barbers found",
        {"serviceId": service_id, "barberIds": sorted(barber_ids)},
    )


@service_bp.route("/<int:service_id>/barbers", methods=["PUT"])
@limiter.limit(ADMIN_WRITE_LIMIT)
def assign_barbers(service_id: int):
    """Replace the barber set. {"barberIds": []} unassigns every barber."""
    dto = AssignBarbersRequest.from_dict(json_body())
    service = _get_catalog_service().assign_barbers(service_id, dto)
    return api_response(
        True, "Barbers assigned", ServiceResponse.from_domain(service).to_dict()
    )
