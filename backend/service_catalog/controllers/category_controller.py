"""
Category Controller - admin creation and public listing of categories.
"""

from flask import Blueprint, current_app

from service_catalog.core.api_utils import api_response, json_body
from service_catalog.core.limiter_config import ADMIN_WRITE_LIMIT, limiter
from service_catalog.schemas.dtos import CategoryCreateRequest, CategoryResponse

category_bp = Blueprint("categories", __name__)


def _get_category_service():
    return current_app.extensions["service_catalog"].category_service


@category_bp.route("/admin/categories", methods=["POST"])
@limiter.limit(ADMIN_WRITE_LIMIT)
def create_category():
    dto = CategoryCreateRequest.from_dict(json_body())
    category = _get_category_service().create_category(dto)
    return api_response(
        True, "Category created", CategoryResponse.from_domain(category).to_dict(), 201
    )


@category_bp.route("/public/categories", methods=["GET"])
def list_categories():
    categories = _get_category_service().list_categories()
    return api_response(
        True,
        f"{len(categories)} category(ies) found",
        [CategoryResponse.from_domain(c).to_dict() for c in categories],
    )
