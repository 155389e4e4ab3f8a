"""Unit tests for the administrative API DTOs."""

from decimal import Decimal

import pytest

from service_catalog.core.exceptions import RequestValidationError
from service_catalog.domain.entities import AvailabilityStatus, SystemStatus
from service_catalog.schemas.dtos import (
    AssignBarbersRequest,
    CategoryCreateRequest,
    ServiceCreateRequest,
    ServiceResponse,
    ServiceUpdateRequest,
)
from tests.factories.event_factories import service_request
from tests.factories.repository_factories import make_service


@pytest.mark.unit
class TestServiceCreateRequest:
    def test_valid_request(self):
        dto = ServiceCreateRequest.from_dict(service_request(price="15000.50"))

        dto.validate()

        assert dto.price == Decimal("15000.50")
        assert dto.category_id == 1

    @pytest.mark.parametrize(
        "overrides,message",
        [
            ({"name": ""}, "Name is required"),
            ({"name": "ab"}, "between 3 and 50"),
            ({"name": "Corte #1"}, "letters, numbers and spaces"),
            ({"description": "short"}, "Description must be between"),
            ({"price": "abc"}, "Price is required"),
            ({"price": 999}, "Minimum price"),
            ({"price": 500001}, "Maximum price"),
            ({"duration": 5}, "between 10 and 240"),
            ({"duration": 25}, "multiple of 10"),
            ({"category_id": 0}, "Category is required"),
        ],
    )
    def test_invalid_fields(self, overrides, message):
        dto = ServiceCreateRequest.from_dict(service_request(**overrides))

        with pytest.raises(RequestValidationError) as exc_info:
            dto.validate()

        assert message in exc_info.value.message
        assert exc_info.value.http_status == 400

    def test_accented_names_are_allowed(self):
        ServiceCreateRequest.from_dict(service_request(name="Corte Niño")).validate()


@pytest.mark.unit
class TestServiceUpdateRequest:
    def test_availability_label_is_parsed(self):
        dto = ServiceUpdateRequest.from_dict(service_request(availability_status="Available"))

        dto.validate()

        assert dto.requested_availability() == AvailabilityStatus.AVAILABLE

    def test_availability_is_required(self):
        dto = ServiceUpdateRequest.from_dict(service_request())

        with pytest.raises(RequestValidationError, match="Availability status is required"):
            dto.validate()

    def test_unknown_availability_label(self):
        dto = ServiceUpdateRequest.from_dict(service_request(availability_status="Maybe"))

        with pytest.raises(RequestValidationError) as exc_info:
            dto.validate()

        assert "'Available' or 'Unavailable'" in exc_info.value.message


@pytest.mark.unit
class TestAssignBarbersRequest:
    def test_null_list_is_rejected(self):
        dto = AssignBarbersRequest.from_dict({})

        with pytest.raises(RequestValidationError, match="cannot be null"):
            dto.validate()

    def test_empty_list_is_valid(self):
        dto = AssignBarbersRequest.from_dict({"barberIds": []})

        dto.validate()

        assert dto.barber_ids == []

    @pytest.mark.parametrize("raw", ["1,2", [1, "x"], [0], [True]])
    def test_invalid_lists(self, raw):
        with pytest.raises(RequestValidationError):
            AssignBarbersRequest.from_dict({"barberIds": raw})


@pytest.mark.unit
class TestCategoryCreateRequest:
    def test_name_rules_apply(self):
        with pytest.raises(RequestValidationError, match="Category name"):
            CategoryCreateRequest.from_dict({"name": "x"}).validate()


@pytest.mark.unit
class TestServiceResponse:
    def test_to_dict_uses_display_labels(self):
        service = make_service(service_id=3, barber_ids=[5, 1])
        service.system_status = SystemStatus.ACTIVE

        body = ServiceResponse.from_domain(service).to_dict()

        assert body["barberIds"] == [1, 5]
        assert body["availabilityStatus"] == "Available"
        assert body["systemStatus"] == "Active"
        assert body["price"] == "15000"
        assert body["categoryId"] == 1
