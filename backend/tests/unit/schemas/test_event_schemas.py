"""
Unit tests for the inbound event contracts and the outbound payload.

The barber relation field distinguishes three shapes: absent (default
assignment applies), an explicit empty list (full unassignment) and a list
of IDs (authoritative set).
"""

from datetime import datetime
from decimal import Decimal

import pytest

from service_catalog.core.exceptions import MalformedEventError
from service_catalog.schemas.events import (
    BarberEvent,
    ReservationEvent,
    ServiceEventPayload,
    ServiceEventType,
)
from tests.factories.event_factories import BarberEventFactory, ReservationEventFactory
from tests.factories.repository_factories import make_service


@pytest.mark.unit
@pytest.mark.events
class TestBarberEventParsing:
    def test_absent_relation_field_means_no_payload(self):
        event = BarberEvent.from_dict(BarberEventFactory.create())

        assert event.related_service_ids is None
        assert event.has_relation_payload is False

    def test_null_relation_field_means_no_payload(self):
        event = BarberEvent.from_dict(BarberEventFactory.create(related_service_ids=None))

        assert event.has_relation_payload is False

    def test_empty_relation_list_is_an_explicit_payload(self):
        event = BarberEvent.from_dict(BarberEventFactory.create(related_service_ids=[]))

        assert event.related_service_ids == []
        assert event.has_relation_payload is True

    def test_relation_ids_are_parsed(self):
        event = BarberEvent.from_dict(
            BarberEventFactory.create(barber_id=4, related_service_ids=[1, "2"])
        )

        assert event.id == 4
        assert event.related_service_ids == [1, 2]

    def test_legacy_service_ids_field_is_accepted(self):
        payload = {"id": 4, "name": "Juan", "active": True, "serviceIds": [3]}

        assert BarberEvent.from_dict(payload).related_service_ids == [3]

    def test_active_defaults_to_true(self):
        assert BarberEvent.from_dict({"id": 1, "name": "Juan"}).active is True

    @pytest.mark.parametrize(
        "payload",
        [
            {"name": "Juan"},
            {"id": "abc", "name": "Juan"},
            {"id": True, "name": "Juan"},
            {"id": -3, "name": "Juan"},
            {"id": 1, "name": "Juan", "active": "yes"},
            {"id": 1, "name": 42},
            {"id": 1, "name": "Juan", "relatedServiceIds": "1,2"},
            {"id": 1, "name": "Juan", "relatedServiceIds": [1, None]},
        ],
    )
    def test_malformed_payloads_raise(self, payload):
        with pytest.raises(MalformedEventError):
            BarberEvent.from_dict(payload)

    def test_non_object_payload_raises(self):
        with pytest.raises(MalformedEventError, match="JSON object"):
            BarberEvent.from_dict([1, 2])


@pytest.mark.unit
@pytest.mark.events
class TestReservationEventParsing:
    def test_parses_iso_start(self):
        event = ReservationEvent.from_dict(ReservationEventFactory.create(barber_id=9, version=2))

        assert event.id == 100
        assert event.service_id == 1
        assert event.barber_id == 9
        assert event.version == 2
        assert event.start == datetime(2025, 9, 1, 10, 30)

    def test_parses_array_start(self):
        event = ReservationEvent.from_dict(
            ReservationEventFactory.create(start=[2025, 9, 1, 10, 30])
        )

        assert event.start == datetime(2025, 9, 1, 10, 30)

    def test_status_is_kept_raw(self):
        event = ReservationEvent.from_dict(ReservationEventFactory.create(status="SOMETHING_NEW"))

        assert event.status == "SOMETHING_NEW"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"serviceId": None},
            {"start": "yesterday"},
            {"version": "3"},
            {"version": False},
            {"barberId": 0},
        ],
    )
    def test_malformed_payloads_raise(self, overrides):
        with pytest.raises(MalformedEventError):
            ReservationEvent.from_dict(ReservationEventFactory.create(**overrides))


@pytest.mark.unit
@pytest.mark.events
class TestServiceEventPayload:
    def test_routing_keys(self):
        assert ServiceEventType.CREATED.routing_key == "service.created"
        assert ServiceEventType.UPDATED.routing_key == "service.updated"
        assert ServiceEventType.INACTIVATED.routing_key == "service.inactivated"

    def test_full_payload(self):
        service = make_service(service_id=5, barber_ids=[9, 2])
        service.price = Decimal("15000.50")

        body = ServiceEventPayload.full(service).to_dict()

        assert body == {
            "id": 5,
            "name": "Corte Clasico",
            "description": "Corte tradicional con tijera",
            "price": 15000.5,
            "duration": 30,
            "relatedBarberIds": [2, 9],
            "availabilityStatus": "Available",
            "systemStatus": "Active",
        }

    def test_inactivated_payload_is_minimal(self):
        body = ServiceEventPayload.inactivated(5).to_dict()

        assert body == {
            "id": 5,
            "systemStatus": "Inactive",
            "availabilityStatus": "Unavailable",
        }
