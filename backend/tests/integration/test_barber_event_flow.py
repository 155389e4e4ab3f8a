"""
Integration tests for barber events against the real database.

Events are dispatched through the consumer bindings, handled in a real unit
of work and any outbound service events land on the in-memory transport.
"""

from unittest.mock import patch

import pytest

from service_catalog.domain.entities import AvailabilityStatus, SystemStatus
from service_catalog.messaging.codec import encode
from service_catalog.repositories.service_repo import ServiceRepository
from service_catalog.services.handling_result import HandlingOutcome
from tests.factories.catalog_builders import (
    add_barber,
    add_services,
    all_services,
    assign,
    load_service,
    published,
    send_barber_event,
    service_ids_for_barber,
    version_of,
)


def assert_availability_invariant(container):
    for service in all_services(container):
        expected = (
            AvailabilityStatus.AVAILABLE if service.barber_ids else AvailabilityStatus.UNAVAILABLE
        )
        assert service.availability_status == expected, service


@pytest.mark.integration
@pytest.mark.events
class TestRelationPayload:
    def test_barber_relation_converges_to_event_set(self, container):
        """B1 relates to S2 and S3; an event asserting S1 and S2 replaces that."""
        s1, s2, s3 = add_services(container, 3)
        add_barber(container, 1, [s2.id, s3.id])
        container.transport.clear()

        result = send_barber_event(container, barber_id=1, related_service_ids=[s1.id, s2.id])

        assert result.outcome == HandlingOutcome.APPLIED
        assert service_ids_for_barber(container, 1) == {s1.id, s2.id}
        assert load_service(container, s1.id).is_available
        assert load_service(container, s2.id).is_available
        assert load_service(container, s3.id).availability_status == AvailabilityStatus.UNAVAILABLE
        assert_availability_invariant(container)

    def test_synchronisation_publishes_nothing(self, container):
        s1, s2 = add_services(container, 2)
        container.transport.clear()

        add_barber(container, 1, [s1.id, s2.id])

        assert published(container) == []

    def test_service_keeps_availability_through_other_barbers(self, container):
        s1, s2 = add_services(container, 2)
        add_barber(container, 1, [s1.id])
        add_barber(container, 2, [s1.id])

        send_barber_event(container, barber_id=1, related_service_ids=[s2.id])

        s1_now = load_service(container, s1.id)
        assert s1_now.barber_ids == {2}
        assert s1_now.is_available

    def test_empty_relation_list_unassigns_everything(self, container):
        s1, s2 = add_services(container, 2)
        add_barber(container, 1, [s1.id, s2.id])

        result = send_barber_event(container, barber_id=1, related_service_ids=[])

        assert result.applied
        assert service_ids_for_barber(container, 1) == set()
        assert not load_service(container, s1.id).is_available
        assert not load_service(container, s2.id).is_available
        # An explicit empty set never falls back to default assignment
        assert published(container, "service.updated") == []

    def test_unknown_and_inactive_services_are_skipped(self, container):
        s1, s2 = add_services(container, 2)
        container.catalog_service.inactivate_service(s2.id)

        result = send_barber_event(container, barber_id=1, related_service_ids=[s1.id, s2.id, 999])

        assert result.applied
        assert "skipped 2" in result.detail
        assert service_ids_for_barber(container, 1) == {s1.id}
        inactive = load_service(container, s2.id)
        assert inactive.system_status == SystemStatus.INACTIVE
        assert inactive.barber_ids == set()

    @pytest.mark.parametrize(
        "sequence",
        [
            [[1], [2], [1, 3]],
            [[1, 2, 3], [], [2]],
            [None, [3]],
            [[2], None, [1]],
            [[1, 2], [1, 2], [2, 3]],
        ],
    )
    def test_last_relation_payload_wins(self, container, sequence):
        services = add_services(container, 3)
        ids = {n: s.id for n, s in enumerate(services, start=1)}

        for step in sequence:
            if step is None:
                send_barber_event(container, barber_id=7)
            else:
                send_barber_event(
                    container, barber_id=7, related_service_ids=[ids[n] for n in step]
                )

        assert service_ids_for_barber(container, 7) == {ids[n] for n in sequence[-1]}
        assert_availability_invariant(container)


@pytest.mark.integration
@pytest.mark.events
class TestIdempotence:
    def test_repeated_event_writes_nothing(self, container):
        s1, s2 = add_services(container, 2)
        send_barber_event(container, barber_id=1, related_service_ids=[s1.id])
        versions = {s.id: version_of(container, s.id) for s in (s1, s2)}
        container.transport.clear()

        result = send_barber_event(container, barber_id=1, related_service_ids=[s1.id])

        assert result.applied
        assert "+0 -0" in result.detail
        assert {s.id: version_of(container, s.id) for s in (s1, s2)} == versions
        assert published(container) == []

    def test_repeated_default_assignment_publishes_once(self, container):
        add_services(container, 2)
        send_barber_event(container, barber_id=5)
        container.transport.clear()

        result = send_barber_event(container, barber_id=5)

        assert result.published == 0
        assert published(container) == []

    def test_relation_only_change_bumps_service_version(self, container):
        [s1] = add_services(container, 1)
        before = version_of(container, s1.id)

        add_barber(container, 1, [s1.id])

        assert version_of(container, s1.id) == before + 1


@pytest.mark.integration
@pytest.mark.events
class TestDefaultAssignment:
    def test_new_barber_without_payload_joins_every_active_service(self, container):
        services = add_services(container, 3)
        container.transport.clear()

        result = send_barber_event(container, barber_id=2, routing_key="barber.created")

        assert result.published == 3
        assert service_ids_for_barber(container, 2) == {s.id for s in services}
        updates = published(container, "service.updated")
        assert sorted(body["id"] for body in updates) == sorted(s.id for s in services)
        assert all(2 in body["relatedBarberIds"] for body in updates)
        assert all(body["availabilityStatus"] == "Available" for body in updates)

    def test_services_already_including_barber_are_not_republished(self, container):
        s1, s2, s3 = add_services(container, 3)
        add_barber(container, 2, [])
        assign(container, s1.id, [2])
        container.transport.clear()

        send_barber_event(container, barber_id=2)

        assert sorted(body["id"] for body in published(container)) == [s2.id, s3.id]

    def test_inactive_services_are_not_assigned(self, container):
        s1, s2 = add_services(container, 2)
        container.catalog_service.inactivate_service(s2.id)

        send_barber_event(container, barber_id=4)

        assert service_ids_for_barber(container, 4) == {s1.id}

    def test_inactive_barber_without_payload_is_only_mirrored(self, container):
        add_services(container, 2)
        container.transport.clear()

        result = send_barber_event(container, barber_id=9, active=False)

        assert result.applied
        assert service_ids_for_barber(container, 9) == set()
        assert published(container) == []
        with container.uow_factory() as uow:
            assert uow.barbers.get_by_id(9).active is False

    def test_failure_midway_rolls_back_the_whole_fan_out(self, container):
        add_services(container, 3)
        container.transport.clear()
        original_update = ServiceRepository.update
        updated = []

        def update_failing_on_second(repo, service):
            updated.append(service.id)
            if len(updated) == 2:
                raise RuntimeError("lost connection")
            return original_update(repo, service)

        with patch.object(ServiceRepository, "update", update_failing_on_second):
            result = send_barber_event(container, barber_id=2, routing_key="barber.created")

        assert result.outcome == HandlingOutcome.FAILED
        assert len(updated) == 2
        assert service_ids_for_barber(container, 2) == set()
        assert all(not s.barber_ids for s in all_services(container))
        assert published(container) == []
        with container.uow_factory() as uow:
            assert uow.barbers.get_by_id(2) is None


@pytest.mark.integration
@pytest.mark.events
class TestBrokerDelivery:
    def test_events_flow_through_transport_subscription(self, container):
        [s1] = add_services(container, 1)

        container.transport.send(
            container.settings.barber_exchange,
            "barber.created",
            encode({"id": 3, "name": "Luis", "active": True, "relatedServiceIds": [s1.id]}),
        )

        assert service_ids_for_barber(container, 3) == {s1.id}

    def test_malformed_message_never_escapes(self, container):
        container.transport.send(container.settings.barber_exchange, "barber.created", b"{oops")
        container.transport.send(
            container.settings.barber_exchange, "barber.created", encode({"name": "No id"})
        )

        with container.uow_factory() as uow:
            assert uow.barbers.get_by_ids([1, 2, 3]) == []
