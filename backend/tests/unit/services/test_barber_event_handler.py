"""
Unit tests for BarberEventHandler.

The handler runs each event in one unit of work; here the unit is a mock
whose repositories record what the handler asked for.
"""

from unittest.mock import Mock, patch

import pytest
from sqlalchemy.orm.exc import StaleDataError

from service_catalog.services.barber_event_handler import BarberEventHandler
from service_catalog.services.default_assignment import DefaultAssignmentPolicy
from service_catalog.services.handling_result import HandlingOutcome
from tests.factories.event_factories import BarberEventFactory
from tests.factories.repository_factories import UnitOfWorkFactory, make_service


@pytest.fixture
def uow():
    return UnitOfWorkFactory.create_mock()


@pytest.fixture
def policy():
    mock_policy = Mock(spec=DefaultAssignmentPolicy)
    mock_policy.apply.return_value = []
    return mock_policy


@pytest.fixture
def handler(uow, policy):
    return BarberEventHandler(lambda: uow, default_policy=policy, max_attempts=2)


@pytest.mark.unit
@pytest.mark.services
class TestBarberMirror:
    def test_upserts_mirror_and_commits(self, handler, uow):
        result = handler.handle(BarberEventFactory.create(barber_id=3, name="Ana"))

        assert result.outcome == HandlingOutcome.APPLIED
        assert result.event_id == 3
        upserted = uow.barbers.upsert.call_args.args[0]
        assert (upserted.id, upserted.name, upserted.active) == (3, "Ana", True)
        uow.commit.assert_called_once()

    def test_published_count_comes_from_commit(self, handler, uow, policy):
        uow.commit.return_value = 3

        result = handler.handle(BarberEventFactory.create())

        assert result.published == 3


@pytest.mark.unit
@pytest.mark.services
class TestBarberRelationPayload:
    def test_relation_payload_is_reconciled_silently(self, handler, uow, policy):
        service = make_service(1)
        uow.services.get_by_ids.side_effect = lambda ids: [service] if 1 in ids else []

        result = handler.handle(BarberEventFactory.create(barber_id=3, related_service_ids=[1]))

        assert result.applied
        uow.relations.add.assert_called_once_with(1, 3)
        assert uow.record.call_args.kwargs["suppress_outbound_echo"] is True
        policy.apply.assert_not_called()

    def test_empty_relation_list_unassigns_without_default_policy(self, handler, uow, policy):
        uow.relations.service_ids_for_barber.return_value = {1}
        uow.services.get_by_ids.side_effect = lambda ids: [
            make_service(i, barber_ids=[3]) for i in sorted(ids)
        ]

        handler.handle(BarberEventFactory.create(barber_id=3, related_service_ids=[]))

        uow.relations.remove.assert_called_once_with(1, 3)
        policy.apply.assert_not_called()

    def test_absent_relation_payload_applies_default_policy(self, handler, uow, policy):
        handler.handle(BarberEventFactory.create(barber_id=3))

        policy.apply.assert_called_once_with(uow, 3)

    def test_inactive_barber_without_payload_gets_no_default(self, handler, uow, policy):
        result = handler.handle(BarberEventFactory.create(barber_id=3, active=False))

        assert result.applied
        assert "no default assignment" in result.detail
        policy.apply.assert_not_called()

    def test_inactive_barber_with_payload_is_still_reconciled(self, handler, uow, policy):
        uow.relations.service_ids_for_barber.return_value = {1}
        uow.services.get_by_ids.side_effect = lambda ids: [
            make_service(i, barber_ids=[3]) for i in sorted(ids)
        ]

        handler.handle(
            BarberEventFactory.create(barber_id=3, active=False, related_service_ids=[])
        )

        uow.relations.remove.assert_called_once_with(1, 3)


@pytest.mark.unit
@pytest.mark.services
class TestBarberEventFailures:
    def test_malformed_event_is_dropped_without_unit_of_work(self, policy):
        factory = Mock()
        handler = BarberEventHandler(factory, default_policy=policy, max_attempts=1)

        result = handler.handle({"id": "x", "name": "Ana"})

        assert result.outcome == HandlingOutcome.DROPPED_MALFORMED
        assert result.is_expected
        factory.assert_not_called()

    def test_conflict_is_retried_with_a_fresh_unit(self, policy):
        first, second = UnitOfWorkFactory.create_mock(), UnitOfWorkFactory.create_mock()
        first.commit.side_effect = StaleDataError("version mismatch")
        units = iter([first, second])
        handler = BarberEventHandler(lambda: next(units), default_policy=policy, max_attempts=2)

        result = handler.handle(BarberEventFactory.create(barber_id=3))

        assert result.applied
        first.barbers.upsert.assert_called_once()
        second.barbers.upsert.assert_called_once()
        second.commit.assert_called_once()

    def test_unexpected_error_is_consumed_and_reported(self, handler, uow):
        uow.barbers.upsert.side_effect = RuntimeError("database down")

        with patch(
            "service_catalog.services.handling_result.sentry_sdk.capture_exception"
        ) as capture:
            result = handler.handle(BarberEventFactory.create(barber_id=3))

        assert result.outcome == HandlingOutcome.FAILED
        assert not result.is_expected
        assert result.event_id == 3
        assert "database down" in result.detail
        capture.assert_called_once()
        uow.commit.assert_not_called()
