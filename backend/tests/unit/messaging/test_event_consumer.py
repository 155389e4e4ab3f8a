"""Unit tests for EventConsumer bindings and dispatch."""

from unittest.mock import Mock

import pytest

from service_catalog.core.logging_config import current_log_context
from service_catalog.messaging.codec import encode
from service_catalog.messaging.consumer import EventConsumer
from service_catalog.messaging.transport import InMemoryTransport
from service_catalog.services.handling_result import HandlingOutcome, HandlingResult


@pytest.fixture
def handler():
    return Mock(return_value=HandlingResult(HandlingOutcome.APPLIED, 1))


@pytest.mark.unit
@pytest.mark.messaging
class TestEventConsumer:
    def test_dispatch_decodes_and_routes(self, handler):
        consumer = EventConsumer()
        consumer.bind("barber", "barber.exchange", "barber.#", handler)

        result = consumer.dispatch("barber.exchange", "barber.created", encode({"id": 1}))

        assert result.applied
        handler.assert_called_once_with({"id": 1})

    def test_dispatch_without_binding_returns_none(self, handler):
        consumer = EventConsumer()
        consumer.bind("barber", "barber.exchange", "barber.#", handler)

        assert consumer.dispatch("barber.exchange", "service.created", b"{}") is None
        assert consumer.dispatch("other.exchange", "barber.created", b"{}") is None
        handler.assert_not_called()

    def test_undecodable_body_is_dropped(self, handler):
        consumer = EventConsumer()
        binding = consumer.bind("barber", "barber.exchange", "barber.#", handler)

        result = consumer.deliver(binding, "barber.created", b"\x00not-json")

        assert result.outcome == HandlingOutcome.DROPPED_MALFORMED
        handler.assert_not_called()

    def test_start_subscribes_every_binding(self, handler):
        transport = InMemoryTransport()
        consumer = EventConsumer(transport)
        consumer.bind("barber", "barber.exchange", "barber.#", handler, queue="q.barber")
        consumer.start()

        transport.send("barber.exchange", "barber.updated", encode({"id": 2}))

        handler.assert_called_once_with({"id": 2})

    def test_start_twice_does_not_duplicate_subscriptions(self, handler):
        transport = InMemoryTransport()
        consumer = EventConsumer(transport)
        consumer.bind("barber", "barber.exchange", "barber.#", handler)
        assert not consumer.started
        consumer.start()
        consumer.start()
        assert consumer.started

        transport.send("barber.exchange", "barber.updated", b"{}")

        assert handler.call_count == 1

    def test_start_without_transport(self):
        with pytest.raises(RuntimeError):
            EventConsumer().start()

    def test_binding_for_source(self, handler):
        consumer = EventConsumer()
        binding = consumer.bind("reservation", "reservation.exchange", "reservation.#", handler)

        assert consumer.binding_for_source("reservation") is binding
        assert consumer.binding_for_source("barber") is None

    def test_handler_runs_inside_the_event_log_context(self):
        seen = {}

        def handler(payload):
            seen.update(current_log_context())
            return HandlingResult(HandlingOutcome.APPLIED, payload["id"])

        consumer = EventConsumer()
        consumer.bind("barber", "barber.exchange", "barber.#", handler)

        consumer.dispatch("barber.exchange", "barber.updated", encode({"id": 7}))

        assert seen == {"source": "barber", "routing_key": "barber.updated", "event_id": 7}
        assert current_log_context() == {}
