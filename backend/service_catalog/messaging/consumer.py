"""
Inbound event consumer.

Binds (exchange, binding key) pairs to event handlers, decodes message
bodies and dispatches the resulting dictionaries. One binding per queue:
barber events and reservation events are consumed independently.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from service_catalog.core.logging_config import bind_log_context, log_performance
from service_catalog.domain.interfaces import IMessageTransport
from service_catalog.messaging.codec import decode
from service_catalog.messaging.topics import topic_matches
from service_catalog.services.handling_result import HandlingResult, malformed

logger = logging.getLogger(__name__)

EventHandler = Callable[[Dict[str, Any]], HandlingResult]


@dataclass(frozen=True)
class Binding:
    source: str
    queue: str
    exchange: str
    binding_key: str
    handler: EventHandler


class EventConsumer:
    """Routes broker messages to the matching event handler."""

    def __init__(self, transport: Optional[IMessageTransport] = None) -> None:
        self.transport = transport
        self.bindings: List[Binding] = []
        self._started = False

    def bind(
        self,
        source: str,
        exchange: str,
        binding_key: str,
        handler: EventHandler,
        queue: str = "",
    ) -> Binding:
        binding = Binding(source, queue, exchange, binding_key, handler)
        self.bindings.append(binding)
        if self._started and self.transport is not None:
            self._subscribe(binding)
        return binding

    def start(self) -> None:
        """Subscribe every binding on the transport."""
        if self.transport is None:
            raise RuntimeError("EventConsumer has no transport to subscribe to")
        if self._started:
            return
        for binding in self.bindings:
            self._subscribe(binding)
        self._started = True

    @property
    def started(self) -> bool:
        return self._started

    def binding_for_source(self, source: str) -> Optional[Binding]:
        for binding in self.bindings:
            if binding.source == source:
                return binding
        return None

    def dispatch(self, exchange: str, routing_key: str, body) -> Optional[HandlingResult]:
        """Deliver one message to the first matching binding.

        Returns None when no binding matches the exchange and routing key.
        """
        for binding in self.bindings:
            if binding.exchange == exchange and topic_matches(binding.binding_key, routing_key):
                return self.deliver(binding, routing_key, body)
        logger.debug(
            "No binding for message, ignored",
            extra={"context": {"exchange": exchange, "routing_key": routing_key}},
        )
        return None

    def deliver(self, binding: Binding, routing_key: str, body) -> HandlingResult:
        try:
            payload = decode(body)
        except ValueError as exc:
            return malformed(binding.source, f"Undecodable message body: {exc}")

        event_id = payload.get("id") if isinstance(payload, dict) else None
        with bind_log_context(source=binding.source, routing_key=routing_key, event_id=event_id):
            logger.info(
                f"Received {binding.source} event", extra={"context": {"queue": binding.queue}}
            )
            started = time.perf_counter()
            result = binding.handler(payload)
            log_performance(
                f"handle_{binding.source}_event",
                (time.perf_counter() - started) * 1000,
                outcome=result.outcome.value,
            )
        return result

    def _subscribe(self, binding: Binding) -> None:
        def on_message(exchange: str, routing_key: str, body: bytes) -> None:
            self.deliver(binding, routing_key, body)

        self.transport.subscribe(binding.exchange, binding.binding_key, on_message)
        logger.info(
            "Listening for events",
            extra={
                "context": {
                    "source": binding.source,
                    "queue": binding.queue,
                    "exchange": binding.exchange,
                    "binding_key": binding.binding_key,
                }
            },
        )
