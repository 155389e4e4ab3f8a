"""
Outbound service event publisher.

Publication is fire-and-forget: it only happens after the local commit,
and a transport failure is logged and counted but never undoes or fails
the already committed change.
"""

import logging

from service_catalog.core.metrics import OUTBOUND_EVENTS
from service_catalog.domain.entities import Service
from service_catalog.domain.interfaces import IMessageTransport, IServiceEventPublisher
from service_catalog.messaging.codec import encode
from service_catalog.schemas.events import ServiceEventPayload, ServiceEventType

logger = logging.getLogger(__name__)


class ServiceEventPublisher(IServiceEventPublisher):
    """Publishes service lifecycle events to the service topic exchange."""

    def __init__(self, transport: IMessageTransport, exchange: str) -> None:
        self.transport = transport
        self.exchange = exchange

    def publish_created(self, service: Service) -> bool:
        return self._publish(ServiceEventType.CREATED, ServiceEventPayload.full(service))

    def publish_updated(self, service: Service) -> bool:
        return self._publish(ServiceEventType.UPDATED, ServiceEventPayload.full(service))

    def publish_inactivated(self, service_id: int) -> bool:
        return self._publish(
            ServiceEventType.INACTIVATED, ServiceEventPayload.inactivated(service_id)
        )

    def _publish(self, event_type: ServiceEventType, payload: ServiceEventPayload) -> bool:
        routing_key = event_type.routing_key
        context = {
            "exchange": self.exchange,
            "routing_key": routing_key,
            "service_id": payload.id,
        }
        try:
            self.transport.send(self.exchange, routing_key, encode(payload.to_dict()))
        except Exception as exc:
            OUTBOUND_EVENTS.labels(routing_key=routing_key, result="failed").inc()
            logger.error(
                "Failed to publish service event",
                extra={"context": {**context, "error": str(exc)}},
                exc_info=True,
            )
            return False

        OUTBOUND_EVENTS.labels(routing_key=routing_key, result="sent").inc()
        logger.info("Service event published", extra={"context": context})
        return True

