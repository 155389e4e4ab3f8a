"""
Composition root.

Wires the transport, publisher, unit-of-work factory, handlers, consumer
and application services together. The Flask app, the management CLI and
the tests all build their object graph here.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from service_catalog.core.config import (
    MessagingSettings,
    get_messaging_settings,
    log_messaging_config,
)
from service_catalog.db.session import SessionLocal
from service_catalog.db.unit_of_work import UnitOfWork
from service_catalog.domain.interfaces import IMessageTransport
from service_catalog.messaging.consumer import EventConsumer
from service_catalog.messaging.publisher import ServiceEventPublisher
from service_catalog.messaging.transport import InMemoryTransport
from service_catalog.services.barber_event_handler import BarberEventHandler
from service_catalog.services.barber_event_handler import SOURCE as BARBER_SOURCE
from service_catalog.services.catalog_service import ServiceCatalogService
from service_catalog.services.category_service import CategoryService
from service_catalog.services.reservation_event_handler import (
    SOURCE as RESERVATION_SOURCE,
)
from service_catalog.services.reservation_event_handler import ReservationEventHandler

logger = logging.getLogger(__name__)


@dataclass
class Container:
    settings: MessagingSettings
    transport: IMessageTransport
    publisher: ServiceEventPublisher
    uow_factory: Callable[[], UnitOfWork]
    barber_handler: BarberEventHandler
    reservation_handler: ReservationEventHandler
    consumer: EventConsumer
    catalog_service: ServiceCatalogService
    category_service: CategoryService


def build_container(
    transport: Optional[IMessageTransport] = None,
    session_factory: Optional[Callable] = None,
    settings: Optional[MessagingSettings] = None,
) -> Container:
    settings = settings or get_messaging_settings()
    transport = transport or InMemoryTransport()
    session_factory = session_factory or SessionLocal
    publisher = ServiceEventPublisher(transport, settings.service_exchange)

    def uow_factory() -> UnitOfWork:
        return UnitOfWork(session_factory=session_factory, publisher=publisher)

    attempts = settings.event_max_attempts
    barber_handler = BarberEventHandler(uow_factory, max_attempts=attempts)
    reservation_handler = ReservationEventHandler(uow_factory, max_attempts=attempts)

    consumer = EventConsumer(transport)
    consumer.bind(
        BARBER_SOURCE,
        settings.barber_exchange,
        settings.barber_binding_key,
        barber_handler.handle,
        queue=settings.barber_listener_queue,
    )
    consumer.bind(
        RESERVATION_SOURCE,
        settings.reservation_exchange,
        settings.reservation_binding_key,
        reservation_handler.handle,
        queue=settings.reservation_listener_queue,
    )

    log_messaging_config(settings)
    return Container(
        settings=settings,
        transport=transport,
        publisher=publisher,
        uow_factory=uow_factory,
        barber_handler=barber_handler,
        reservation_handler=reservation_handler,
        consumer=consumer,
        catalog_service=ServiceCatalogService(uow_factory, max_attempts=attempts),
        category_service=CategoryService(uow_factory, max_attempts=attempts),
    )
