"""
Unit of work: one session, one transaction, outbound events after commit.

Every inbound event and every administrative command runs inside exactly
one unit. Repositories only flush; the unit commits. Service events
recorded during the unit are handed to the publisher only once the commit
has succeeded, and are discarded on rollback.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, NamedTuple, Optional, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError

from service_catalog.core.config import get_event_max_attempts
from service_catalog.core.metrics import UNIT_OF_WORK_RETRIES
from service_catalog.db.session import SessionLocal
from service_catalog.domain.entities import Service
from service_catalog.domain.interfaces import IServiceEventPublisher
from service_catalog.repositories import (
    BarberRepository,
    CategoryRepository,
    ReservationRepository,
    ServiceBarberRelationRepository,
    ServiceRepository,
)
from service_catalog.schemas.events import ServiceEventType

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Concurrent writes on the same service surface as one of these at flush/commit
CONFLICT_ERRORS = (StaleDataError, IntegrityError)


@dataclass
class PendingServiceEvent:
    event_type: ServiceEventType
    service_id: int
    service: Optional[Service] = None


class UnitOfWork:
    """Transactional boundary around the repositories.

    Usage::

        with UnitOfWork(publisher=publisher) as uow:
            ...
            uow.record(ServiceEventType.UPDATED, service)
            uow.commit()
    """

    def __init__(
        self,
        session_factory: Optional[Callable] = None,
        publisher: Optional[IServiceEventPublisher] = None,
    ) -> None:
        self._session_factory = session_factory or SessionLocal
        self._publisher = publisher
        self.session = None
        self._pending: List[PendingServiceEvent] = []
        self._committed = False
        self.published = 0

    def __enter__(self) -> "UnitOfWork":
        self.session = self._session_factory()
        self.services = ServiceRepository(self.session)
        self.categories = CategoryRepository(self.session)
        self.barbers = BarberRepository(self.session)
        self.reservations = ReservationRepository(self.session)
        self.relations = ServiceBarberRelationRepository(self.session)
        self._pending = []
        self._committed = False
        self.published = 0
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        try:
            if not self._committed:
                self.rollback()
        finally:
            self.session.close()
        return False

    def record(
        self,
        event_type: ServiceEventType,
        service: Optional[Service] = None,
        service_id: Optional[int] = None,
        suppress_outbound_echo: bool = False,
    ) -> bool:
        """Queue a service event for publication after commit.

        With ``suppress_outbound_echo`` the change is persisted silently and
        nothing is queued. Returns True when the event was queued.
        """
        target_id = service.id if service is not None else service_id
        if target_id is None:
            raise ValueError("A service or service_id is required to record an event")
        if suppress_outbound_echo:
            logger.debug(
                "Outbound service event suppressed",
                extra={
                    "context": {
                        "routing_key": event_type.routing_key,
                        "service_id": target_id,
                    }
                },
            )
            return False

        # Keep one event per (type, service); the latest snapshot wins
        for pending in self._pending:
            if pending.event_type == event_type and pending.service_id == target_id:
                pending.service = service
                return True
        self._pending.append(PendingServiceEvent(event_type, target_id, service))
        return True

    @property
    def pending_events(self) -> List[PendingServiceEvent]:
        return list(self._pending)

    def commit(self) -> int:
        """Commit the transaction, then publish recorded events.

        Returns how many events the publisher accepted.
        """
        self.session.commit()
        self._committed = True
        events, self._pending = self._pending, []
        self.published = self._publish(events)
        return self.published

    def rollback(self) -> None:
        self._pending = []
        self.session.rollback()

    def _publish(self, events: List[PendingServiceEvent]) -> int:
        if not events:
            return 0
        if self._publisher is None:
            logger.warning(
                "No publisher configured, dropping outbound service events",
                extra={"context": {"count": len(events)}},
            )
            return 0
        published = 0
        for event in events:
            if event.event_type == ServiceEventType.INACTIVATED:
                ok = self._publisher.publish_inactivated(event.service_id)
            elif event.event_type == ServiceEventType.CREATED:
                ok = self._publisher.publish_created(event.service)
            else:
                ok = self._publisher.publish_updated(event.service)
            if ok:
                published += 1
        return published


class UnitOfWorkResult(NamedTuple):
    value: Any
    published: int
    attempts: int


def run_in_unit_of_work(
    uow_factory: Callable[[], UnitOfWork],
    work: Callable[[UnitOfWork], T],
    max_attempts: Optional[int] = None,
) -> UnitOfWorkResult:
    """Run ``work`` inside a fresh unit of work and commit it.

    A concurrent conflicting write (stale version or duplicate relation
    row) rolls the whole unit back and runs ``work`` again from scratch on
    a new session. Any other exception propagates after rollback.
    """
    attempts_allowed = max_attempts or get_event_max_attempts()
    attempt = 0
    while True:
        attempt += 1
        try:
            with uow_factory() as uow:
                value = work(uow)
                published = uow.commit()
            return UnitOfWorkResult(value, published, attempt)
        except CONFLICT_ERRORS as exc:
            if attempt >= attempts_allowed:
                logger.error(
                    "Unit of work conflict, giving up",
                    extra={
                        "context": {
                            "attempt": attempt,
                            "error": type(exc).__name__,
                        }
                    },
                )
                raise
            UNIT_OF_WORK_RETRIES.inc()
            logger.warning(
                "Unit of work conflict, retrying",
                extra={
                    "context": {
                        "attempt": attempt,
                        "max_attempts": attempts_allowed,
                        "error": type(exc).__name__,
                    }
                },
            )
