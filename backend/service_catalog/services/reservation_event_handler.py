"""
Inbound reservation event handler.

Keeps the local reservation mirror used by the inactivation guard.
Orphans, unknown statuses and stale versions are dropped, never stored.
"""

import logging
from typing import Any, Callable, Dict, Optional

from service_catalog.core.exceptions import MalformedEventError, UnknownStatusLabel
from service_catalog.db.unit_of_work import UnitOfWork, run_in_unit_of_work
from service_catalog.domain.entities import Reservation, ReservationStatus
from service_catalog.domain.status_labels import from_label
from service_catalog.schemas.events import ReservationEvent
from service_catalog.services.handling_result import (
    HandlingOutcome,
    HandlingResult,
    failed,
    malformed,
    report,
)

logger = logging.getLogger(__name__)

SOURCE = "reservation"


class ReservationEventHandler:
    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        max_attempts: Optional[int] = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._max_attempts = max_attempts

    def handle(self, payload: Dict[str, Any]) -> HandlingResult:
        """Apply one reservation event. Never raises."""
        try:
            event = ReservationEvent.from_dict(payload)
        except MalformedEventError as exc:
            raw_id = payload.get("id") if isinstance(payload, dict) else None
            return malformed(SOURCE, str(exc), raw_id if isinstance(raw_id, int) else None)

        try:
            outcome = run_in_unit_of_work(
                self._uow_factory, lambda uow: self._apply(uow, event), self._max_attempts
            )
        except Exception as exc:
            return failed(SOURCE, event.id, exc)
        return report(SOURCE, outcome.value)

    def _apply(self, uow: UnitOfWork, event: ReservationEvent) -> HandlingResult:
        context = {"reservation_id": event.id, "service_id": event.service_id}

        if uow.services.get_by_id(event.service_id) is None:
            logger.warning(
                "Reservation references unknown service, event dropped",
                extra={"context": context},
            )
            return HandlingResult(
                HandlingOutcome.DROPPED_ORPHAN,
                event.id,
                detail=f"service {event.service_id} not found",
            )

        try:
            status = from_label(ReservationStatus, event.status)
        except UnknownStatusLabel:
            logger.error(
                "Unknown reservation status, event dropped",
                extra={"context": {**context, "status": event.status}},
            )
            return HandlingResult(
                HandlingOutcome.DROPPED_UNKNOWN_STATUS,
                event.id,
                detail=f"unknown status {event.status!r}",
            )

        existing = uow.reservations.get_by_id(event.id)
        if (
            event.version is not None
            and existing is not None
            and existing.source_version is not None
            and existing.source_version > event.version
        ):
            logger.warning(
                "Out-of-order reservation event, older version dropped",
                extra={
                    "context": {
                        **context,
                        "stored_version": existing.source_version,
                        "event_version": event.version,
                    }
                },
            )
            return HandlingResult(
                HandlingOutcome.DROPPED_STALE,
                event.id,
                detail=f"version {event.version} older than stored {existing.source_version}",
            )

        _, created = uow.reservations.upsert(
            Reservation(
                id=event.id,
                service_id=event.service_id,
                status=status,
                start=event.start,
                barber_id=event.barber_id,
                source_version=event.version,
            )
        )
        logger.info(
            "Reservation mirror upserted",
            extra={"context": {**context, "status": status.value, "created": created}},
        )
        return HandlingResult(
            HandlingOutcome.APPLIED,
            event.id,
            detail="created" if created else "updated",
        )
