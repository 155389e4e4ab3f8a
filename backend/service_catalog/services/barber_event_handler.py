"""
Inbound barber event handler.

One event, one unit of work: mirror upsert plus either a silent relation
reconciliation (the barbers system already knows the relation it sent)
or the default-assignment policy (which must be pushed back out).
"""

import logging
from typing import Any, Callable, Dict, Optional

from service_catalog.core.exceptions import MalformedEventError
from service_catalog.db.unit_of_work import UnitOfWork, run_in_unit_of_work
from service_catalog.domain.entities import Barber
from service_catalog.schemas.events import BarberEvent
from service_catalog.services.default_assignment import DefaultAssignmentPolicy
from service_catalog.services.handling_result import (
    HandlingOutcome,
    HandlingResult,
    failed,
    malformed,
    report,
)
from service_catalog.services.relation_reconciler import RelationReconciler

logger = logging.getLogger(__name__)

SOURCE = "barber"


class BarberEventHandler:
    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        default_policy: Optional[DefaultAssignmentPolicy] = None,
        max_attempts: Optional[int] = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._default_policy = default_policy or DefaultAssignmentPolicy()
        self._max_attempts = max_attempts

    def handle(self, payload: Dict[str, Any]) -> HandlingResult:
        """Apply one barber event. Never raises."""
        try:
            event = BarberEvent.from_dict(payload)
        except MalformedEventError as exc:
            raw_id = payload.get("id") if isinstance(payload, dict) else None
            return malformed(SOURCE, str(exc), raw_id if isinstance(raw_id, int) else None)

        try:
            outcome = run_in_unit_of_work(
                self._uow_factory, lambda uow: self._apply(uow, event), self._max_attempts
            )
        except Exception as exc:
            return failed(SOURCE, event.id, exc)

        logger.info(
            "Barber event applied",
            extra={
                "context": {
                    "barber_id": event.id,
                    "detail": outcome.value,
                    "published": outcome.published,
                    "attempts": outcome.attempts,
                }
            },
        )
        return report(
            SOURCE,
            HandlingResult(
                HandlingOutcome.APPLIED,
                event.id,
                detail=outcome.value,
                published=outcome.published,
            ),
        )

    def _apply(self, uow: UnitOfWork, event: BarberEvent) -> str:
        _, created = uow.barbers.upsert(
            Barber(id=event.id, name=event.name, active=event.active)
        )
        action = "created" if created else "updated"

        if event.has_relation_payload:
            # An empty list is an explicit full unassignment, not "no payload"
            result = RelationReconciler(uow).reconcile_barber(
                event.id, event.related_service_ids, suppress_outbound_echo=True
            )
            return (
                f"barber {action}; relations reconciled "
                f"(+{len(result.added)} -{len(result.removed)}, skipped {len(result.skipped)})"
            )

        if not event.active:
            return f"barber {action}; inactive without relation payload, no default assignment"

        modified = self._default_policy.apply(uow, event.id)
        return f"barber {action}; default assignment to {len(modified)} service(s)"
