"""
Relation reconciler for the service/barber relation.

Makes a local relation set equal to an externally asserted authoritative
set through minimal add/remove operations, in two passes: every addition
first, then every removal. Each touched service gets its availability
recomputed and is persisted through the service repository, which bumps
its version so concurrent reconciliations of the same service collide.
The barber rows involved are claimed the same way, so two reconciliations
of one barber touching disjoint services collide too.
"""

import logging
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Set

from service_catalog.core.exceptions import BusinessRuleViolation, EntityNotFoundError
from service_catalog.domain.availability import apply_availability
from service_catalog.domain.entities import Service
from service_catalog.schemas.events import ServiceEventType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RelationDiff:
    to_add: FrozenSet[int]
    to_remove: FrozenSet[int]

    @property
    def is_empty(self) -> bool:
        return not self.to_add and not self.to_remove


def compute_relation_diff(current: Iterable[int], authoritative: Iterable[int]) -> RelationDiff:
    """Symmetric difference split into the add and remove passes."""
    current_set = frozenset(current)
    authoritative_set = frozenset(authoritative)
    return RelationDiff(
        to_add=authoritative_set - current_set,
        to_remove=current_set - authoritative_set,
    )


@dataclass
class ReconciliationResult:
    anchor_id: int
    added: Set[int] = field(default_factory=set)
    removed: Set[int] = field(default_factory=set)
    skipped: Set[int] = field(default_factory=set)
    changed_services: List[Service] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed)


class RelationReconciler:
    """Reconciles the relation anchored on a barber or on a service.

    All writes go through the given unit of work; nothing is committed here.
    """

    def __init__(self, uow) -> None:
        self.uow = uow

    def attach_barber(
        self, service: Service, barber_id: int, *, suppress_outbound_echo: bool
    ) -> bool:
        """Add one barber to one service. Returns False when already related."""
        if barber_id in service.barber_ids:
            return False
        self.uow.relations.add(service.id, barber_id)
        service.barber_ids.add(barber_id)
        self._persist(service, suppress_outbound_echo)
        return True

    def detach_barber(
        self, service: Service, barber_id: int, *, suppress_outbound_echo: bool
    ) -> bool:
        """Remove one barber from one service. Returns False when not related."""
        if barber_id not in service.barber_ids:
            return False
        self.uow.relations.remove(service.id, barber_id)
        service.barber_ids.discard(barber_id)
        self._persist(service, suppress_outbound_echo)
        return True

    def reconcile_barber(
        self,
        barber_id: int,
        authoritative_service_ids: Iterable[int],
        *,
        suppress_outbound_echo: bool,
    ) -> ReconciliationResult:
        """Make the barber's service set equal the authoritative set.

        IDs of services that do not exist locally or are inactive are
        skipped; an inactive service keeps an empty barber set.
        """
        authoritative = set(authoritative_service_ids)
        # Serializes concurrent reconciliations of this barber
        self.uow.barbers.claim(barber_id)
        current = self.uow.relations.service_ids_for_barber(barber_id)
        diff = compute_relation_diff(current, authoritative)
        result = ReconciliationResult(anchor_id=barber_id)

        # Addition pass
        candidates = {s.id: s for s in self.uow.services.get_by_ids(diff.to_add)}
        for service_id in sorted(diff.to_add):
            service = candidates.get(service_id)
            if service is None or not service.is_active:
                result.skipped.add(service_id)
                continue
            if self.attach_barber(
                service, barber_id, suppress_outbound_echo=suppress_outbound_echo
            ):
                result.added.add(service_id)
                result.changed_services.append(service)

        # Removal pass
        for service in self.uow.services.get_by_ids(diff.to_remove):
            if self.detach_barber(
                service, barber_id, suppress_outbound_echo=suppress_outbound_echo
            ):
                result.removed.add(service.id)
                result.changed_services.append(service)

        if result.skipped:
            logger.warning(
                "Barber relation references unknown or inactive services, skipped",
                extra={
                    "context": {
                        "barber_id": barber_id,
                        "skipped_service_ids": sorted(result.skipped),
                    }
                },
            )
        logger.info(
            "Barber relations reconciled",
            extra={
                "context": {
                    "barber_id": barber_id,
                    "added": sorted(result.added),
                    "removed": sorted(result.removed),
                    "suppress_outbound_echo": suppress_outbound_echo,
                }
            },
        )
        return result

    def reconcile_service(
        self,
        service_id: int,
        authoritative_barber_ids: Iterable[int],
        *,
        suppress_outbound_echo: bool,
    ) -> ReconciliationResult:
        """Make the service's barber set equal the authoritative set.

        Every barber must exist in the mirror and be active, and the
        service must be active.
        """
        authoritative = set(authoritative_barber_ids)
        service = self.uow.services.get_by_id(service_id)
        if service is None:
            raise EntityNotFoundError(f"Service not found with ID: {service_id}")
        if not service.is_active:
            raise BusinessRuleViolation(
                f"Barbers cannot be assigned to inactive service {service_id}"
            )

        barbers = {b.id: b for b in self.uow.barbers.get_by_ids(authoritative)}
        missing = sorted(authoritative - set(barbers))
        if missing:
            raise EntityNotFoundError(
                f"Barber(s) not found with ID: {', '.join(str(m) for m in missing)}"
            )
        inactive = sorted(b.id for b in barbers.values() if not b.active)
        if inactive:
            raise BusinessRuleViolation(
                f"Inactive barber(s) cannot be assigned: {', '.join(str(i) for i in inactive)}"
            )

        diff = compute_relation_diff(service.barber_ids, authoritative)
        result = ReconciliationResult(anchor_id=service_id)
        if diff.is_empty:
            return result

        # Ascending order keeps concurrent units from deadlocking on barber rows
        for barber_id in sorted(diff.to_add | diff.to_remove):
            self.uow.barbers.claim(barber_id)
        for barber_id in sorted(diff.to_add):
            self.uow.relations.add(service.id, barber_id)
            result.added.add(barber_id)
        for barber_id in sorted(diff.to_remove):
            self.uow.relations.remove(service.id, barber_id)
            result.removed.add(barber_id)

        service.barber_ids = set(authoritative)
        self._persist(service, suppress_outbound_echo)
        result.changed_services.append(service)
        logger.info(
            "Service barbers reconciled",
            extra={
                "context": {
                    "service_id": service_id,
                    "added": sorted(result.added),
                    "removed": sorted(result.removed),
                    "suppress_outbound_echo": suppress_outbound_echo,
                }
            },
        )
        return result

    def _persist(self, service: Service, suppress_outbound_echo: bool) -> None:
        apply_availability(service)
        saved = self.uow.services.update(service)
        service.updated_at = saved.updated_at
        self.uow.record(
            ServiceEventType.UPDATED,
            service,
            suppress_outbound_echo=suppress_outbound_echo,
        )
