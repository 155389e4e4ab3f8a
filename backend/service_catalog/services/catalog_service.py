import logging
from typing import Callable, List, Optional, Set

from service_catalog.core.exceptions import (
    BusinessRuleViolation,
    EntityAlreadyExistsError,
    EntityNotFoundError,
)
from service_catalog.db.unit_of_work import UnitOfWork, run_in_unit_of_work
from service_catalog.domain.availability import (
    apply_availability,
    ensure_availability_allowed,
)
from service_catalog.domain.entities import (
    BLOCKING_RESERVATION_STATUSES,
    AvailabilityStatus,
    Service,
    SystemStatus,
)
from service_catalog.schemas.dtos import (
    AssignBarbersRequest,
    ServiceCreateRequest,
    ServiceUpdateRequest,
)
from service_catalog.schemas.events import ServiceEventType
from service_catalog.services.relation_reconciler import RelationReconciler

logger = logging.getLogger(__name__)


def _persisted_fields(service: Service) -> tuple:
    """Fields an administrative update can change."""
    return (
        service.name,
        service.description,
        service.price,
        service.duration,
        service.category_id,
        service.availability_status,
    )


class ServiceCatalogService:
    """Application service for the administrative service use-cases.

    Each command runs in its own unit of work; outbound events are recorded
    on the unit and only published once it has committed.
    """

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        max_attempts: Optional[int] = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._max_attempts = max_attempts

    def _run(self, work):
        return run_in_unit_of_work(self._uow_factory, work, self._max_attempts).value

    def create_service(self, request: ServiceCreateRequest) -> Service:
        """Create a service, recycling an inactive one with the same name.

        Business Rules:
        - Name unique among ACTIVE services (case-insensitive)
        - An INACTIVE service with the same name keeps its identity and is reactivated
        - Category must exist
        - A new service starts ACTIVE and UNAVAILABLE with no barbers
        """
        request.validate()
        name = request.name.strip()

        def work(uow: UnitOfWork) -> Service:
            self._require_category(uow, request.category_id)
            existing = uow.services.get_by_name(name)
            if existing is not None and existing.is_active:
                raise EntityAlreadyExistsError(f"A service named '{name}' already exists")

            if existing is not None:
                uow.relations.clear_service(existing.id)
                existing.name = name
                existing.description = request.description.strip()
                existing.price = request.price
                existing.duration = request.duration
                existing.category_id = request.category_id
                existing.barber_ids = set()
                existing.system_status = SystemStatus.ACTIVE
                existing.availability_status = AvailabilityStatus.UNAVAILABLE
                saved = uow.services.update(existing)
                logger.info(
                    "Inactive service recycled",
                    extra={"context": {"service_id": saved.id, "name": name}},
                )
            else:
                saved = uow.services.create(
                    Service(
                        name=name,
                        description=request.description.strip(),
                        price=request.price,
                        duration=request.duration,
                        category_id=request.category_id,
                        availability_status=AvailabilityStatus.UNAVAILABLE,
                        system_status=SystemStatus.ACTIVE,
                    )
                )
                logger.info(
                    "Service created",
                    extra={"context": {"service_id": saved.id, "name": name}},
                )
            uow.record(ServiceEventType.CREATED, saved)
            return saved

        return self._run(work)

    def update_service(self, service_id: int, request: ServiceUpdateRequest) -> Service:
        """Update the editable fields of an active service.

        The requested availability is checked against the barber set;
        the stored value is always the derived one.
        """
        request.validate()
        requested = request.requested_availability()
        name = request.name.strip()

        def work(uow: UnitOfWork) -> Service:
            service = self._require_service(uow, service_id)
            if not service.is_active:
                raise BusinessRuleViolation(f"Inactive service {service_id} cannot be updated")
            if uow.services.exists_active_with_name(name, exclude_id=service_id):
                raise EntityAlreadyExistsError(f"A service named '{name}' already exists")
            self._require_category(uow, request.category_id)
            ensure_availability_allowed(requested, service.barber_ids)

            before = _persisted_fields(service)
            service.name = name
            service.description = request.description.strip()
            service.price = request.price
            service.duration = request.duration
            service.category_id = request.category_id
            apply_availability(service)
            if service.availability_status != requested:
                logger.warning(
                    "Requested availability overridden by barber assignment",
                    extra={
                        "context": {
                            "service_id": service_id,
                            "requested": requested.value,
                            "stored": service.availability_status.value,
                        }
                    },
                )
            if _persisted_fields(service) == before:
                logger.info(
                    "Service update changed nothing, no event published",
                    extra={"context": {"service_id": service_id}},
                )
                return service
            saved = uow.services.update(service)
            uow.record(ServiceEventType.UPDATED, saved)
            return saved

        return self._run(work)

    def assign_barbers(self, service_id: int, request: AssignBarbersRequest) -> Service:
        """Replace the barber set of a service with the given complete list.

        An empty list unassigns every barber and leaves the service Unavailable.
        """
        request.validate()

        def work(uow: UnitOfWork) -> Service:
            result = RelationReconciler(uow).reconcile_service(
                service_id, request.barber_ids, suppress_outbound_echo=False
            )
            if result.changed_services:
                return result.changed_services[0]
            return self._require_service(uow, service_id)

        return self._run(work)

    def inactivate_service(self, service_id: int) -> Service:
        """Soft delete: ACTIVE -> INACTIVE, refused while blocking reservations exist."""

        def work(uow: UnitOfWork) -> Service:
            service = self._require_service(uow, service_id)
            if not service.is_active:
                raise BusinessRuleViolation(f"Service {service_id} is already inactive")
            if uow.reservations.exists_for_service_with_status(
                service_id, BLOCKING_RESERVATION_STATUSES
            ):
                raise BusinessRuleViolation(
                    "The service cannot be deactivated because it has pending or "
                    "in-progress reservations."
                )

            removed = uow.relations.clear_service(service_id)
            service.barber_ids = set()
            service.system_status = SystemStatus.INACTIVE
            service.availability_status = AvailabilityStatus.UNAVAILABLE
            saved = uow.services.update(service)
            uow.record(ServiceEventType.INACTIVATED, service_id=service_id)
            logger.info(
                "Service inactivated",
                extra={
                    "context": {
                        "service_id": service_id,
                        "removed_barber_ids": sorted(removed),
                    }
                },
            )
            return saved

        return self._run(work)

    def list_services(self, include_inactive: bool = False) -> List[Service]:
        with self._uow_factory() as uow:
            if include_inactive:
                return uow.services.list_all()
            return uow.services.list_by_system_status(SystemStatus.ACTIVE)

    def get_service(self, service_id: int) -> Service:
        with self._uow_factory() as uow:
            return self._require_service(uow, service_id)

    def get_barber_ids(self, service_id: int) -> Set[int]:
        with self._uow_factory() as uow:
            self._require_service(uow, service_id)
            return uow.relations.barber_ids_for_service(service_id)

    @staticmethod
    def _require_service(uow: UnitOfWork, service_id: int) -> Service:
        service = uow.services.get_by_id(service_id)
        if service is None:
            raise EntityNotFoundError(f"Service not found with ID: {service_id}")
        return service

    @staticmethod
    def _require_category(uow: UnitOfWork, category_id: int) -> None:
        if uow.categories.get_by_id(category_id) is None:
            raise EntityNotFoundError(f"Category not found with ID: {category_id}")
