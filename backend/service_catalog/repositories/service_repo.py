"""
Service repository implementation following SOLID principles.

Converts between the ORM rows and the Service domain entity. The barber
relation set is loaded from the join table but never written here; relation
writes belong to ServiceBarberRelationRepository. Methods only flush, the
unit of work owns the commit.
"""

from collections import defaultdict
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Set

from sqlalchemy import func, select

from service_catalog.core.exceptions import EntityNotFoundError
from service_catalog.db.base import Service as DbService
from service_catalog.db.base import ServiceBarber
from service_catalog.domain.entities import AvailabilityStatus
from service_catalog.domain.entities import Service as DomainService
from service_catalog.domain.entities import SystemStatus
from service_catalog.domain.interfaces import IServiceRepository


class ServiceRepository(IServiceRepository):
    """Repository for Service persistence operations."""

    def __init__(self, db_session) -> None:
        self.db = db_session

    def get_by_id(self, service_id: int) -> Optional[DomainService]:
        db_service = self.db.get(DbService, service_id)
        return self._to_domain(db_service) if db_service else None

    def get_by_ids(self, service_ids: Iterable[int]) -> List[DomainService]:
        ids = set(service_ids)
        if not ids:
            return []
        rows = (
            self.db.execute(
                select(DbService).where(DbService.id.in_(ids)).order_by(DbService.id)
            )
            .scalars()
            .all()
        )
        return self._to_domain_many(rows)

    def get_by_name(self, name: str) -> Optional[DomainService]:
        # Prefer the active record when an inactive one shares the name
        rows = (
            self.db.execute(
                select(DbService)
                .where(func.lower(DbService.name) == name.strip().lower())
                .order_by(DbService.id)
            )
            .scalars()
            .all()
        )
        if not rows:
            return None
        active = [r for r in rows if r.system_status == SystemStatus.ACTIVE.value]
        return self._to_domain((active or rows)[0])

    def exists_active_with_name(
        self, name: str, exclude_id: Optional[int] = None
    ) -> bool:
        query = select(DbService.id).where(
            func.lower(DbService.name) == name.strip().lower(),
            DbService.system_status == SystemStatus.ACTIVE.value,
        )
        if exclude_id is not None:
            query = query.where(DbService.id != exclude_id)
        return self.db.execute(query.limit(1)).first() is not None

    def list_all(self) -> List[DomainService]:
        rows = self.db.execute(select(DbService).order_by(DbService.id)).scalars().all()
        return self._to_domain_many(rows)

    def list_by_system_status(self, status: SystemStatus) -> List[DomainService]:
        rows = (
            self.db.execute(
                select(DbService)
                .where(DbService.system_status == status.value)
                .order_by(DbService.id)
            )
            .scalars()
            .all()
        )
        return self._to_domain_many(rows)

    def create(self, service: DomainService) -> DomainService:
        db_service = DbService(
            name=service.name,
            description=service.description,
            price=service.price,
            duration=service.duration,
            category_id=service.category_id,
            availability_status=service.availability_status.value,
            system_status=service.system_status.value,
        )
        self.db.add(db_service)
        self.db.flush()
        return self._to_domain(db_service)

    def update(self, service: DomainService) -> DomainService:
        if not service.id:
            raise ValueError("Service ID is required for update")

        db_service = self.db.get(DbService, service.id)
        if not db_service:
            raise EntityNotFoundError(f"Service not found with ID: {service.id}")

        db_service.name = service.name
        db_service.description = service.description
        db_service.price = service.price
        db_service.duration = service.duration
        db_service.category_id = service.category_id
        db_service.availability_status = service.availability_status.value
        db_service.system_status = service.system_status.value
        # Always emit an UPDATE so the version counter guards relation-only changes
        db_service.updated_at = datetime.now(timezone.utc)
        self.db.flush()
        return self._to_domain(db_service)

    def _barber_ids_by_service(self, service_ids: Set[int]) -> Dict[int, Set[int]]:
        relations: Dict[int, Set[int]] = defaultdict(set)
        if not service_ids:
            return relations
        rows = self.db.execute(
            select(ServiceBarber.service_id, ServiceBarber.barber_id).where(
                ServiceBarber.service_id.in_(service_ids)
            )
        ).all()
        for service_id, barber_id in rows:
            relations[service_id].add(barber_id)
        return relations

    def _to_domain_many(self, rows) -> List[DomainService]:
        # One relation query for the whole batch instead of one per service
        relations = self._barber_ids_by_service({r.id for r in rows})
        return [self._to_domain(r, relations.get(r.id, set())) for r in rows]

    def _to_domain(
        self, db_service: DbService, barber_ids: Optional[Set[int]] = None
    ) -> DomainService:
        if barber_ids is None:
            barber_ids = self._barber_ids_by_service({db_service.id}).get(
                db_service.id, set()
            )
        return DomainService(
            id=db_service.id,
            name=db_service.name,
            description=db_service.description or "",
            price=db_service.price,
            duration=db_service.duration,
            category_id=db_service.category_id,
            barber_ids=set(barber_ids),
            availability_status=AvailabilityStatus(db_service.availability_status),
            system_status=SystemStatus(db_service.system_status),
            created_at=db_service.created_at,
            updated_at=db_service.updated_at,
        )
