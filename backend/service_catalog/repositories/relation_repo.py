"""
Repository for the explicit service/barber join table.

Each call is one row-level change flushed immediately so later queries in
the same unit of work see it.
"""

from typing import Set

from sqlalchemy import delete, select

from service_catalog.db.base import ServiceBarber
from service_catalog.domain.interfaces import IServiceBarberRelationRepository


class ServiceBarberRelationRepository(IServiceBarberRelationRepository):
    def __init__(self, db_session) -> None:
        self.db = db_session

    def barber_ids_for_service(self, service_id: int) -> Set[int]:
        rows = self.db.execute(
            select(ServiceBarber.barber_id).where(ServiceBarber.service_id == service_id)
        ).scalars()
        return set(rows)

    def service_ids_for_barber(self, barber_id: int) -> Set[int]:
        rows = self.db.execute(
            select(ServiceBarber.service_id).where(ServiceBarber.barber_id == barber_id)
        ).scalars()
        return set(rows)

    def add(self, service_id: int, barber_id: int) -> None:
        if self.db.get(ServiceBarber, (service_id, barber_id)) is not None:
            return
        self.db.add(ServiceBarber(service_id=service_id, barber_id=barber_id))
        self.db.flush()

    def remove(self, service_id: int, barber_id: int) -> None:
        self.db.execute(
            delete(ServiceBarber).where(
                ServiceBarber.service_id == service_id,
                ServiceBarber.barber_id == barber_id,
            )
        )
        self.db.flush()

    def clear_service(self, service_id: int) -> Set[int]:
        removed = self.barber_ids_for_service(service_id)
        if removed:
            self.db.execute(
                delete(ServiceBarber).where(ServiceBarber.service_id == service_id)
            )
            self.db.flush()
        return removed
