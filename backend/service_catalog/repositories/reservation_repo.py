"""Reservation mirror repository.

The mirror exists so inactivation can check for blocking reservations
without calling the reservations system synchronously.
"""

from typing import Iterable, List, Optional, Tuple

from sqlalchemy import select

from service_catalog.db.base import Reservation as DbReservation
from service_catalog.domain.entities import Reservation as DomainReservation
from service_catalog.domain.entities import ReservationStatus
from service_catalog.domain.interfaces import IReservationRepository


class ReservationRepository(IReservationRepository):
    """Repository for the local reservation replica."""

    def __init__(self, db_session) -> None:
        self.db = db_session

    def get_by_id(self, reservation_id: int) -> Optional[DomainReservation]:
        db_reservation = self.db.get(DbReservation, reservation_id)
        return self._to_domain(db_reservation) if db_reservation else None

    def upsert(self, reservation: DomainReservation) -> Tuple[DomainReservation, bool]:
        """Full overwrite by identity - this is a mirror, not an append log."""
        db_reservation = self.db.get(DbReservation, reservation.id)
        created = db_reservation is None
        if created:
            db_reservation = DbReservation(id=reservation.id)
            self.db.add(db_reservation)
        db_reservation.service_id = reservation.service_id
        db_reservation.barber_id = reservation.barber_id
        db_reservation.start = reservation.start
        db_reservation.status = reservation.status.value
        # The stored version only moves forward; unversioned events keep it
        if reservation.source_version is not None:
            db_reservation.source_version = max(
                reservation.source_version, db_reservation.source_version or 0
            )
        self.db.flush()
        return self._to_domain(db_reservation), created

    def exists_for_service_with_status(
        self, service_id: int, statuses: Iterable[ReservationStatus]
    ) -> bool:
        values = [s.value for s in statuses]
        if not values:
            return False
        query = (
            select(DbReservation.id)
            .where(
                DbReservation.service_id == service_id,
                DbReservation.status.in_(values),
            )
            .limit(1)
        )
        return self.db.execute(query).first() is not None

    def list_by_service(self, service_id: int) -> List[DomainReservation]:
        rows = (
            self.db.execute(
                select(DbReservation)
                .where(DbReservation.service_id == service_id)
                .order_by(DbReservation.start, DbReservation.id)
            )
            .scalars()
            .all()
        )
        return [self._to_domain(r) for r in rows]

    def _to_domain(self, db_reservation: DbReservation) -> DomainReservation:
        return DomainReservation(
            id=db_reservation.id,
            service_id=db_reservation.service_id,
            barber_id=db_reservation.barber_id,
            start=db_reservation.start,
            status=ReservationStatus(db_reservation.status),
            source_version=db_reservation.source_version,
            updated_at=db_reservation.updated_at,
        )
