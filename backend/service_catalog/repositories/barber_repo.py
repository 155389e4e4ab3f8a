"""Barber mirror repository.

Only the inbound barber event handler writes through ``upsert``; the
identity always comes from the barbers system.
"""

from datetime import datetime, timezone
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import select

from service_catalog.db.base import Barber as DbBarber
from service_catalog.domain.entities import Barber as DomainBarber
from service_catalog.domain.interfaces import IBarberRepository


class BarberRepository(IBarberRepository):
    """Repository for the local barber replica."""

    def __init__(self, db_session) -> None:
        self.db = db_session

    def get_by_id(self, barber_id: int) -> Optional[DomainBarber]:
        db_barber = self.db.get(DbBarber, barber_id)
        return self._to_domain(db_barber) if db_barber else None

    def get_by_ids(self, barber_ids: Iterable[int]) -> List[DomainBarber]:
        ids = set(barber_ids)
        if not ids:
            return []
        rows = (
            self.db.execute(
                select(DbBarber).where(DbBarber.id.in_(ids)).order_by(DbBarber.id)
            )
            .scalars()
            .all()
        )
        return [self._to_domain(r) for r in rows]

    def upsert(self, barber: DomainBarber) -> Tuple[DomainBarber, bool]:
        """Create the mirror row or overwrite name/active wholesale."""
        db_barber = self.db.get(DbBarber, barber.id)
        created = db_barber is None
        if created:
            db_barber = DbBarber(id=barber.id)
            self.db.add(db_barber)
        db_barber.name = barber.name
        db_barber.active = bool(barber.active)
        self.db.flush()
        return self._to_domain(db_barber), created

    def claim(self, barber_id: int) -> bool:
        """Rewrite the barber row so its version check guards the caller's unit.

        Called before the barber's relations are read: a concurrent unit that
        claimed the same barber first makes this flush (or the other unit's)
        fail with StaleDataError, and the loser is retried from scratch.
        """
        db_barber = self.db.get(DbBarber, barber_id)
        if db_barber is None:
            return False
        db_barber.updated_at = datetime.now(timezone.utc)
        self.db.flush()
        return True

    def _to_domain(self, db_barber: DbBarber) -> DomainBarber:
        return DomainBarber(
            id=db_barber.id,
            name=db_barber.name,
            active=bool(db_barber.active),
            created_at=db_barber.created_at,
            updated_at=db_barber.updated_at,
        )
