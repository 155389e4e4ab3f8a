"""SQLAlchemy repository implementations of the domain interfaces."""

from .barber_repo import BarberRepository
from .category_repo import CategoryRepository
from .relation_repo import ServiceBarberRelationRepository
from .reservation_repo import ReservationRepository
from .service_repo import ServiceRepository

__all__ = [
    "BarberRepository",
    "CategoryRepository",
    "ReservationRepository",
    "ServiceBarberRelationRepository",
    "ServiceRepository",
]
