"""
Domain package - Pure business logic layer.

This package contains:
- entities.py: Domain entities and status enums
- status_labels.py: Enum <-> wire label mapping
- availability.py: Availability derivation rules
- interfaces.py: Repository and messaging contracts
"""

from .availability import (
    apply_availability,
    derive_availability,
    ensure_availability_allowed,
)
from .entities import (
    BLOCKING_RESERVATION_STATUSES,
    AvailabilityStatus,
    Barber,
    Category,
    Reservation,
    ReservationStatus,
    Service,
    SystemStatus,
)
from .interfaces import (
    IBarberRepository,
    ICategoryRepository,
    IMessageTransport,
    IReservationRepository,
    IServiceBarberRelationRepository,
    IServiceEventPublisher,
    IServiceReader,
    IServiceRepository,
    IServiceWriter,
)

__all__ = [
    # Domain entities
    "Service",
    "Category",
    "Barber",
    "Reservation",
    "AvailabilityStatus",
    "SystemStatus",
    "ReservationStatus",
    "BLOCKING_RESERVATION_STATUSES",
    # Rules
    "derive_availability",
    "apply_availability",
    "ensure_availability_allowed",
    # Repository interfaces
    "IServiceRepository",
    "IServiceReader",
    "IServiceWriter",
    "ICategoryRepository",
    "IBarberRepository",
    "IReservationRepository",
    "IServiceBarberRelationRepository",
    # Messaging ports
    "IMessageTransport",
    "IServiceEventPublisher",
]
