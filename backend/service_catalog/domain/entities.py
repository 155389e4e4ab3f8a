"""
Domain entities - Pure business logic, no framework dependencies.

Service and Category are owned by this bounded context. Barber and
Reservation are local mirrors of entities owned by other systems and are
only ever written by the inbound event handlers.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import FrozenSet, Optional, Set


class AvailabilityStatus(Enum):
    """Whether customers can book the service right now."""

    AVAILABLE = "AVAILABLE"
    UNAVAILABLE = "UNAVAILABLE"


class SystemStatus(Enum):
    """Lifecycle of the service record (soft delete)."""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class ReservationStatus(Enum):
    """Replica of the reservation lifecycle owned by the reservations system."""

    PENDING = "PENDING"  # confirmed, waiting for the appointment
    NO_SHOW = "NO_SHOW"
    IN_PROGRESS = "IN_PROGRESS"
    FINISHED = "FINISHED"
    CANCELLED = "CANCELLED"


BLOCKING_RESERVATION_STATUSES: FrozenSet[ReservationStatus] = frozenset(
    {ReservationStatus.PENDING, ReservationStatus.IN_PROGRESS}
)


@dataclass
class Category:
    """Domain entity for a service category (e.g. haircuts, beard care)."""

    id: Optional[int] = None
    name: str = ""

    def __post_init__(self):
        self.name = (self.name or "").strip()
        if not self.name:
            raise ValueError("Category name is required")


@dataclass
class Service:
    """Aggregate root of the catalog.

    ``barber_ids`` is the current relation set. It is read from the join
    table and is never mutated in place to change persistence; relation
    changes go through the reconciler.
    """

    id: Optional[int] = None
    name: str = ""
    description: str = ""
    price: Decimal = Decimal("0")
    duration: int = 0
    category_id: Optional[int] = None
    barber_ids: Set[int] = field(default_factory=set)
    availability_status: AvailabilityStatus = AvailabilityStatus.UNAVAILABLE
    system_status: SystemStatus = SystemStatus.ACTIVE
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        """Validate business rules."""
        if not self.name or not self.name.strip():
            raise ValueError("Service name is required")
        if not isinstance(self.price, Decimal):
            # Exact decimal only; str() keeps values like 0.1 exact
            self.price = Decimal(str(self.price))
        if self.price < 0:
            raise ValueError("Price cannot be negative")
        if self.duration < 0:
            raise ValueError("Duration cannot be negative")
        self.barber_ids = set(self.barber_ids or ())

    @property
    def is_active(self) -> bool:
        return self.system_status == SystemStatus.ACTIVE

    @property
    def is_available(self) -> bool:
        return self.availability_status == AvailabilityStatus.AVAILABLE


@dataclass
class Barber:
    """Mirror of a barber owned by the barbers system.

    The identity is assigned remotely; it is never generated here.
    """

    id: int = 0
    name: str = ""
    active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if self.id is None or self.id <= 0:
            raise ValueError("Barber id assigned by the barbers system is required")


@dataclass
class Reservation:
    """Read-only mirror of a reservation owned by the reservations system."""

    id: int = 0
    service_id: int = 0
    status: ReservationStatus = ReservationStatus.PENDING
    start: Optional[datetime] = None
    barber_id: Optional[int] = None
    source_version: Optional[int] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if self.id is None or self.id <= 0:
            raise ValueError("Reservation id assigned by the reservations system is required")
        if self.service_id is None or self.service_id <= 0:
            raise ValueError("Reservation must reference a service")

    @property
    def is_blocking(self) -> bool:
        return self.status in BLOCKING_RESERVATION_STATUSES
