"""
Abstract interfaces for repositories and messaging ports following
Interface Segregation Principle.

These interfaces define contracts without implementation details,
enabling dependency injection and easier testing.
"""

from abc import ABC, abstractmethod
from typing import Callable, Iterable, List, Optional, Set, Tuple

from .entities import (
    Barber,
    Category,
    Reservation,
    ReservationStatus,
    Service,
    SystemStatus,
)


class ICategoryRepository(ABC):
    """Interface for category persistence."""

    @abstractmethod
    def get_by_id(self, category_id: int) -> Optional[Category]:
        """Get category by ID."""
        pass

    @abstractmethod
    def get_by_name(self, name: str) -> Optional[Category]:
        """Get category by name, case-insensitive."""
        pass

    @abstractmethod
    def get_all(self) -> List[Category]:
        """Get all categories ordered by name."""
        pass

    @abstractmethod
    def count(self) -> int:
        """Number of stored categories."""
        pass

    @abstractmethod
    def create(self, category: Category) -> Category:
        """Create a new category."""
        pass


class IServiceReader(ABC):
    """Interface for service read operations."""

    @abstractmethod
    def get_by_id(self, service_id: int) -> Optional[Service]:
        """Get service by ID, including its barber relation set."""
        pass

    @abstractmethod
    def get_by_ids(self, service_ids: Iterable[int]) -> List[Service]:
        """Get every existing service among the given IDs; unknown IDs are ignored."""
        pass

    @abstractmethod
    def get_by_name(self, name: str) -> Optional[Service]:
        """Get a service by name, case-insensitive, whatever its system status."""
        pass

    @abstractmethod
    def exists_active_with_name(
        self, name: str, exclude_id: Optional[int] = None
    ) -> bool:
        """Whether another ACTIVE service already uses this name."""
        pass

    @abstractmethod
    def list_all(self) -> List[Service]:
        """Get all services."""
        pass

    @abstractmethod
    def list_by_system_status(self, status: SystemStatus) -> List[Service]:
        """Get services with the given system status."""
        pass


class IServiceWriter(ABC):
    """Interface for service write operations."""

    @abstractmethod
    def create(self, service: Service) -> Service:
        """Persist a new service (relation set is not written here)."""
        pass

    @abstractmethod
    def update(self, service: Service) -> Service:
        """Persist scalar fields and statuses of an existing service."""
        pass


class IServiceRepository(IServiceReader, IServiceWriter):
    """Complete service repository interface."""

    pass


class IServiceBarberRelationRepository(ABC):
    """Explicit access to the service/barber join representation."""

    @abstractmethod
    def barber_ids_for_service(self, service_id: int) -> Set[int]:
        pass

    @abstractmethod
    def service_ids_for_barber(self, barber_id: int) -> Set[int]:
        pass

    @abstractmethod
    def add(self, service_id: int, barber_id: int) -> None:
        pass

    @abstractmethod
    def remove(self, service_id: int, barber_id: int) -> None:
        pass

    @abstractmethod
    def clear_service(self, service_id: int) -> Set[int]:
        """Remove every relation of a service, returning the removed barber IDs."""
        pass


class IBarberRepository(ABC):
    """Interface for the barber mirror."""

    @abstractmethod
    def get_by_id(self, barber_id: int) -> Optional[Barber]:
        pass

    @abstractmethod
    def get_by_ids(self, barber_ids: Iterable[int]) -> List[Barber]:
        pass

    @abstractmethod
    def upsert(self, barber: Barber) -> Tuple[Barber, bool]:
        """Create or overwrite the mirror row. Returns (barber, created)."""
        pass

    @abstractmethod
    def claim(self, barber_id: int) -> bool:
        """Bump the barber row version inside the current unit. False if unknown."""
        pass


class IReservationRepository(ABC):
    """Interface for the reservation mirror."""

    @abstractmethod
    def get_by_id(self, reservation_id: int) -> Optional[Reservation]:
        pass

    @abstractmethod
    def upsert(self, reservation: Reservation) -> Tuple[Reservation, bool]:
        """Create or overwrite the mirror row. Returns (reservation, created)."""
        pass

    @abstractmethod
    def exists_for_service_with_status(
        self, service_id: int, statuses: Iterable[ReservationStatus]
    ) -> bool:
        pass

    @abstractmethod
    def list_by_service(self, service_id: int) -> List[Reservation]:
        pass


MessageHandler = Callable[[str, str, bytes], None]


class IMessageTransport(ABC):
    """Interface for the broker client used to send and receive messages."""

    @abstractmethod
    def send(self, exchange: str, routing_key: str, body: bytes) -> None:
        """Send an encoded message to a topic exchange."""
        pass

    @abstractmethod
    def subscribe(self, exchange: str, binding_key: str, handler: MessageHandler) -> None:
        """Deliver messages matching the binding key to the handler."""
        pass


class IServiceEventPublisher(ABC):
    """Interface for outbound service lifecycle events."""

    @abstractmethod
    def publish_created(self, service: Service) -> bool:
        pass

    @abstractmethod
    def publish_updated(self, service: Service) -> bool:
        pass

    @abstractmethod
    def publish_inactivated(self, service_id: int) -> bool:
        pass
