"""
Schemas package - Data Transfer Objects and event contracts.
"""

from .dtos import (
    AssignBarbersRequest,
    CategoryCreateRequest,
    CategoryResponse,
    ServiceCreateRequest,
    ServiceResponse,
    ServiceUpdateRequest,
)
from .events import (
    BarberEvent,
    ReservationEvent,
    ServiceEventPayload,
    ServiceEventType,
)

__all__ = [
    # Admin API DTOs
    "ServiceCreateRequest",
    "ServiceUpdateRequest",
    "AssignBarbersRequest",
    "CategoryCreateRequest",
    "ServiceResponse",
    "CategoryResponse",
    # Event contracts
    "BarberEvent",
    "ReservationEvent",
    "ServiceEventPayload",
    "ServiceEventType",
]
