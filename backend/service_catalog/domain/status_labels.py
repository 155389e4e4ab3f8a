"""
Single bidirectional mapping between status enums and their wire/display labels.

Outbound payloads, API responses and inbound parsing all go through this
table so a label is defined exactly once per enum member.
"""

from enum import Enum
from typing import Dict, Type, TypeVar

from service_catalog.core.exceptions import UnknownStatusLabel
from service_catalog.domain.entities import (
    AvailabilityStatus,
    ReservationStatus,
    SystemStatus,
)

E = TypeVar("E", bound=Enum)

STATUS_LABELS: Dict[Type[Enum], Dict[Enum, str]] = {
    AvailabilityStatus: {
        AvailabilityStatus.AVAILABLE: "Available",
        AvailabilityStatus.UNAVAILABLE: "Unavailable",
    },
    SystemStatus: {
        SystemStatus.ACTIVE: "Active",
        SystemStatus.INACTIVE: "Inactive",
    },
    ReservationStatus: {
        ReservationStatus.PENDING: "PENDING",
        ReservationStatus.NO_SHOW: "NO_SHOW",
        ReservationStatus.IN_PROGRESS: "IN_PROGRESS",
        ReservationStatus.FINISHED: "FINISHED",
        ReservationStatus.CANCELLED: "CANCELLED",
    },
}

_REVERSE: Dict[Type[Enum], Dict[str, Enum]] = {
    enum_type: {label: member for member, label in labels.items()}
    for enum_type, labels in STATUS_LABELS.items()
}


def to_label(member: Enum) -> str:
    """Return the wire label for an enum member."""
    return STATUS_LABELS[type(member)][member]


def from_label(enum_type: Type[E], label) -> E:
    """Parse a wire label into its enum member.

    Exact match first, then case-insensitive. Raises UnknownStatusLabel for
    anything outside the closed enumeration.
    """
    if not isinstance(label, str):
        raise UnknownStatusLabel(enum_type, label)
    reverse = _REVERSE[enum_type]
    candidate = label.strip()
    if candidate in reverse:
        return reverse[candidate]  # type: ignore[return-value]
    folded = candidate.casefold()
    for known, member in reverse.items():
        if known.casefold() == folded:
            return member  # type: ignore[return-value]
    raise UnknownStatusLabel(enum_type, label)


def labels_for(enum_type: Type[Enum]) -> list[str]:
    return list(STATUS_LABELS[enum_type].values())
