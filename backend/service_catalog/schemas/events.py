"""
Event contracts exchanged with the barbers and reservations systems.

Inbound events are parsed from decoded JSON dictionaries with
``from_dict``; the outbound payload is built from the Service aggregate.
Field names on the wire are camelCase, Python attributes are snake_case.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from service_catalog.core.exceptions import MalformedEventError
from service_catalog.domain.entities import (
    AvailabilityStatus,
    Service,
    SystemStatus,
)
from service_catalog.domain.status_labels import to_label


def _parse_id(data: Dict[str, Any], key: str, required: bool = True) -> Optional[int]:
    value = data.get(key)
    if value is None:
        if required:
            raise MalformedEventError(f"Missing required field '{key}'")
        return None
    # bool is an int subclass, never a valid identity
    if isinstance(value, bool):
        raise MalformedEventError(f"Field '{key}' must be an integer")
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, str) and value.strip().isdigit():
        parsed = int(value.strip())
    else:
        raise MalformedEventError(f"Field '{key}' must be an integer")
    if parsed <= 0:
        raise MalformedEventError(f"Field '{key}' must be positive")
    return parsed


def _parse_id_list(data: Dict[str, Any], *keys: str) -> Optional[List[int]]:
    """Return the first present relation list, or None when absent."""
    for key in keys:
        if key in data and data[key] is not None:
            raw = data[key]
            if not isinstance(raw, (list, tuple)):
                raise MalformedEventError(f"Field '{key}' must be a list of ids")
            return [_parse_id({key: item}, key) for item in raw]
    return None


def _parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip())
        except ValueError as exc:
            raise MalformedEventError(f"Invalid timestamp: {value!r}") from exc
    # Java LocalDateTime default serialisation: [year, month, day, hour, minute, (second)]
    if isinstance(value, (list, tuple)) and 3 <= len(value) <= 7:
        try:
            return datetime(*[int(v) for v in value[:6]])
        except (TypeError, ValueError) as exc:
            raise MalformedEventError(f"Invalid timestamp: {value!r}") from exc
    raise MalformedEventError(f"Invalid timestamp: {value!r}")


@dataclass
class BarberEvent:
    """Barber state asserted by the barbers system.

    ``related_service_ids`` is None when the payload carried no relation
    field at all, and an empty list when it explicitly carried ``[]``.
    """

    id: int
    name: str
    active: bool = True
    related_service_ids: Optional[List[int]] = None

    @property
    def has_relation_payload(self) -> bool:
        return self.related_service_ids is not None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BarberEvent":
        if not isinstance(data, dict):
            raise MalformedEventError("Barber event must be a JSON object")
        name = data.get("name")
        if name is None:
            name = ""
        if not isinstance(name, str):
            raise MalformedEventError("Field 'name' must be a string")
        active = data.get("active", True)
        if not isinstance(active, bool):
            raise MalformedEventError("Field 'active' must be a boolean")
        return cls(
            id=_parse_id(data, "id"),
            name=name.strip(),
            active=active,
            # serviceIds is the field name used by older barber publishers
            related_service_ids=_parse_id_list(data, "relatedServiceIds", "serviceIds"),
        )


@dataclass
class ReservationEvent:
    """Reservation state asserted by the reservations system.

    The status stays a raw label here; mapping it onto the closed
    enumeration is a handling decision, not a parsing one.
    """

    id: int
    service_id: int
    status: Any
    start: Optional[datetime] = None
    barber_id: Optional[int] = None
    version: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReservationEvent":
        if not isinstance(data, dict):
            raise MalformedEventError("Reservation event must be a JSON object")
        version = data.get("version")
        if version is not None and (isinstance(version, bool) or not isinstance(version, int)):
            raise MalformedEventError("Field 'version' must be an integer")
        return cls(
            id=_parse_id(data, "id"),
            service_id=_parse_id(data, "serviceId"),
            status=data.get("status"),
            start=_parse_datetime(data.get("start")),
            barber_id=_parse_id(data, "barberId", required=False),
            version=version,
        )


class ServiceEventType(Enum):
    """Lifecycle points at which a service event is published."""

    CREATED = "created"
    UPDATED = "updated"
    INACTIVATED = "inactivated"

    @property
    def routing_key(self) -> str:
        return f"service.{self.value}"


@dataclass
class ServiceEventPayload:
    """Outbound service event body; ``price`` is sent as a JSON number."""

    id: int
    availability_status: str
    system_status: str
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    duration: Optional[int] = None
    related_barber_ids: List[int] = field(default_factory=list)
    minimal: bool = False

    @classmethod
    def full(cls, service: Service) -> "ServiceEventPayload":
        return cls(
            id=service.id,
            name=service.name,
            description=service.description,
            price=float(service.price),
            duration=service.duration,
            related_barber_ids=sorted(service.barber_ids),
            availability_status=to_label(service.availability_status),
            system_status=to_label(service.system_status),
        )

    @classmethod
    def inactivated(cls, service_id: int) -> "ServiceEventPayload":
        return cls(
            id=service_id,
            availability_status=to_label(AvailabilityStatus.UNAVAILABLE),
            system_status=to_label(SystemStatus.INACTIVE),
            minimal=True,
        )

    def to_dict(self) -> Dict[str, Any]:
        if self.minimal:
            return {
                "id": self.id,
                "systemStatus": self.system_status,
                "availabilityStatus": self.availability_status,
            }
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price": self.price,
            "duration": self.duration,
            "relatedBarberIds": list(self.related_barber_ids),
            "availabilityStatus": self.availability_status,
            "systemStatus": self.system_status,
        }
