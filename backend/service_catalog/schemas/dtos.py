"""
Data Transfer Objects (DTOs) and validation schemas for the administrative API.

Following SOLID principles:
- Single Responsibility: Each schema validates one specific data contract
- Open/Closed: Schemas can be extended without modification
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from service_catalog.core.exceptions import RequestValidationError, UnknownStatusLabel
from service_catalog.domain.entities import AvailabilityStatus, Category, Service
from service_catalog.domain.status_labels import from_label, labels_for, to_label

NAME_MIN_LENGTH = 3
NAME_MAX_LENGTH = 50
DESCRIPTION_MIN_LENGTH = 10
DESCRIPTION_MAX_LENGTH = 200
PRICE_MIN = Decimal("1000")
PRICE_MAX = Decimal("500000")
DURATION_MIN = 10
DURATION_MAX = 240
DURATION_STEP = 10


def _to_decimal(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None


def _to_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    return None


def _validate_name(name: Optional[str], label: str = "Name") -> None:
    if not name or not name.strip():
        raise RequestValidationError(f"{label} is required")
    stripped = name.strip()
    if not NAME_MIN_LENGTH <= len(stripped) <= NAME_MAX_LENGTH:
        raise RequestValidationError(
            f"{label} must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters"
        )
    if not all(ch.isalnum() or ch.isspace() for ch in stripped):
        raise RequestValidationError(
            f"{label} can only contain letters, numbers and spaces"
        )


def _validate_service_fields(
    name: Optional[str],
    description: Optional[str],
    price: Optional[Decimal],
    duration: Optional[int],
    category_id: Optional[int],
) -> None:
    _validate_name(name)
    if not description or not description.strip():
        raise RequestValidationError("Description is required")
    if not DESCRIPTION_MIN_LENGTH <= len(description.strip()) <= DESCRIPTION_MAX_LENGTH:
        raise RequestValidationError(
            f"Description must be between {DESCRIPTION_MIN_LENGTH} and "
            f"{DESCRIPTION_MAX_LENGTH} characters"
        )
    if price is None or not price.is_finite():
        raise RequestValidationError("Price is required")
    if price < PRICE_MIN:
        raise RequestValidationError(f"Minimum price is {PRICE_MIN}")
    if price > PRICE_MAX:
        raise RequestValidationError(f"Maximum price is {PRICE_MAX}")
    if duration is None:
        raise RequestValidationError("Duration is required")
    if not DURATION_MIN <= duration <= DURATION_MAX:
        raise RequestValidationError(
            f"Duration must be between {DURATION_MIN} and {DURATION_MAX} minutes"
        )
    if duration % DURATION_STEP != 0:
        raise RequestValidationError(
            f"Duration must be a multiple of {DURATION_STEP} (e.g. 10, 20, 30...)"
        )
    if category_id is None or category_id <= 0:
        raise RequestValidationError("Category is required")


@dataclass
class ServiceCreateRequest:
    """DTO for service creation requests."""

    name: Optional[str]
    description: Optional[str]
    price: Optional[Decimal]
    duration: Optional[int]
    category_id: Optional[int]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ServiceCreateRequest":
        return cls(
            name=data.get("name"),
            description=data.get("description"),
            price=_to_decimal(data.get("price")),
            duration=_to_int(data.get("duration")),
            category_id=_to_int(data.get("categoryId")),
        )

    def validate(self) -> None:
        """Validate the request data."""
        _validate_service_fields(
            self.name, self.description, self.price, self.duration, self.category_id
        )


@dataclass
class ServiceUpdateRequest:
    """DTO for service update requests.

    Unlike creation, the administrator may request an availability status;
    the business rule check happens in the service layer.
    """

    name: Optional[str]
    description: Optional[str]
    price: Optional[Decimal]
    duration: Optional[int]
    category_id: Optional[int]
    availability_status: Optional[str]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ServiceUpdateRequest":
        return cls(
            name=data.get("name"),
            description=data.get("description"),
            price=_to_decimal(data.get("price")),
            duration=_to_int(data.get("duration")),
            category_id=_to_int(data.get("categoryId")),
            availability_status=data.get("availabilityStatus"),
        )

    def validate(self) -> None:
        """Validate the request data."""
        _validate_service_fields(
            self.name, self.description, self.price, self.duration, self.category_id
        )
        if not self.availability_status:
            raise RequestValidationError("Availability status is required")
        self.requested_availability()

    def requested_availability(self) -> AvailabilityStatus:
        try:
            return from_label(AvailabilityStatus, self.availability_status)
        except UnknownStatusLabel as exc:
            allowed = " or ".join(f"'{label}'" for label in labels_for(AvailabilityStatus))
            raise RequestValidationError(
                f"Availability status must be {allowed}"
            ) from exc


@dataclass
class AssignBarbersRequest:
    """DTO carrying the complete, final barber set of a service.

    An empty list is a valid request that unassigns every barber.
    """

    barber_ids: Optional[List[int]] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AssignBarbersRequest":
        raw = data.get("barberIds")
        if raw is None:
            return cls(barber_ids=None)
        if not isinstance(raw, list):
            raise RequestValidationError("Barber list must be a list of ids")
        parsed = [_to_int(item) for item in raw]
        if any(p is None or p <= 0 for p in parsed):
            raise RequestValidationError("Barber ids must be positive integers")
        return cls(barber_ids=parsed)

    def validate(self) -> None:
        if self.barber_ids is None:
            raise RequestValidationError("Barber list cannot be null")


@dataclass
class CategoryCreateRequest:
    """DTO for category creation requests."""

    name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CategoryCreateRequest":
        return cls(name=data.get("name"))

    def validate(self) -> None:
        _validate_name(self.name, label="Category name")


@dataclass
class ServiceResponse:
    """DTO for service API responses."""

    id: int
    name: str
    description: str
    price: str
    duration: int
    category_id: Optional[int]
    barber_ids: List[int] = field(default_factory=list)
    availability_status: str = ""
    system_status: str = ""

    @classmethod
    def from_domain(cls, service: Service) -> "ServiceResponse":
        """Create response from domain entity."""
        return cls(
            id=service.id,
            name=service.name,
            description=service.description,
            price=str(service.price),
            duration=service.duration,
            category_id=service.category_id,
            barber_ids=sorted(service.barber_ids),
            availability_status=to_label(service.availability_status),
            system_status=to_label(service.system_status),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price": self.price,
            "duration": self.duration,
            "categoryId": self.category_id,
            "barberIds": list(self.barber_ids),
            "availabilityStatus": self.availability_status,
            "systemStatus": self.system_status,
        }


@dataclass
class CategoryResponse:
    """DTO for category API responses."""

    id: int
    name: str

    @classmethod
    def from_domain(cls, category: Category) -> "CategoryResponse":
        return cls(id=category.id, name=category.name)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name}
