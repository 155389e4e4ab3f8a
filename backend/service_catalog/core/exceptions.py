"""
Custom exceptions for the application.
Following SOLID principles - centralized error handling.

Every exception raised to a synchronous caller carries a stable error code
so the administrative API can render a structured error response.
"""

from enum import Enum


class ErrorCode(Enum):
    """Stable error codes shared with API consumers."""

    GENERIC = ("GC-0001", "Unexpected error")
    ENTITY_ALREADY_EXISTS = ("GC-0002", "Entity already exists")
    ENTITY_NOT_FOUND = ("GC-0003", "Entity not found")
    BUSINESS_RULE_VIOLATION = ("GC-0004", "Business rule violation")
    REQUEST_VALIDATION = ("GC-0007", "Invalid request data")

    @property
    def code(self) -> str:
        return self.value[0]

    @property
    def default_message(self) -> str:
        return self.value[1]


class ServiceCatalogError(Exception):
    """Base class for errors surfaced to synchronous callers."""

    error_code = ErrorCode.GENERIC
    http_status = 500

    def __init__(self, message: str = ""):
        super().__init__(message or self.error_code.default_message)
        self.message = message or self.error_code.default_message

    @property
    def code(self) -> str:
        return self.error_code.code


class EntityNotFoundError(ServiceCatalogError):
    """Raised when a referenced service, category or barber does not exist."""

    error_code = ErrorCode.ENTITY_NOT_FOUND
    http_status = 404


class EntityAlreadyExistsError(ServiceCatalogError):
    """Raised when a unique name is already taken by an active record."""

    error_code = ErrorCode.ENTITY_ALREADY_EXISTS
    http_status = 406


class BusinessRuleViolation(ServiceCatalogError):
    """
    Raised when an operation would break a domain invariant.

    Examples: inactivating a service with blocking reservations, forcing a
    service to Available while it has no barbers.
    """

    error_code = ErrorCode.BUSINESS_RULE_VIOLATION
    http_status = 400


class RequestValidationError(ServiceCatalogError):
    """Raised when a request DTO fails field validation."""

    error_code = ErrorCode.REQUEST_VALIDATION
    http_status = 400


class UnknownStatusLabel(ValueError):
    """Raised when a status label does not belong to the closed enumeration."""

    def __init__(self, enum_type: type, label):
        super().__init__(f"Unknown {enum_type.__name__} label: {label!r}")
        self.enum_type = enum_type
        self.label = label


class MalformedEventError(ValueError):
    """Raised when an inbound event payload cannot be parsed."""
