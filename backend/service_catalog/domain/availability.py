"""
Availability rules for services.

A service is bookable exactly when at least one barber can perform it.
Availability is always derived from the relation set; the only way to
request it explicitly is the administrative update, which is checked here.
"""

from typing import Collection

from service_catalog.core.exceptions import BusinessRuleViolation
from service_catalog.domain.entities import AvailabilityStatus, Service


def derive_availability(barber_ids: Collection[int]) -> AvailabilityStatus:
    if len(barber_ids) > 0:
        return AvailabilityStatus.AVAILABLE
    return AvailabilityStatus.UNAVAILABLE


def apply_availability(service: Service) -> bool:
    """Recompute the service availability in place.

    Returns True when the status changed.
    """
    derived = derive_availability(service.barber_ids)
    if service.availability_status == derived:
        return False
    service.availability_status = derived
    return True


def ensure_availability_allowed(
    requested: AvailabilityStatus, barber_ids: Collection[int]
) -> None:
    """Reject an explicit Available request for a service without barbers."""
    if requested == AvailabilityStatus.AVAILABLE and len(barber_ids) == 0:
        raise BusinessRuleViolation(
            "The service cannot be set to 'Available' because it has no barbers assigned."
        )
