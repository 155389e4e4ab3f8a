"""Unit tests for domain entity validation."""

from decimal import Decimal

import pytest

from service_catalog.domain.entities import (
    Barber,
    Category,
    Reservation,
    ReservationStatus,
    Service,
)


@pytest.mark.unit
@pytest.mark.domain
class TestServiceEntity:
    def test_price_is_coerced_to_exact_decimal(self):
        service = Service(name="Corte", price=0.1, duration=30)

        assert service.price == Decimal("0.1")

    def test_name_is_required(self):
        with pytest.raises(ValueError, match="name is required"):
            Service(name="  ", price=Decimal("10"), duration=30)

    def test_negative_price_is_rejected(self):
        with pytest.raises(ValueError, match="Price cannot be negative"):
            Service(name="Corte", price=Decimal("-1"), duration=30)

    def test_new_service_defaults(self):
        service = Service(name="Corte", price=Decimal("10"), duration=30)

        assert service.is_active
        assert not service.is_available
        assert service.barber_ids == set()


@pytest.mark.unit
@pytest.mark.domain
class TestMirrorEntities:
    def test_barber_requires_remote_identity(self):
        with pytest.raises(ValueError):
            Barber(id=0, name="Juan")

    def test_reservation_requires_service(self):
        with pytest.raises(ValueError, match="must reference a service"):
            Reservation(id=1, service_id=0)

    @pytest.mark.parametrize(
        "status,blocking",
        [
            (ReservationStatus.PENDING, True),
            (ReservationStatus.IN_PROGRESS, True),
            (ReservationStatus.FINISHED, False),
            (ReservationStatus.CANCELLED, False),
            (ReservationStatus.NO_SHOW, False),
        ],
    )
    def test_blocking_statuses(self, status, blocking):
        assert Reservation(id=1, service_id=2, status=status).is_blocking is blocking

    def test_category_name_is_trimmed(self):
        assert Category(name="  Barba ").name == "Barba"
