from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .session import Base


class Category(Base):
    """Service category (locally owned)."""

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    created_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    def __repr__(self):
        return f"<Category(id={self.id}, name='{self.name}')>"


class Service(Base):
    """Service aggregate root (locally owned).

    ``version_id`` is the optimistic concurrency counter: every write to the
    row, including writes caused by relation changes, bumps it, and a flush
    against a stale version raises StaleDataError.
    """

    __tablename__ = "services"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    # Uniqueness is only required among ACTIVE services, enforced in the service layer
    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    description: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)
    category_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("categories.id"), nullable=False, index=True
    )
    availability_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="UNAVAILABLE"
    )  # AVAILABLE, UNAVAILABLE
    system_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="ACTIVE", index=True
    )  # ACTIVE, INACTIVE
    version_id: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), onupdate=func.now()
    )

    category: Mapped["Category"] = relationship("Category", foreign_keys=[category_id])

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self):
        return (
            f"<Service(id={self.id}, name='{self.name}', "
            f"availability={self.availability_status}, system={self.system_status})>"
        )


class Barber(Base):
    """Mirror of a barber owned by the barbers system (remote identity).

    ``version_id`` serializes work anchored on one barber: every unit that
    reconciles the barber's relations rewrites the row first, so two
    concurrent reconciliations of the same barber collide with StaleDataError.
    """

    __tablename__ = "barbers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    version_id: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), onupdate=func.now()
    )

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self):
        return f"<Barber(id={self.id}, name='{self.name}', active={self.active})>"


class ServiceBarber(Base):
    """Join row: the barber can perform the service."""

    __tablename__ = "service_barbers"

    service_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("services.id"), primary_key=True
    )
    barber_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("barbers.id"), primary_key=True, index=True
    )
    created_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    def __repr__(self):
        return f"<ServiceBarber(service_id={self.service_id}, barber_id={self.barber_id})>"


class Reservation(Base):
    """Read-only mirror of a reservation owned by the reservations system."""

    __tablename__ = "reservations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    service_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("services.id"), nullable=False, index=True
    )
    # No foreign key: the barber may not be mirrored yet
    barber_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    start: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=False), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    source_version: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self):
        return (
            f"<Reservation(id={self.id}, service_id={self.service_id}, status={self.status})>"
        )
