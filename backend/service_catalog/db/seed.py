"""
Database seeding for a fresh catalog.

Creates the starter categories and services when the database has no
category yet. Seeded services are ACTIVE and UNAVAILABLE: no barber is
known at this point, and availability is always derived from barbers.
"""

import logging
from decimal import Decimal

from service_catalog.db.unit_of_work import UnitOfWork, run_in_unit_of_work
from service_catalog.domain.entities import (
    AvailabilityStatus,
    Category,
    Service,
    SystemStatus,
)
from service_catalog.schemas.events import ServiceEventType

logger = logging.getLogger(__name__)

SEED_CATEGORIES = ["Cortes de Cabello", "Barbería Tradicional", "Tratamientos"]

# (category, name, description, price, duration in minutes)
SEED_SERVICES = [
    ("Cortes de Cabello", "Corte Clásico", "Corte tradicional con máquina y tijera", "15000", 30),
    ("Cortes de Cabello", "Corte Moderno", "Corte actualizado con degradado y texturizado", "20000", 45),
    ("Cortes de Cabello", "Corte Niño", "Corte especial para niños", "12000", 25),
    ("Barbería Tradicional", "Afeitado Clásico", "Afeitado tradicional con navaja y toalla caliente", "18000", 30),
    ("Barbería Tradicional", "Arreglo de Barba", "Perfilado y arreglo de barba con máquina y tijera", "12000", 20),
    ("Barbería Tradicional", "Corte + Barba", "Servicio completo de corte de cabello y arreglo de barba", "28000", 60),
    ("Tratamientos", "Masaje Capilar", "Masaje relajante de cuero cabelludo", "10000", 15),
    ("Tratamientos", "Tratamiento Facial", "Limpieza facial profunda e hidratación", "25000", 40),
]


def seed_catalog(container) -> int:
    """
    Seed categories and services, publishing ``service.created`` for each.

    Idempotent: does nothing once any category exists. Returns the number
    of services created.
    """

    def work(uow: UnitOfWork) -> int:
        if uow.categories.count() > 0:
            return 0

        categories = {
            name: uow.categories.create(Category(name=name)) for name in SEED_CATEGORIES
        }
        for category_name, name, description, price, duration in SEED_SERVICES:
            service = uow.services.create(
                Service(
                    name=name,
                    description=description,
                    price=Decimal(price),
                    duration=duration,
                    category_id=categories[category_name].id,
                    availability_status=AvailabilityStatus.UNAVAILABLE,
                    system_status=SystemStatus.ACTIVE,
                )
            )
            uow.record(ServiceEventType.CREATED, service)
        return len(SEED_SERVICES)

    outcome = run_in_unit_of_work(container.uow_factory, work)
    if outcome.value:
        logger.info(
            "Catalog seeded",
            extra={
                "context": {
                    "categories": len(SEED_CATEGORIES),
                    "services": outcome.value,
                    "published": outcome.published,
                }
            },
        )
    else:
        logger.info("Catalog already has data, seeding skipped")
    return outcome.value
