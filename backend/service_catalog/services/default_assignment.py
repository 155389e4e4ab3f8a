"""
Default-assignment policy for barbers that arrive without a relation.

A new barber can perform every active service until the barbers system
says otherwise. The change originates here, so each modified service is
always re-published as ``service.updated`` for the barbers system's own
mirror to converge.
"""

import logging
from typing import List

from service_catalog.domain.entities import Service, SystemStatus
from service_catalog.services.relation_reconciler import RelationReconciler

logger = logging.getLogger(__name__)


class DefaultAssignmentPolicy:
    def apply(self, uow, barber_id: int) -> List[Service]:
        """Relate the barber to every ACTIVE service inside the caller's unit.

        Returns the services actually modified.
        """
        uow.barbers.claim(barber_id)
        reconciler = RelationReconciler(uow)
        modified = []
        for service in uow.services.list_by_system_status(SystemStatus.ACTIVE):
            if reconciler.attach_barber(service, barber_id, suppress_outbound_echo=False):
                modified.append(service)

        logger.info(
            "Default assignment applied",
            extra={
                "context": {
                    "barber_id": barber_id,
                    "service_ids": [s.id for s in modified],
                }
            },
        )
        return modified
