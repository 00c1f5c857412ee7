"""
Flujo de solicitudes de mantenimiento.

    Pending -> Approved   (crea un evento Maintenance sobre el origen)
    Pending -> Rejected

Cualquier otra transición es InvalidStateError y no escribe nada.
"""
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional

from flask import current_app

from moldtrack import db
from moldtrack.exceptions import InvalidStateError, NotFoundError, ValidationError
from moldtrack.models.event import EVENT_MAINTENANCE, SOURCE_MOLD, SOURCE_MACHINE
from moldtrack.models.machine import Machine
from moldtrack.models.maintenance_request import (
    MaintenanceRequest, REQUEST_PENDING, REQUEST_APPROVED, REQUEST_REJECTED,
)
from moldtrack.models.mold import Mold
from moldtrack.models.user import User
from moldtrack.services.base import unit_of_work
from moldtrack.services.event_service import get_event_service
from moldtrack.utils.logger import get_request_logger
from moldtrack.utils.parsing import require_text

log = get_request_logger()

REQUEST_EVENT_PREFIX = '(From Request)'


class RequestService:
    """Servicio de solicitudes de mantenimiento."""

    def _resolve_source(self, source_id: str):
        mold = db.session.get(Mold, source_id)
        if mold is not None and not mold.is_deleted:
            return SOURCE_MOLD, mold.code
        machine = db.session.get(Machine, source_id)
        if machine is not None and not machine.is_deleted:
            return SOURCE_MACHINE, machine.code
        raise NotFoundError('Molde o máquina', source_id)

    def create_maintenance_request(self, source_id: str, description: str,
                                   requester_id: str, requester_name: str = None) -> MaintenanceRequest:
        description = require_text(description, 'description')
        requester_id = require_text(requester_id, 'requester_id')

        with unit_of_work() as session:
            source_type, source_code = self._resolve_source(source_id)
            if not requester_name:
                requester = session.get(User, requester_id)
                requester_name = requester.name if requester else requester_id

            maintenance_request = MaintenanceRequest(
                source_id=source_id,
                source_code=source_code,
                source_type=source_type,
                description=description,
                requester_id=requester_id,
                requester_name=requester_name,
                status=REQUEST_PENDING,
            )
            session.add(maintenance_request)

        log.info(f"📝 Solicitud {maintenance_request.id} creada por {requester_id} para {source_type} {source_code}")
        return maintenance_request

    def get_maintenance_request(self, request_id: int) -> Optional[MaintenanceRequest]:
        return db.session.get(MaintenanceRequest, request_id)

    def get_maintenance_requests(self) -> List[MaintenanceRequest]:
        return MaintenanceRequest.query.order_by(
            MaintenanceRequest.created_at.desc(), MaintenanceRequest.id.desc()
        ).all()

    def update_maintenance_request_status(self, request_id: int, new_status: str) -> MaintenanceRequest:
        """
        Aprueba o rechaza una solicitud pendiente.

        Al aprobar, en la misma transacción se crea un evento Maintenance sobre
        el origen (lo que a su vez pasa el molde a InMaintenance).
        """
        if new_status not in (REQUEST_APPROVED, REQUEST_REJECTED):
            raise ValidationError(f"Estado de solicitud inválido '{new_status}'", field='status')

        with unit_of_work() as session:
            maintenance_request = session.get(MaintenanceRequest, request_id, with_for_update=True)
            if maintenance_request is None:
                raise NotFoundError('Solicitud', request_id)
            if maintenance_request.status != REQUEST_PENDING:
                raise InvalidStateError(
                    f'La solicitud {request_id} ya fue resuelta ({maintenance_request.status})',
                    current_status=maintenance_request.status,
                )

            maintenance_request.status = new_status
            maintenance_request.resolved_at = datetime.now(timezone.utc)

            if new_status == REQUEST_APPROVED:
                days = current_app.config.get('REQUEST_DEFAULT_DURATION_DAYS', 14)
                event = get_event_service().open_event(
                    maintenance_request.source_id,
                    EVENT_MAINTENANCE,
                    f'{REQUEST_EVENT_PREFIX} {maintenance_request.description}',
                    estimated_end_date=date.today() + timedelta(days=days),
                )
                maintenance_request.event_id = event.id

        log.info(f"Solicitud {request_id}: {REQUEST_PENDING} -> {new_status}")
        return maintenance_request


# Instancia global
_request_service: Optional[RequestService] = None


def get_request_service() -> RequestService:
    """Obtiene la instancia del servicio de solicitudes."""
    global _request_service
    if _request_service is None:
        _request_service = RequestService()
    return _request_service
