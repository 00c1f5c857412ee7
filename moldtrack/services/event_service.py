"""
Eventos sobre moldes y máquinas, y derivación del estado del molde.

Reglas:
    - Al crear un evento sobre un molde: Maintenance/Repair -> InMaintenance,
      Processing -> Processing, el resto no toca el estado. Sobrescribe
      siempre (gana la última escritura).
    - Al cerrar un evento (Open -> Closed) se fija actual_end_date = hoy; si
      el molde ya no tiene eventos abiertos vuelve a Operational, si quedan
      abiertos el estado no se toca.
    - Los eventos de máquina nunca cambian estados; si apuntan a una tarea
      del plan de mantenimiento, al cerrarse actualizan lastPerformed/nextDue.

La escritura del evento y la del estado del molde van en la misma
transacción, con la fila del molde bloqueada (SELECT ... FOR UPDATE).
"""
from datetime import date
from typing import List, Optional

from moldtrack import db
from moldtrack.exceptions import InvalidStateError, NotFoundError, ValidationError
from moldtrack.models.event import (
    Event, EVENT_TYPES, EVENT_OPEN, EVENT_CLOSED, EVENT_MAINTENANCE, EVENT_REPAIR,
    EVENT_PROCESSING, SOURCE_MOLD, SOURCE_MACHINE,
)
from moldtrack.models.machine import Machine, compute_next_due
from moldtrack.models.mold import Mold, MOLD_OPERATIONAL, MOLD_IN_MAINTENANCE, MOLD_PROCESSING
from moldtrack.services.base import unit_of_work
from moldtrack.utils.logger import get_event_logger
from moldtrack.utils.parsing import parse_date, parse_optional_number, validate_custom_fields

log = get_event_logger()

# Estado que impone cada tipo de evento al crearse sobre un molde
STATUS_FOR_EVENT_TYPE = {
    EVENT_MAINTENANCE: MOLD_IN_MAINTENANCE,
    EVENT_REPAIR: MOLD_IN_MAINTENANCE,
    EVENT_PROCESSING: MOLD_PROCESSING,
}


class EventService:
    """Servicio de eventos y estado derivado de los moldes."""

    def _resolve_source(self, source_id: str):
        """
        Retorna (source_type, registro) para un molde o máquina activo.
        El molde se lee con bloqueo de fila.
        """
        mold = db.session.get(Mold, source_id, with_for_update=True)
        if mold is not None and not mold.is_deleted:
            return SOURCE_MOLD, mold
        machine = db.session.get(Machine, source_id)
        if machine is not None and not machine.is_deleted:
            return SOURCE_MACHINE, machine
        raise NotFoundError('Molde o máquina', source_id)

    def open_event(self, source_id: str, event_type: str, description: str = '',
                   estimated_end_date=None, cost=None, schedule_task_id: str = None,
                   custom_fields: dict = None) -> Event:
        """
        Crea el evento y aplica la regla de estado (flush, sin commit).
        Se usa dentro de la unidad de trabajo del llamador.
        """
        if event_type not in EVENT_TYPES:
            raise ValidationError(f"Tipo de evento inválido '{event_type}'", field='type')
        cost = parse_optional_number(cost, 'cost', minimum=0)
        estimated_end_date = parse_date(estimated_end_date, 'estimated_end_date')
        custom_fields = validate_custom_fields(custom_fields)

        source_type, source = self._resolve_source(source_id)
        if schedule_task_id:
            if source_type != SOURCE_MACHINE or source.find_schedule(schedule_task_id) is None:
                raise NotFoundError('Tarea de mantenimiento', schedule_task_id)

        event = Event(
            source_id=source_id,
            source_type=source_type,
            type=event_type,
            description=description or '',
            cost=cost,
            estimated_end_date=estimated_end_date,
            status=EVENT_OPEN,
            schedule_task_id=schedule_task_id,
            custom_fields=custom_fields,
            attachments=[],
        )
        db.session.add(event)
        db.session.flush()

        new_status = STATUS_FOR_EVENT_TYPE.get(event_type)
        if source_type == SOURCE_MOLD and new_status:
            log.info(f"Molde {source_id}: {source.status} -> {new_status} (evento {event.id} {event_type})")
            source.status = new_status

        return event

    def create_event(self, source_id: str, event_type: str, description: str = '',
                     estimated_end_date=None, cost=None, schedule_task_id: str = None,
                     custom_fields: dict = None) -> Event:
        with unit_of_work():
            event = self.open_event(
                source_id, event_type, description,
                estimated_end_date=estimated_end_date,
                cost=cost,
                schedule_task_id=schedule_task_id,
                custom_fields=custom_fields,
            )
        log.info(f"✅ Evento {event.id} creado: {event_type} sobre {source_id}")
        return event

    def update_event(self, event_id: int, updates: dict) -> Event:
        """
        Actualización parcial. status='Closed' sobre un evento abierto dispara
        la regla de cierre; un evento cerrado no se puede reabrir.
        """
        with unit_of_work() as session:
            event = session.get(Event, event_id)
            if event is None:
                raise NotFoundError('Evento', event_id)

            closing = False
            if 'status' in updates:
                new_status = updates['status']
                if new_status not in (EVENT_OPEN, EVENT_CLOSED):
                    raise ValidationError(f"Estado de evento inválido '{new_status}'", field='status')
                if event.status == EVENT_CLOSED and new_status == EVENT_OPEN:
                    raise InvalidStateError(f'El evento {event_id} ya está cerrado', current_status=event.status)
                closing = event.status == EVENT_OPEN and new_status == EVENT_CLOSED

            if 'description' in updates:
                event.description = updates['description'] or ''
            if 'cost' in updates:
                event.cost = parse_optional_number(updates['cost'], 'cost', minimum=0)
            if 'estimated_end_date' in updates:
                event.estimated_end_date = parse_date(updates['estimated_end_date'], 'estimated_end_date')
            if 'custom_fields' in updates:
                event.custom_fields = validate_custom_fields(updates['custom_fields'])

            if closing:
                event.status = EVENT_CLOSED
                event.actual_end_date = date.today()
                session.flush()
                self._after_close(event)

        if closing:
            log.info(f"✅ Evento {event_id} cerrado ({event.source_id})")
        return event

    def close_event(self, event_id: int) -> Event:
        """Marca el evento como realizado."""
        return self.update_event(event_id, {'status': EVENT_CLOSED})

    def _after_close(self, event: Event):
        if event.source_type == SOURCE_MOLD:
            mold = db.session.get(Mold, event.source_id, with_for_update=True)
            if mold is None:
                return
            still_open = Event.query.filter_by(
                source_id=event.source_id, source_type=SOURCE_MOLD, status=EVENT_OPEN
            ).count()
            if still_open == 0:
                log.info(f"Molde {mold.code}: sin eventos abiertos, {mold.status} -> {MOLD_OPERATIONAL}")
                mold.status = MOLD_OPERATIONAL
            else:
                log.debug(f"Molde {mold.code}: quedan {still_open} eventos abiertos, estado {mold.status} sin cambios")

        elif event.source_type == SOURCE_MACHINE and event.schedule_task_id:
            machine = db.session.get(Machine, event.source_id)
            if machine is None:
                return
            schedules = []
            for task in machine.maintenance_schedules or []:
                if task.get('id') == event.schedule_task_id:
                    task = dict(task)
                    task['lastPerformed'] = event.actual_end_date.isoformat()
                    task['nextDue'] = compute_next_due(event.actual_end_date, task.get('intervalDays'))
                    log.info(f"Máquina {machine.code}: tarea {task['id']} realizada, próxima {task['nextDue']}")
                schedules.append(task)
            machine.maintenance_schedules = schedules

    # === Consultas ===

    def get_event(self, event_id: int) -> Optional[Event]:
        return db.session.get(Event, event_id)

    def get_events_for_source(self, source_id: str) -> List[Event]:
        return Event.query.filter_by(source_id=source_id).order_by(
            Event.timestamp.desc(), Event.id.desc()
        ).all()

    def get_all_events(self) -> List[Event]:
        return Event.query.order_by(Event.timestamp.desc(), Event.id.desc()).all()

    def get_upcoming_events(self) -> List[Event]:
        """Eventos abiertos, el de fin estimado más próximo primero (sin fecha al final)."""
        return Event.query.filter_by(status=EVENT_OPEN).order_by(
            Event.estimated_end_date.is_(None),
            Event.estimated_end_date.asc(),
            Event.id.asc(),
        ).all()


# Instancia global
_event_service: Optional[EventService] = None


def get_event_service() -> EventService:
    """Obtiene la instancia del servicio de eventos."""
    global _event_service
    if _event_service is None:
        _event_service = EventService()
    return _event_service
