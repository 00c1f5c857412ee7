from flask import Blueprint, jsonify

from moldtrack.exceptions import NotFoundError
from moldtrack.routes.helpers import get_json_body
from moldtrack.services.event_service import get_event_service
from moldtrack.utils.logger import get_api_logger

events_bp = Blueprint('events', __name__)

# Logger para este módulo
log = get_api_logger()


@events_bp.route('', methods=['GET'])
def listar_eventos():
    events = get_event_service().get_all_events()
    return jsonify([e.to_dict() for e in events])


@events_bp.route('', methods=['POST'])
def crear_evento():
    """
    Crea un evento sobre un molde o máquina.

    Request:
    {
        "source_id": "ST-001",
        "type": "Repair",
        "description": "Cambio de expulsores",
        "estimated_end_date": "2026-11-02",
        "cost": 350.0
    }
    """
    data = get_json_body()
    log.info(f"POST /events - source_id={data.get('source_id')}, type={data.get('type')}")
    event = get_event_service().create_event(
        data.get('source_id'),
        data.get('type'),
        data.get('description'),
        estimated_end_date=data.get('estimated_end_date'),
        cost=data.get('cost'),
        schedule_task_id=data.get('schedule_task_id'),
        custom_fields=data.get('custom_fields'),
    )
    return jsonify(event.to_dict()), 201


@events_bp.route('/upcoming', methods=['GET'])
def proximos_eventos():
    """Eventos abiertos ordenados por fecha estimada de fin"""
    events = get_event_service().get_upcoming_events()
    return jsonify([e.to_dict() for e in events])


@events_bp.route('/<int:event_id>', methods=['GET'])
def obtener_evento(event_id):
    event = get_event_service().get_event(event_id)
    if event is None:
        raise NotFoundError('Evento', event_id)
    return jsonify(event.to_dict())


@events_bp.route('/<int:event_id>', methods=['PUT'])
def actualizar_evento(event_id):
    event = get_event_service().update_event(event_id, get_json_body())
    return jsonify(event.to_dict())


@events_bp.route('/<int:event_id>/close', methods=['POST'])
def cerrar_evento(event_id):
    """Marca el evento como realizado (Closed, actual_end_date = hoy)"""
    log.info(f"POST /events/{event_id}/close")
    event = get_event_service().close_event(event_id)
    return jsonify(event.to_dict())
