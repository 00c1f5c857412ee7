from flask import Blueprint, jsonify

from moldtrack.exceptions import NotFoundError
from moldtrack.routes.helpers import get_json_body
from moldtrack.services.event_service import get_event_service
from moldtrack.services.inventory_service import get_inventory_service
from moldtrack.utils.logger import get_api_logger

machines_bp = Blueprint('machines', __name__)

# Logger para este módulo
log = get_api_logger()


@machines_bp.route('', methods=['GET'])
def listar_maquinas():
    machines = get_inventory_service().get_machines()
    return jsonify([m.to_dict() for m in machines])


@machines_bp.route('', methods=['POST'])
def crear_maquina():
    data = get_json_body()
    log.info(f"POST /machines - code={data.get('code')}")
    machine = get_inventory_service().create_machine(data)
    return jsonify(machine.to_dict()), 201


@machines_bp.route('/<code>', methods=['GET'])
def obtener_maquina(code):
    machine = get_inventory_service().get_machine(code)
    if machine is None:
        raise NotFoundError('Máquina', code)
    return jsonify(machine.to_dict())


@machines_bp.route('/<code>', methods=['PUT'])
def actualizar_maquina(code):
    machine = get_inventory_service().update_machine(code, get_json_body())
    return jsonify(machine.to_dict())


@machines_bp.route('/<code>', methods=['DELETE'])
def archivar_maquina(code):
    log.info(f"DELETE /machines/{code}")
    get_inventory_service().soft_delete('machine', code)
    return '', 204


@machines_bp.route('/<code>/events', methods=['GET'])
def eventos_maquina(code):
    events = get_event_service().get_events_for_source(code)
    return jsonify([e.to_dict() for e in events])


@machines_bp.route('/<code>/attachments', methods=['POST'])
def agregar_adjunto(code):
    data = get_json_body()
    attachment = get_inventory_service().add_attachment(
        'machine', code, data.get('file_name'), data.get('url'), data.get('storage_path')
    )
    return jsonify(attachment), 201


@machines_bp.route('/<code>/attachments/<attachment_id>', methods=['DELETE'])
def eliminar_adjunto(code, attachment_id):
    get_inventory_service().remove_attachment('machine', code, attachment_id)
    return '', 204
