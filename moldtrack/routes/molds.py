from flask import Blueprint, jsonify

from moldtrack.exceptions import NotFoundError
from moldtrack.routes.helpers import get_json_body
from moldtrack.services.event_service import get_event_service
from moldtrack.services.inventory_service import get_inventory_service
from moldtrack.utils.logger import get_api_logger

molds_bp = Blueprint('molds', __name__)

# Logger para este módulo
log = get_api_logger()


@molds_bp.route('', methods=['GET'])
def listar_moldes():
    """Lista los moldes activos como árbol (cada raíz con sus children)"""
    return jsonify(get_inventory_service().get_molds())


@molds_bp.route('', methods=['POST'])
def crear_molde():
    """Crea un molde; 409 si el código ya existe"""
    data = get_json_body()
    log.info(f"POST /molds - code={data.get('code')}")
    mold = get_inventory_service().create_mold(data)
    return jsonify(mold.to_dict()), 201


@molds_bp.route('/<code>', methods=['GET'])
def obtener_molde(code):
    mold = get_inventory_service().get_mold(code)
    if mold is None:
        raise NotFoundError('Molde', code)
    return jsonify(mold.to_dict())


@molds_bp.route('/<code>', methods=['PUT'])
def actualizar_molde(code):
    mold = get_inventory_service().update_mold(code, get_json_body())
    return jsonify(mold.to_dict())


@molds_bp.route('/<code>', methods=['DELETE'])
def archivar_molde(code):
    """Baja lógica del molde"""
    log.info(f"DELETE /molds/{code}")
    get_inventory_service().soft_delete('mold', code)
    return '', 204


@molds_bp.route('/<code>/events', methods=['GET'])
def eventos_molde(code):
    """Línea de tiempo de eventos del molde, más reciente primero"""
    events = get_event_service().get_events_for_source(code)
    return jsonify([e.to_dict() for e in events])


@molds_bp.route('/<code>/components', methods=['GET'])
def componentes_molde(code):
    components = get_inventory_service().get_components_for_mold(code)
    return jsonify([c.to_dict() for c in components])


@molds_bp.route('/<code>/components', methods=['POST'])
def asociar_componentes(code):
    """Asocia componentes existentes al molde"""
    data = get_json_body()
    components = get_inventory_service().associate_components_to_mold(code, data.get('component_ids') or [])
    return jsonify([c.to_dict() for c in components])


@molds_bp.route('/<code>/attachments', methods=['POST'])
def agregar_adjunto(code):
    data = get_json_body()
    attachment = get_inventory_service().add_attachment(
        'mold', code, data.get('file_name'), data.get('url'), data.get('storage_path')
    )
    return jsonify(attachment), 201


@molds_bp.route('/<code>/attachments/<attachment_id>', methods=['DELETE'])
def eliminar_adjunto(code, attachment_id):
    get_inventory_service().remove_attachment('mold', code, attachment_id)
    return '', 204
