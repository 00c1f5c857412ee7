from flask import Blueprint, jsonify

from moldtrack.exceptions import NotFoundError
from moldtrack.routes.helpers import acting_user_id, get_json_body
from moldtrack.services.inventory_service import get_inventory_service
from moldtrack.services.production_service import get_production_service
from moldtrack.services.stamping_service import get_stamping_service
from moldtrack.utils.logger import get_api_logger

components_bp = Blueprint('components', __name__)

# Logger para este módulo
log = get_api_logger()


@components_bp.route('', methods=['GET'])
def listar_componentes():
    components = get_inventory_service().get_components()
    return jsonify([c.to_dict() for c in components])


@components_bp.route('', methods=['POST'])
def crear_componente():
    """Crea un componente con total_cycles=0; 409 si el código ya existe"""
    data = get_json_body()
    log.info(f"POST /components - code={data.get('code')}")
    component = get_inventory_service().create_component(data)
    return jsonify(component.to_dict()), 201


@components_bp.route('/<code>', methods=['GET'])
def obtener_componente(code):
    component = get_inventory_service().get_component(code)
    if component is None:
        raise NotFoundError('Componente', code)
    return jsonify(component.to_dict())


@components_bp.route('/<code>', methods=['PUT'])
def actualizar_componente(code):
    """Actualiza un componente. Si trae stamping_data, se audita el cambio."""
    data = get_json_body()
    user_id = acting_user_id(data, required='stamping_data' in data)
    fields = {k: v for k, v in data.items() if k != 'user_id'}
    component = get_inventory_service().update_component(code, fields, user_id=user_id)
    return jsonify(component.to_dict())


@components_bp.route('/<code>', methods=['DELETE'])
def archivar_componente(code):
    log.info(f"DELETE /components/{code}")
    get_inventory_service().soft_delete('component', code)
    return '', 204


@components_bp.route('/<code>/stamping-data', methods=['PUT'])
def actualizar_stamping_data(code):
    """
    Actualiza los parámetros de inyección y registra el historial.

    Request:
    {
        "user_id": "OP01",
        "stamping_data": {"cycleTime": 32.5, "meltTemperature": 230}
    }
    """
    data = get_json_body()
    user_id = acting_user_id(data)
    entry = get_stamping_service().update_stamping_data(code, user_id, data.get('stamping_data') or {})
    component = get_inventory_service().get_component(code)
    return jsonify({
        'component': component.to_dict(),
        'history_entry': entry.to_dict() if entry else None,
    })


@components_bp.route('/<code>/stamping-history', methods=['GET'])
def historial_stamping(code):
    entries = get_stamping_service().get_stamping_history_for_component(code)
    return jsonify([e.to_dict() for e in entries])


@components_bp.route('/<code>/production', methods=['GET'])
def producciones_componente(code):
    logs = get_production_service().get_production_logs_for_component(code)
    return jsonify([p.to_dict() for p in logs])


@components_bp.route('/<code>/production', methods=['POST'])
def registrar_produccion(code):
    """
    Registra una corrida de producción.

    Request:
    {
        "user_id": "OP01",
        "good": 90,
        "scrapped": 10,
        "scrap_reason": "Rebaba"
    }
    """
    data = get_json_body()
    log.info(f"POST /components/{code}/production - good={data.get('good')}, scrapped={data.get('scrapped')}")
    entry = get_production_service().log_production(
        code,
        data.get('good'),
        data.get('scrapped'),
        scrap_reason=data.get('scrap_reason'),
        user_id=acting_user_id(data),
    )
    return jsonify(entry.to_dict()), 201


@components_bp.route('/<code>/attachments', methods=['POST'])
def agregar_adjunto(code):
    data = get_json_body()
    attachment = get_inventory_service().add_attachment(
        'component', code, data.get('file_name'), data.get('url'), data.get('storage_path')
    )
    return jsonify(attachment), 201


@components_bp.route('/<code>/attachments/<attachment_id>', methods=['DELETE'])
def eliminar_adjunto(code, attachment_id):
    get_inventory_service().remove_attachment('component', code, attachment_id)
    return '', 204
