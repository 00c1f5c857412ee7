from flask import Blueprint, jsonify

from moldtrack.exceptions import NotFoundError
from moldtrack.routes.helpers import get_json_body
from moldtrack.services.production_service import get_production_service
from moldtrack.utils.logger import get_api_logger

production_bp = Blueprint('production', __name__)

# Logger para este módulo
log = get_api_logger()


@production_bp.route('/<int:log_id>', methods=['GET'])
def obtener_produccion(log_id):
    entry = get_production_service().get_production_log(log_id)
    if entry is None:
        raise NotFoundError('Registro de producción', log_id)
    return jsonify(entry.to_dict())


@production_bp.route('/<int:log_id>', methods=['PUT'])
def corregir_produccion(log_id):
    """Corrige good/scrapped/scrap_reason; ajusta total_cycles del componente"""
    data = get_json_body()
    updates = {k: v for k, v in data.items() if k != 'user_id'}
    log.info(f"PUT /production/{log_id} - {updates}")
    entry = get_production_service().update_production_log(log_id, updates)
    return jsonify(entry.to_dict())


@production_bp.route('/<int:log_id>', methods=['DELETE'])
def eliminar_produccion(log_id):
    log.info(f"DELETE /production/{log_id}")
    get_production_service().delete_production_log(log_id)
    return '', 204
