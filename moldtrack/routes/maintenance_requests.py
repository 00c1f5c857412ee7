from flask import Blueprint, jsonify

from moldtrack.exceptions import NotFoundError
from moldtrack.routes.helpers import acting_user_id, get_json_body
from moldtrack.services.request_service import get_request_service
from moldtrack.utils.logger import get_api_logger

maintenance_requests_bp = Blueprint('maintenance_requests', __name__)

# Logger para este módulo
log = get_api_logger()


@maintenance_requests_bp.route('', methods=['GET'])
def listar_solicitudes():
    requests_ = get_request_service().get_maintenance_requests()
    return jsonify([r.to_dict() for r in requests_])


@maintenance_requests_bp.route('', methods=['POST'])
def crear_solicitud():
    """
    Crea una solicitud de mantenimiento (queda Pending).

    Request:
    {
        "user_id": "OP01",
        "source_id": "ST-001",
        "description": "Pérdida de agua en circuito de enfriamiento"
    }
    """
    data = get_json_body()
    requester_id = data.get('requester_id') or acting_user_id(data)
    maintenance_request = get_request_service().create_maintenance_request(
        data.get('source_id'),
        data.get('description'),
        requester_id,
        requester_name=data.get('requester_name'),
    )
    return jsonify(maintenance_request.to_dict()), 201


@maintenance_requests_bp.route('/<int:request_id>', methods=['GET'])
def obtener_solicitud(request_id):
    maintenance_request = get_request_service().get_maintenance_request(request_id)
    if maintenance_request is None:
        raise NotFoundError('Solicitud', request_id)
    return jsonify(maintenance_request.to_dict())


@maintenance_requests_bp.route('/<int:request_id>/status', methods=['POST'])
def resolver_solicitud(request_id):
    """
    Aprueba o rechaza una solicitud pendiente.

    Request: {"status": "Approved"} o {"status": "Rejected"}
    """
    data = get_json_body()
    log.info(f"POST /maintenance-requests/{request_id}/status - {data.get('status')}")
    maintenance_request = get_request_service().update_maintenance_request_status(request_id, data.get('status'))
    return jsonify(maintenance_request.to_dict())
