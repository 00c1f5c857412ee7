from flask import Blueprint, jsonify

from moldtrack.exceptions import NotFoundError
from moldtrack.routes.helpers import get_json_body
from moldtrack.services.user_service import get_user_service

users_bp = Blueprint('users', __name__)


@users_bp.route('', methods=['GET'])
def listar_usuarios():
    return jsonify([u.to_dict() for u in get_user_service().get_users()])


@users_bp.route('', methods=['POST'])
def crear_usuario():
    data = get_json_body()
    user = get_user_service().create_user(
        data.get('code'),
        data.get('name'),
        is_admin=data.get('is_admin', False),
        allowed_codes=data.get('allowed_codes'),
        language=data.get('language'),
    )
    return jsonify(user.to_dict()), 201


@users_bp.route('/<code>', methods=['GET'])
def obtener_usuario(code):
    user = get_user_service().get_user(code)
    if user is None:
        raise NotFoundError('Usuario', code)
    return jsonify(user.to_dict())


@users_bp.route('/<code>', methods=['PUT'])
def actualizar_usuario(code):
    user = get_user_service().update_user(code, get_json_body())
    return jsonify(user.to_dict())
