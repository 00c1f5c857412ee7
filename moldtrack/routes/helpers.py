from flask import request

from moldtrack.exceptions import ValidationError


def get_json_body() -> dict:
    """Cuerpo JSON del request; {} si viene vacío."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError('El cuerpo debe ser un objeto JSON')
    return data


def acting_user_id(data: dict, required: bool = True):
    """
    Usuario que ejecuta la acción: 'user_id' del cuerpo o header X-User-Id.
    No hay sesión global; el frontend lo envía en cada llamada.
    """
    user_id = data.get('user_id') or request.headers.get('X-User-Id')
    if required and not user_id:
        raise ValidationError('user_id es requerido', field='user_id')
    return user_id
