"""
Jerarquía de errores tipados de MoldTrack.

Cada error lleva un `code` legible por máquina y el `status_code` HTTP con el
que lo responde la API. Los servicios lanzan estos errores antes de escribir;
las rutas no los atrapan, los traduce el handler registrado en create_app().

    MoldTrackError
    +-- ValidationError       (400)
    +-- NotFoundError         (404)
    +-- DuplicateCodeError    (409)
    +-- InvalidStateError     (409)
    +-- StoreError            (503)
"""


class MoldTrackError(Exception):
    """Base de todos los errores de dominio."""

    code = 'MOLDTRACK_ERROR'
    status_code = 500

    def __init__(self, message: str, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self):
        return {'error': self.message, 'code': self.code, **self.details}


class ValidationError(MoldTrackError):
    """Entrada malformada (conteos negativos, campos requeridos vacíos)."""

    code = 'VALIDATION_ERROR'
    status_code = 400

    def __init__(self, message: str, field: str = None):
        if field:
            super().__init__(message, field=field)
        else:
            super().__init__(message)
        self.field = field


class NotFoundError(MoldTrackError):
    """La entidad referenciada no existe."""

    code = 'NOT_FOUND'
    status_code = 404

    def __init__(self, entity: str, entity_id):
        super().__init__(f'{entity} {entity_id} no encontrado', entity=entity, id=entity_id)
        self.entity = entity
        self.entity_id = entity_id


class DuplicateCodeError(MoldTrackError):
    """Ya existe un registro con ese código."""

    code = 'DUPLICATE_CODE'
    status_code = 409

    def __init__(self, entity: str, entity_code: str):
        super().__init__(f'{entity} con código {entity_code} ya existe', entity=entity, id=entity_code)
        self.entity = entity
        self.entity_code = entity_code


class InvalidStateError(MoldTrackError):
    """Transición de estado ilegal."""

    code = 'INVALID_STATE'
    status_code = 409

    def __init__(self, message: str, current_status: str = None):
        super().__init__(message, current_status=current_status)
        self.current_status = current_status


class StoreError(MoldTrackError):
    """Falla de la base de datos subyacente; no se reintenta."""

    code = 'STORE_ERROR'
    status_code = 503
