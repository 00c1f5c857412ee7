"""
Coerción de entradas crudas (JSON) a valores tipados.
Fechas, conteos, números opcionales y campos personalizados.
"""
from datetime import date, datetime
from typing import Optional

from moldtrack.exceptions import ValidationError

IMAGE_EXTENSIONS = ('jpg', 'jpeg', 'png', 'gif', 'bmp')
CAD_EXTENSIONS = ('step', 'stp', 'iges', 'igs', 'x_t', 'x_b')


def parse_date(value, field: str) -> Optional[date]:
    """
    Convierte un valor a date.

    Acepta date, datetime o string ISO ('2026-01-03' o '2026-01-03T10:00:00').
    None y '' se devuelven como None.
    """
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return datetime.strptime(value[:10], '%Y-%m-%d').date()
        except ValueError:
            pass
    raise ValidationError(f'{field}: formato de fecha inválido. Usar YYYY-MM-DD', field=field)


def parse_count(value, field: str) -> int:
    """Conteo de piezas: entero >= 0 (bool no cuenta como entero)."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f'{field} debe ser un entero', field=field)
    if value < 0:
        raise ValidationError(f'{field} no puede ser negativo', field=field)
    return value


def parse_optional_number(value, field: str, minimum: float = None) -> Optional[float]:
    if value is None or value == '':
        return None
    if isinstance(value, bool):
        raise ValidationError(f'{field} debe ser numérico', field=field)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{field} debe ser numérico', field=field)
    if minimum is not None and number < minimum:
        raise ValidationError(f'{field} debe ser >= {minimum}', field=field)
    return number


def require_text(value, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f'{field} es requerido', field=field)
    return value.strip()


def validate_custom_fields(fields) -> dict:
    """
    Campos personalizados: mapa string -> string.
    Claves y valores no vacíos; sin más validación de esquema.
    """
    if fields is None:
        return {}
    if not isinstance(fields, dict):
        raise ValidationError('custom_fields debe ser un objeto', field='custom_fields')

    cleaned = {}
    for key, value in fields.items():
        if not isinstance(key, str) or not key.strip():
            raise ValidationError('custom_fields: clave vacía', field='custom_fields')
        if value is None or not str(value).strip():
            raise ValidationError(f'custom_fields: valor vacío para {key}', field='custom_fields')
        cleaned[key.strip()] = str(value).strip()
    return cleaned


def file_type_for(file_name: str) -> str:
    """Deriva el tipo de adjunto desde la extensión del archivo."""
    if '.' not in file_name:
        return 'Document'
    extension = file_name.rsplit('.', 1)[-1].lower()
    if extension in IMAGE_EXTENSIONS:
        return 'Image'
    if extension == 'pdf':
        return 'PDF'
    if extension in CAD_EXTENSIONS:
        return '3D'
    return 'Document'
