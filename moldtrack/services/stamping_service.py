"""
Auditoría de cambios en los parámetros de inyección (stamping data).

Por cada edición se guarda solo lo que cambió: las claves del objeto nuevo
cuyo valor difiere del anterior. Una clave ausente cuenta como distinta de
cualquier valor, incluido None.
"""
from typing import List, Optional

from moldtrack import db
from moldtrack.exceptions import NotFoundError, ValidationError
from moldtrack.models.component import Component, STAMPING_FIELDS
from moldtrack.models.stamping_history import StampingHistoryEntry
from moldtrack.services.base import unit_of_work
from moldtrack.utils.logger import get_production_logger

log = get_production_logger()

_MISSING = object()


def diff_stamping_data(old: Optional[dict], new: Optional[dict]) -> dict:
    """Campos de `new` cuyo valor no coincide con `old`."""
    old = old or {}
    return {key: value for key, value in (new or {}).items() if old.get(key, _MISSING) != value}


def validate_stamping_data(data) -> dict:
    if not isinstance(data, dict):
        raise ValidationError('stamping_data debe ser un objeto', field='stamping_data')
    unknown = sorted(set(data) - set(STAMPING_FIELDS))
    if unknown:
        raise ValidationError(f"Parámetros de inyección desconocidos: {', '.join(unknown)}", field='stamping_data')
    return dict(data)


class StampingService:
    """Servicio de historial de stamping data por componente."""

    def _require_component(self, code: str) -> Component:
        component = db.session.get(Component, code)
        if component is None or component.is_deleted:
            raise NotFoundError('Componente', code)
        return component

    def _append_history(self, component: Component, user_id: str, new_data: dict) -> Optional[StampingHistoryEntry]:
        """Agrega la entrada de auditoría (flush, sin commit). None si no hubo cambios."""
        changed = diff_stamping_data(component.stamping_data, new_data)
        if not changed:
            log.debug(f"Stamping data de {component.code} sin cambios, no se audita")
            return None

        entry = StampingHistoryEntry(
            component_code=component.code,
            user_id=user_id,
            changed_data=changed,
        )
        db.session.add(entry)
        db.session.flush()
        log.info(f"Stamping data {component.code}: {sorted(changed)} cambiados por {user_id}")
        return entry

    def apply_stamping_data(self, component: Component, user_id: str, new_data: dict) -> Optional[StampingHistoryEntry]:
        """Audita y luego escribe los parámetros nuevos sobre el componente."""
        validate_stamping_data(new_data)
        entry = self._append_history(component, user_id, new_data)
        if entry is not None:
            component.stamping_data = {**(component.stamping_data or {}), **new_data}
        return entry

    def record_stamping_data_change(self, component_code: str, user_id: str,
                                    new_stamping_data: dict) -> Optional[StampingHistoryEntry]:
        """
        Registra la diferencia entre la stamping data actual y la propuesta.

        Returns:
            La entrada creada, o None si no había nada distinto.
        """
        validate_stamping_data(new_stamping_data)
        with unit_of_work():
            component = self._require_component(component_code)
            entry = self._append_history(component, user_id, new_stamping_data)
        return entry

    def update_stamping_data(self, component_code: str, user_id: str,
                             new_stamping_data: dict) -> Optional[StampingHistoryEntry]:
        """Auditoría + escritura en la misma transacción."""
        with unit_of_work():
            component = self._require_component(component_code)
            entry = self.apply_stamping_data(component, user_id, new_stamping_data)
        return entry

    def get_stamping_history_for_component(self, component_code: str) -> List[StampingHistoryEntry]:
        return StampingHistoryEntry.query.filter_by(component_code=component_code).order_by(
            StampingHistoryEntry.timestamp.desc(), StampingHistoryEntry.id.desc()
        ).all()


# Instancia global
_stamping_service: Optional[StampingService] = None


def get_stamping_service() -> StampingService:
    """Obtiene la instancia del servicio de stamping data."""
    global _stamping_service
    if _stamping_service is None:
        _stamping_service = StampingService()
    return _stamping_service
