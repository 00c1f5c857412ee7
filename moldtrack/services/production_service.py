"""
Ledger de producción por componente.

Component.total_cycles es la suma de (good + scrapped) de todos los registros
vigentes del componente. Cada alta, edición o baja de un registro aplica el
delta compensatorio con un UPDATE atómico (total_cycles = total_cycles + n)
en la misma transacción que la escritura del registro.
"""
from typing import List, Optional

from sqlalchemy import update

from moldtrack import db
from moldtrack.exceptions import NotFoundError, ValidationError
from moldtrack.models.component import Component
from moldtrack.models.production_log import ProductionLog
from moldtrack.services.base import unit_of_work
from moldtrack.utils.logger import get_production_logger
from moldtrack.utils.parsing import parse_count

log = get_production_logger()

EDITABLE_FIELDS = ('good', 'scrapped', 'scrap_reason')


def _apply_cycle_delta(component_code: str, delta: int):
    """Incremento atómico del contador; nunca lectura-modificación-escritura."""
    db.session.execute(
        update(Component)
        .where(Component.code == component_code)
        .values(total_cycles=Component.total_cycles + delta)
    )


class ProductionService:
    """Servicio para registrar, corregir y eliminar producciones."""

    def log_production(self, component_code: str, good: int, scrapped: int,
                       scrap_reason: str = None, user_id: str = None) -> ProductionLog:
        """
        Registra una corrida e incrementa total_cycles en good + scrapped.
        """
        good = parse_count(good, 'good')
        scrapped = parse_count(scrapped, 'scrapped')

        with unit_of_work() as session:
            component = session.get(Component, component_code)
            if component is None or component.is_deleted:
                raise NotFoundError('Componente', component_code)

            entry = ProductionLog(
                component_code=component_code,
                good=good,
                scrapped=scrapped,
                scrap_reason=scrap_reason or '',
                user_id=user_id,
            )
            session.add(entry)
            _apply_cycle_delta(component_code, good + scrapped)

        log.info(f"✅ Producción {component_code}: +{good} buenas, +{scrapped} scrap (usuario {user_id})")
        return entry

    def get_production_log(self, log_id: int) -> Optional[ProductionLog]:
        return db.session.get(ProductionLog, log_id)

    def get_production_logs_for_component(self, component_code: str) -> List[ProductionLog]:
        return ProductionLog.query.filter_by(component_code=component_code).order_by(
            ProductionLog.timestamp.desc(), ProductionLog.id.desc()
        ).all()

    def update_production_log(self, log_id: int, updates: dict) -> ProductionLog:
        """
        Corrige un registro. Los campos que no vienen conservan su valor y
        total_cycles recibe el delta (nuevo total - total anterior).
        """
        unknown = sorted(set(updates) - set(EDITABLE_FIELDS))
        if unknown:
            raise ValidationError(f"Campos no editables: {', '.join(unknown)}")
        if 'good' in updates:
            parse_count(updates['good'], 'good')
        if 'scrapped' in updates:
            parse_count(updates['scrapped'], 'scrapped')

        with unit_of_work() as session:
            entry = session.get(ProductionLog, log_id, with_for_update=True)
            if entry is None:
                raise NotFoundError('Registro de producción', log_id)

            old_total = entry.total
            if 'good' in updates:
                entry.good = updates['good']
            if 'scrapped' in updates:
                entry.scrapped = updates['scrapped']
            if 'scrap_reason' in updates:
                entry.scrap_reason = updates['scrap_reason'] or ''

            delta = entry.total - old_total
            if delta != 0:
                _apply_cycle_delta(entry.component_code, delta)

        log.info(f"Producción {log_id} corregida: delta {delta:+d} ciclos en {entry.component_code}")
        return entry

    def delete_production_log(self, log_id: int):
        """Elimina un registro y descuenta sus ciclos del componente."""
        with unit_of_work() as session:
            entry = session.get(ProductionLog, log_id, with_for_update=True)
            if entry is None:
                raise NotFoundError('Registro de producción', log_id)

            component_code = entry.component_code
            total = entry.total
            session.delete(entry)
            if total > 0:
                _apply_cycle_delta(component_code, -total)

        log.info(f"🗑️ Producción {log_id} eliminada: -{total} ciclos en {component_code}")


# Instancia global
_production_service: Optional[ProductionService] = None


def get_production_service() -> ProductionService:
    """Obtiene la instancia del servicio de producción."""
    global _production_service
    if _production_service is None:
        _production_service = ProductionService()
    return _production_service
