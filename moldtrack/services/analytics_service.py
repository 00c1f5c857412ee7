"""
Agregados para el dashboard y la página de analytics.
Solo lectura: no modifica ningún registro.
"""
from collections import OrderedDict, defaultdict
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import func

from moldtrack import db
from moldtrack.models.event import Event, EVENT_CLOSED, EVENT_MAINTENANCE, EVENT_REPAIR
from moldtrack.models.mold import Mold, MOLD_IN_MAINTENANCE, LOCATION_EXTERNAL
from moldtrack.models.production_log import ProductionLog


class AnalyticsService:

    def get_stats(self) -> Dict[str, int]:
        """Totales de moldes: activos, en mantenimiento y en proveedor externo."""
        active = Mold.query.filter_by(is_deleted=False)
        return {
            'total_molds': active.count(),
            'maintenance_molds': active.filter(Mold.status == MOLD_IN_MAINTENANCE).count(),
            'external_molds': active.filter(Mold.location_type == LOCATION_EXTERNAL).count(),
        }

    def get_mold_status_distribution(self) -> List[Dict[str, Any]]:
        rows = db.session.query(Mold.status, func.count(Mold.code)).filter(
            Mold.is_deleted.is_(False)
        ).group_by(Mold.status).order_by(Mold.status).all()
        return [{'status': status, 'count': count} for status, count in rows]

    def get_mold_supplier_distribution(self) -> List[Dict[str, Any]]:
        rows = db.session.query(Mold.location_value, func.count(Mold.code)).filter(
            Mold.is_deleted.is_(False),
            Mold.location_type == LOCATION_EXTERNAL,
        ).group_by(Mold.location_value).order_by(Mold.location_value).all()
        return [{'supplier': supplier, 'count': count} for supplier, count in rows]

    def get_maintenance_costs_over_time(self) -> List[Dict[str, Any]]:
        """Costo de mantenimientos y reparaciones agrupado por mes (YYYY-MM)."""
        events = Event.query.filter(
            Event.type.in_([EVENT_MAINTENANCE, EVENT_REPAIR]),
            Event.cost > 0,
        ).order_by(Event.timestamp.asc()).all()

        costs_by_month = OrderedDict()
        for event in events:
            month = event.timestamp.strftime('%Y-%m')
            costs_by_month[month] = costs_by_month.get(month, 0) + event.cost
        return [{'month': month, 'total_cost': total} for month, total in costs_by_month.items()]

    def get_scrap_rate(self, days: int = 30) -> List[Dict[str, Any]]:
        """
        Porcentaje de scrap por componente en los últimos `days` días.
        Solo componentes con producción en la ventana; mayor tasa primero.
        """
        since = datetime.now(timezone.utc) - timedelta(days=days)
        rows = db.session.query(
            ProductionLog.component_code,
            func.sum(ProductionLog.good),
            func.sum(ProductionLog.scrapped),
        ).filter(ProductionLog.timestamp >= since).group_by(ProductionLog.component_code).all()

        rates = []
        for component_code, good, scrapped in rows:
            total = (good or 0) + (scrapped or 0)
            if total == 0:
                continue
            rates.append({
                'component_id': component_code,
                'component_code': component_code,
                'scrap_rate': round((scrapped or 0) * 100.0 / total, 2),
            })
        rates.sort(key=lambda r: (-r['scrap_rate'], r['component_code']))
        return rates

    def get_event_schedule_adherence(self) -> List[Dict[str, Any]]:
        """Retraso promedio en días (real - estimado) de los eventos cerrados, por tipo."""
        events = Event.query.filter(
            Event.status == EVENT_CLOSED,
            Event.actual_end_date.isnot(None),
            Event.estimated_end_date.isnot(None),
        ).all()

        delays = defaultdict(list)
        for event in events:
            delays[event.type].append((event.actual_end_date - event.estimated_end_date).days)

        return [
            {'event_type': event_type, 'average_delay': round(sum(values) / len(values), 1)}
            for event_type, values in sorted(delays.items())
        ]


# Instancia global
_analytics_service: Optional[AnalyticsService] = None


def get_analytics_service() -> AnalyticsService:
    """Obtiene la instancia del servicio de analytics."""
    global _analytics_service
    if _analytics_service is None:
        _analytics_service = AnalyticsService()
    return _analytics_service
