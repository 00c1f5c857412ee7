"""
Tests de usuarios y de los agregados de analytics.
"""
from datetime import date, timedelta

import pytest

from moldtrack.exceptions import DuplicateCodeError, NotFoundError, ValidationError
from moldtrack.services.analytics_service import get_analytics_service
from moldtrack.services.event_service import get_event_service
from moldtrack.services.inventory_service import get_inventory_service
from moldtrack.services.production_service import get_production_service
from moldtrack.services.user_service import get_user_service


class TestUsers:

    def test_alta_y_consulta(self, app):
        service = get_user_service()
        service.create_user('ADM1', 'Giulia', is_admin=True, allowed_codes=['ST-002', 'ST-001'], language='it')

        user = service.get_user('ADM1')
        assert user.is_admin is True
        assert user.allowed_codes == ['ST-001', 'ST-002']
        assert user.language == 'it'

    def test_codigo_duplicado(self, app):
        get_user_service().create_user('OP01', 'Luis')
        with pytest.raises(DuplicateCodeError):
            get_user_service().create_user('OP01', 'Otro')

    def test_idioma_no_soportado(self, app):
        with pytest.raises(ValidationError):
            get_user_service().create_user('OP01', 'Luis', language='fr')

    def test_actualizar(self, app):
        get_user_service().create_user('OP01', 'Luis')
        user = get_user_service().update_user('OP01', {'name': 'Luis P.', 'language': 'en'})

        assert user.name == 'Luis P.'
        assert user.language == 'en'

    def test_actualizar_inexistente(self, app):
        with pytest.raises(NotFoundError):
            get_user_service().update_user('NADIE', {'name': 'x'})


class TestAnalytics:

    def test_totales(self, mold):
        inventory = get_inventory_service()
        inventory.create_mold({'code': 'ST-002', 'location': {'type': 'external', 'value': 'Stampi Srl'}})
        inventory.create_mold({'code': 'ST-003', 'location': {'type': 'external', 'value': 'Stampi Srl'}})
        inventory.create_mold({'code': 'ST-004'})
        inventory.soft_delete('mold', 'ST-004')
        get_event_service().create_event('ST-001', 'Repair')

        stats = get_analytics_service().get_stats()

        assert stats == {'total_molds': 3, 'maintenance_molds': 1, 'external_molds': 2}
        assert get_analytics_service().get_mold_supplier_distribution() == [{'supplier': 'Stampi Srl', 'count': 2}]
        assert get_analytics_service().get_mold_status_distribution() == [
            {'status': 'InMaintenance', 'count': 1},
            {'status': 'Operational', 'count': 2},
        ]

    def test_costos_por_mes(self, mold):
        events = get_event_service()
        events.create_event('ST-001', 'Repair', cost=100)
        events.create_event('ST-001', 'Maintenance', cost=50.5)
        events.create_event('ST-001', 'Cost', cost=999)

        costs = get_analytics_service().get_maintenance_costs_over_time()

        assert len(costs) == 1
        assert costs[0]['total_cost'] == 150.5

    def test_tasa_de_scrap(self, component):
        get_inventory_service().create_component({'code': 'C-200'})
        production = get_production_service()
        production.log_production('C-100', 90, 10)
        production.log_production('C-200', 50, 0)

        rates = get_analytics_service().get_scrap_rate(days=30)

        assert [(r['component_code'], r['scrap_rate']) for r in rates] == [('C-100', 10.0), ('C-200', 0.0)]

    def test_adherencia_al_plan(self, mold):
        events = get_event_service()
        late = events.create_event('ST-001', 'Repair', estimated_end_date=date.today() - timedelta(days=2))
        events.create_event('ST-001', 'Processing', estimated_end_date=date.today() + timedelta(days=5))
        events.close_event(late.id)

        adherence = get_analytics_service().get_event_schedule_adherence()

        assert adherence == [{'event_type': 'Repair', 'average_delay': 2.0}]
