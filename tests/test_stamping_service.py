"""
Tests de auditoría de stamping data.
"""
import pytest

from moldtrack import db
from moldtrack.exceptions import NotFoundError, ValidationError
from moldtrack.models.component import Component
from moldtrack.models.stamping_history import StampingHistoryEntry
from moldtrack.services.inventory_service import get_inventory_service
from moldtrack.services.stamping_service import diff_stamping_data, get_stamping_service


class TestDiff:

    def test_sin_cambios(self):
        assert diff_stamping_data({'cycleTime': 30}, {'cycleTime': 30}) == {}

    def test_solo_lo_que_cambia(self):
        old = {'cycleTime': 30, 'meltTemperature': 220}
        new = {'cycleTime': 30, 'meltTemperature': 230}
        assert diff_stamping_data(old, new) == {'meltTemperature': 230}

    def test_clave_ausente_distinta_de_none(self):
        assert diff_stamping_data({}, {'clampForce': None}) == {'clampForce': None}
        assert diff_stamping_data(None, {'cycleTime': 30}) == {'cycleTime': 30}

    def test_claves_viejas_no_aparecen(self):
        assert diff_stamping_data({'cycleTime': 30, 'coolingTime': 8}, {'cycleTime': 31}) == {'cycleTime': 31}


class TestStampingHistory:

    def test_primera_carga_se_audita(self, component):
        entry = get_stamping_service().update_stamping_data('C-100', 'OP01', {'cycleTime': 30})

        assert entry.user_id == 'OP01'
        assert entry.changed_data == {'cycleTime': 30}
        assert db.session.get(Component, 'C-100').stamping_data == {'cycleTime': 30}

    def test_sin_cambios_no_crea_entrada(self, component):
        service = get_stamping_service()
        service.update_stamping_data('C-100', 'OP01', {'cycleTime': 30})

        assert service.update_stamping_data('C-100', 'OP02', {'cycleTime': 30}) is None
        assert StampingHistoryEntry.query.count() == 1

    def test_se_fusiona_con_lo_existente(self, component):
        service = get_stamping_service()
        service.update_stamping_data('C-100', 'OP01', {'cycleTime': 30, 'meltTemperature': 220})
        entry = service.update_stamping_data('C-100', 'OP01', {'meltTemperature': 230})

        assert entry.changed_data == {'meltTemperature': 230}
        assert db.session.get(Component, 'C-100').stamping_data == {'cycleTime': 30, 'meltTemperature': 230}

    def test_registrar_cambio_sin_escribir(self, component):
        entry = get_stamping_service().record_stamping_data_change('C-100', 'OP01', {'cycleTime': 28})

        assert entry.changed_data == {'cycleTime': 28}
        assert db.session.get(Component, 'C-100').stamping_data is None

    def test_parametro_desconocido(self, component):
        with pytest.raises(ValidationError):
            get_stamping_service().update_stamping_data('C-100', 'OP01', {'velocidad': 3})
        assert StampingHistoryEntry.query.count() == 0

    def test_componente_inexistente(self, app):
        with pytest.raises(NotFoundError):
            get_stamping_service().update_stamping_data('NO-EXISTE', 'OP01', {'cycleTime': 30})

    def test_update_component_audita(self, component):
        get_inventory_service().update_component(
            'C-100', {'description': 'Tapa', 'stamping_data': {'holdingPressure': 80}}, user_id='OP03'
        )

        history = get_stamping_service().get_stamping_history_for_component('C-100')
        assert len(history) == 1
        assert history[0].user_id == 'OP03'
        assert history[0].changed_data == {'holdingPressure': 80}

    def test_historial_mas_reciente_primero(self, component):
        service = get_stamping_service()
        first = service.update_stamping_data('C-100', 'OP01', {'cycleTime': 30})
        second = service.update_stamping_data('C-100', 'OP01', {'cycleTime': 31})

        history = service.get_stamping_history_for_component('C-100')
        assert [e.id for e in history] == [second.id, first.id]
