"""
Tests de inventario: altas, árbol de moldes, bajas lógicas y adjuntos.
"""
import pytest

from moldtrack import db
from moldtrack.exceptions import DuplicateCodeError, NotFoundError, ValidationError
from moldtrack.models.component import Component
from moldtrack.models.machine import Machine
from moldtrack.models.mold import Mold
from moldtrack.services.inventory_service import get_inventory_service
from moldtrack.services.production_service import get_production_service


class TestMolds:

    def test_codigo_duplicado(self, mold):
        with pytest.raises(DuplicateCodeError):
            get_inventory_service().create_mold({'code': 'ST-001'})

    def test_codigo_requerido(self, app):
        with pytest.raises(ValidationError):
            get_inventory_service().create_mold({'description': 'Sin código'})

    def test_arbol_de_moldes(self, mold):
        service = get_inventory_service()
        service.create_mold({'code': 'ST-001-A', 'parent': 'ST-001'})
        service.create_mold({'code': 'ST-001-A1', 'parent': 'ST-001-A'})
        service.create_mold({'code': 'ST-002'})

        forest = service.get_molds()

        assert [m['code'] for m in forest] == ['ST-001', 'ST-002']
        child = forest[0]['children'][0]
        assert child['code'] == 'ST-001-A'
        assert [m['code'] for m in child['children']] == ['ST-001-A1']

    def test_padre_inexistente(self, app):
        with pytest.raises(NotFoundError):
            get_inventory_service().create_mold({'code': 'ST-009', 'parent': 'NO-EXISTE'})

    def test_ciclo_de_padres(self, mold):
        service = get_inventory_service()
        service.create_mold({'code': 'ST-001-A', 'parent': 'ST-001'})

        with pytest.raises(ValidationError):
            service.update_mold('ST-001', {'parent': 'ST-001-A'})
        with pytest.raises(ValidationError):
            service.update_mold('ST-001', {'parent': 'ST-001'})

    def test_ubicacion_externa(self, app):
        mold = get_inventory_service().create_mold({
            'code': 'ST-050',
            'location': {'type': 'external', 'value': 'Stampi Srl'},
        })
        assert mold.to_dict()['location'] == {'type': 'external', 'value': 'Stampi Srl'}

    def test_ubicacion_invalida(self, app):
        with pytest.raises(ValidationError):
            get_inventory_service().create_mold({'code': 'ST-051', 'location': {'type': 'luna'}})

    def test_baja_logica(self, mold):
        service = get_inventory_service()
        service.soft_delete('mold', 'ST-001')

        assert service.get_mold('ST-001') is None
        assert service.get_molds() == []
        with pytest.raises(NotFoundError):
            service.update_mold('ST-001', {'description': 'x'})
        # El código sigue ocupado
        with pytest.raises(DuplicateCodeError):
            service.create_mold({'code': 'ST-001'})

    def test_hijo_de_padre_archivado_queda_arriba(self, mold):
        service = get_inventory_service()
        service.create_mold({'code': 'ST-001-A', 'parent': 'ST-001'})
        service.soft_delete('mold', 'ST-001')

        assert [m['code'] for m in service.get_molds()] == ['ST-001-A']

    def test_estado_invalido(self, mold):
        with pytest.raises(ValidationError):
            get_inventory_service().update_mold('ST-001', {'status': 'Roto'})

    def test_campos_personalizados(self, app):
        service = get_inventory_service()
        mold = service.create_mold({'code': 'ST-060', 'custom_fields': {'Cliente': 'Acme'}})
        assert mold.custom_fields == {'Cliente': 'Acme'}

        with pytest.raises(ValidationError):
            service.create_mold({'code': 'ST-061', 'custom_fields': {'Cliente': ''}})


class TestComponents:

    def test_alta_con_ciclos_en_cero(self, component):
        assert component.total_cycles == 0
        assert component.status == 'Active'

    def test_codigo_duplicado(self, component):
        get_production_service().log_production('C-100', 40, 2)

        with pytest.raises(DuplicateCodeError):
            get_inventory_service().create_component({'code': 'C-100', 'description': 'Otra tapa'})

        assert Component.query.count() == 1
        original = db.session.get(Component, 'C-100')
        assert original.description == 'Tapa balde'
        assert original.total_cycles == 42

    def test_asociar_a_molde(self, mold, component):
        service = get_inventory_service()
        service.create_component({'code': 'C-200'})

        service.associate_components_to_mold('ST-001', ['C-100', 'C-200'])
        service.associate_components_to_mold('ST-001', ['C-100'])

        assert [c.code for c in service.get_components_for_mold('ST-001')] == ['C-100', 'C-200']
        assert service.get_component('C-100').associated_molds == ['ST-001']

    def test_asociar_lista_vacia(self, mold):
        with pytest.raises(ValidationError):
            get_inventory_service().associate_components_to_mold('ST-001', [])

    def test_asociar_componente_inexistente(self, mold, component):
        service = get_inventory_service()
        with pytest.raises(NotFoundError):
            service.associate_components_to_mold('ST-001', ['C-100', 'NO-EXISTE'])
        assert service.get_component('C-100').associated_molds == []

    def test_checklist(self, app):
        component = get_inventory_service().create_component({
            'code': 'C-300',
            'checklist': [{'text': 'Verificar rebaba'}],
        })
        item = component.checklist[0]
        assert item['text'] == 'Verificar rebaba'
        assert item['isChecked'] is False
        assert item['id']

    def test_stamping_data_desconocida(self, app):
        with pytest.raises(ValidationError):
            get_inventory_service().create_component({'code': 'C-301', 'stamping_data': {'foo': 1}})


class TestMachines:

    def test_codigo_duplicado(self, machine):
        with pytest.raises(DuplicateCodeError):
            get_inventory_service().create_machine({'code': 'M-01', 'description': 'Otra inyectora'})

        assert Machine.query.count() == 1
        original = db.session.get(Machine, 'M-01')
        assert original.description == 'Inyectora 250T'
        assert original.find_schedule('T1')['nextDue'] == '2026-01-31'

    def test_codigo_usado_por_un_molde(self, mold):
        """Moldes y máquinas no pueden compartir código"""
        with pytest.raises(DuplicateCodeError):
            get_inventory_service().create_machine({'code': 'ST-001'})
        assert Machine.query.count() == 0

    def test_molde_con_codigo_de_maquina(self, machine):
        with pytest.raises(DuplicateCodeError):
            get_inventory_service().create_mold({'code': 'M-01'})
        assert Mold.query.count() == 0

    def test_plan_calcula_proxima_fecha(self, machine):
        task = machine.maintenance_schedules[0]
        assert task['nextDue'] == '2026-01-31'

    def test_plan_sin_ultima_realizacion(self, app):
        machine = get_inventory_service().create_machine({
            'code': 'M-02',
            'maintenance_schedules': [{'description': 'Engrase', 'intervalDays': 7, 'nextDue': '2026-11-05'}],
        })
        task = machine.maintenance_schedules[0]
        assert task['lastPerformed'] is None
        assert task['nextDue'] == '2026-11-05'
        assert task['id']

    def test_intervalo_invalido(self, app):
        with pytest.raises(ValidationError):
            get_inventory_service().create_machine({
                'code': 'M-03',
                'maintenance_schedules': [{'description': 'Engrase', 'intervalDays': 0}],
            })


class TestAttachments:

    def test_agregar_y_quitar(self, mold):
        service = get_inventory_service()
        attachment = service.add_attachment('mold', 'ST-001', 'plano.pdf', 'https://files.local/plano.pdf')

        assert attachment['fileType'] == 'PDF'
        assert attachment['storagePath'] == 'molds/ST-001/plano.pdf'
        assert service.get_mold('ST-001').attachments == [attachment]

        removed = service.remove_attachment('mold', 'ST-001', attachment['id'])
        assert removed['id'] == attachment['id']
        assert service.get_mold('ST-001').attachments == []

    def test_tipo_por_extension(self, machine):
        service = get_inventory_service()
        assert service.add_attachment('machine', 'M-01', 'foto.JPG', 'u')['fileType'] == 'Image'
        assert service.add_attachment('machine', 'M-01', 'pieza.step', 'u')['fileType'] == '3D'
        assert service.add_attachment('machine', 'M-01', 'manual', 'u')['fileType'] == 'Document'

    def test_adjunto_inexistente(self, mold):
        with pytest.raises(NotFoundError):
            get_inventory_service().remove_attachment('mold', 'ST-001', 'nope')

    def test_tipo_de_registro_invalido(self, app):
        with pytest.raises(ValidationError):
            get_inventory_service().add_attachment('user', 'X', 'a.pdf', 'u')
