"""
Fixtures compartidas: app con SQLite en memoria y datos base.
"""
import pytest

from moldtrack import create_app, db
from moldtrack.services.inventory_service import get_inventory_service


@pytest.fixture
def app():
    app = create_app('moldtrack.config.TestConfig')

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def mold(app):
    """Molde operativo ST-001"""
    return get_inventory_service().create_mold({'code': 'ST-001', 'description': 'Balde 20L'})


@pytest.fixture
def component(app):
    """Componente C-100 con 0 ciclos"""
    return get_inventory_service().create_component({'code': 'C-100', 'description': 'Tapa balde'})


@pytest.fixture
def machine(app):
    """Inyectora M-01 con una tarea de mantenimiento cada 30 días"""
    return get_inventory_service().create_machine({
        'code': 'M-01',
        'description': 'Inyectora 250T',
        'maintenance_schedules': [{
            'id': 'T1',
            'description': 'Cambio de aceite hidráulico',
            'intervalDays': 30,
            'lastPerformed': '2026-01-01',
        }],
    })
