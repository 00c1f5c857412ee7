"""
Tests de los endpoints HTTP: códigos de estado y forma de las respuestas.
"""


class TestErrors:

    def test_molde_inexistente(self, client):
        response = client.get('/api/molds/NO-EXISTE')

        assert response.status_code == 404
        data = response.get_json()
        assert data['code'] == 'NOT_FOUND'
        assert 'error' in data

    def test_codigo_duplicado(self, client):
        assert client.post('/api/molds', json={'code': 'ST-001'}).status_code == 201

        response = client.post('/api/molds', json={'code': 'ST-001'})

        assert response.status_code == 409
        assert response.get_json()['code'] == 'DUPLICATE_CODE'

    def test_validacion(self, client, component):
        response = client.post('/api/components/C-100/production', json={
            'user_id': 'OP01', 'good': -1, 'scrapped': 0,
        })

        assert response.status_code == 400
        data = response.get_json()
        assert data['code'] == 'VALIDATION_ERROR'
        assert data['field'] == 'good'

    def test_cuerpo_no_objeto(self, client):
        response = client.post('/api/molds', json=['ST-001'])
        assert response.status_code == 400


class TestInventoryAPI:

    def test_crear_y_listar_arbol(self, client):
        client.post('/api/molds', json={'code': 'ST-001', 'description': 'Balde'})
        client.post('/api/molds', json={'code': 'ST-001-A', 'parent': 'ST-001'})

        molds = client.get('/api/molds').get_json()

        assert len(molds) == 1
        assert molds[0]['children'][0]['code'] == 'ST-001-A'

    def test_archivar(self, client, mold):
        assert client.delete('/api/molds/ST-001').status_code == 204
        assert client.get('/api/molds/ST-001').status_code == 404

    def test_asociar_componentes(self, client, mold, component):
        response = client.post('/api/molds/ST-001/components', json={'component_ids': ['C-100']})
        assert response.status_code == 200

        listed = client.get('/api/molds/ST-001/components').get_json()
        assert [c['code'] for c in listed] == ['C-100']

    def test_adjuntos(self, client, machine):
        response = client.post('/api/machines/M-01/attachments', json={
            'file_name': 'manual.pdf', 'url': 'https://files.local/manual.pdf',
        })
        assert response.status_code == 201
        attachment_id = response.get_json()['id']

        assert client.delete(f'/api/machines/M-01/attachments/{attachment_id}').status_code == 204
        assert client.get('/api/machines/M-01').get_json()['attachments'] == []


class TestProductionAPI:

    def test_ciclo_completo(self, client, component):
        response = client.post('/api/components/C-100/production', json={
            'user_id': 'OP01', 'good': 100, 'scrapped': 5, 'scrap_reason': 'Rebaba',
        })
        assert response.status_code == 201
        entry = response.get_json()
        assert entry['component_id'] == 'C-100'
        assert entry['user'] == 'OP01'
        assert client.get('/api/components/C-100').get_json()['total_cycles'] == 105

        response = client.put(f"/api/production/{entry['id']}", json={'good': 90})
        assert response.status_code == 200
        assert client.get('/api/components/C-100').get_json()['total_cycles'] == 95

        assert client.delete(f"/api/production/{entry['id']}").status_code == 204
        assert client.get('/api/components/C-100').get_json()['total_cycles'] == 0
        assert client.get(f"/api/production/{entry['id']}").status_code == 404

    def test_usuario_requerido(self, client, component):
        response = client.post('/api/components/C-100/production', json={'good': 1, 'scrapped': 0})
        assert response.status_code == 400

    def test_usuario_por_header(self, client, component):
        response = client.post(
            '/api/components/C-100/production',
            json={'good': 1, 'scrapped': 0},
            headers={'X-User-Id': 'OP07'},
        )
        assert response.status_code == 201
        assert response.get_json()['user'] == 'OP07'


class TestStampingAPI:

    def test_actualizar_y_ver_historial(self, client, component):
        response = client.put('/api/components/C-100/stamping-data', json={
            'user_id': 'OP01', 'stamping_data': {'cycleTime': 32.5},
        })

        assert response.status_code == 200
        data = response.get_json()
        assert data['component']['stamping_data'] == {'cycleTime': 32.5}
        assert data['history_entry']['changed_data'] == {'cycleTime': 32.5}

        history = client.get('/api/components/C-100/stamping-history').get_json()
        assert len(history) == 1
        assert history[0]['user'] == 'OP01'

    def test_sin_cambios(self, client, component):
        body = {'user_id': 'OP01', 'stamping_data': {'cycleTime': 30}}
        client.put('/api/components/C-100/stamping-data', json=body)

        response = client.put('/api/components/C-100/stamping-data', json=body)
        assert response.get_json()['history_entry'] is None

    def test_put_componente_sin_stamping_no_pide_usuario(self, client, component):
        response = client.put('/api/components/C-100', json={'description': 'Tapa'})
        assert response.status_code == 200
        assert response.get_json()['description'] == 'Tapa'


class TestEventsAPI:

    def test_crear_y_cerrar(self, client, mold):
        response = client.post('/api/events', json={'source_id': 'ST-001', 'type': 'Repair', 'cost': 350})
        assert response.status_code == 201
        event_id = response.get_json()['id']
        assert client.get('/api/molds/ST-001').get_json()['status'] == 'InMaintenance'

        response = client.post(f'/api/events/{event_id}/close')
        assert response.status_code == 200
        assert response.get_json()['status'] == 'Closed'
        assert client.get('/api/molds/ST-001').get_json()['status'] == 'Operational'

        timeline = client.get('/api/molds/ST-001/events').get_json()
        assert [e['id'] for e in timeline] == [event_id]

    def test_reabrir_es_conflicto(self, client, mold):
        event_id = client.post('/api/events', json={'source_id': 'ST-001', 'type': 'Repair'}).get_json()['id']
        client.post(f'/api/events/{event_id}/close')

        response = client.put(f'/api/events/{event_id}', json={'status': 'Open'})

        assert response.status_code == 409
        assert response.get_json()['code'] == 'INVALID_STATE'

    def test_proximos(self, client, mold):
        client.post('/api/events', json={'source_id': 'ST-001', 'type': 'Other', 'estimated_end_date': '2026-12-01'})

        upcoming = client.get('/api/events/upcoming').get_json()
        assert upcoming[0]['estimated_end_date'] == '2026-12-01'


class TestMaintenanceRequestsAPI:

    def test_aprobar(self, client, mold):
        response = client.post('/api/maintenance-requests', json={
            'user_id': 'OP01', 'source_id': 'ST-001', 'description': 'Fuga de agua',
        })
        assert response.status_code == 201
        request_id = response.get_json()['id']

        response = client.post(f'/api/maintenance-requests/{request_id}/status', json={'status': 'Approved'})
        assert response.status_code == 200
        assert response.get_json()['event_id'] is not None

        response = client.post(f'/api/maintenance-requests/{request_id}/status', json={'status': 'Rejected'})
        assert response.status_code == 409
        assert len(client.get('/api/events').get_json()) == 1


class TestUsersAndAnalyticsAPI:

    def test_usuarios(self, client):
        response = client.post('/api/users', json={'code': 'OP01', 'name': 'Luis'})
        assert response.status_code == 201

        assert client.get('/api/users/OP01').get_json()['name'] == 'Luis'
        assert client.get('/api/users/NADIE').status_code == 404

    def test_analytics(self, client, mold, component):
        client.post('/api/components/C-100/production', json={'user_id': 'OP01', 'good': 75, 'scrapped': 25})

        assert client.get('/api/analytics/stats').get_json()['total_molds'] == 1
        rates = client.get('/api/analytics/scrap-rate?days=7').get_json()
        assert rates == [{'component_id': 'C-100', 'component_code': 'C-100', 'scrap_rate': 25.0}]
        for path in ('mold-status', 'suppliers', 'maintenance-costs', 'schedule-adherence'):
            assert client.get(f'/api/analytics/{path}').status_code == 200
