"""
Servicio de inventario: moldes, componentes y máquinas.

El código humano es la clave primaria de cada registro. Las altas verifican
que el código no exista (DuplicateCodeError) y las bajas son lógicas
(is_deleted=True), nunca se borra la fila.
"""
import uuid
from collections import defaultdict
from datetime import datetime, timezone
from typing import List, Optional

from moldtrack import db
from moldtrack.exceptions import DuplicateCodeError, NotFoundError, ValidationError
from moldtrack.models.component import Component, COMPONENT_STATUSES
from moldtrack.models.machine import Machine, MACHINE_STATUSES, compute_next_due
from moldtrack.models.mold import Mold, MOLD_STATUSES, LOCATION_TYPES, LOCATION_INTERNAL
from moldtrack.services.base import unit_of_work
from moldtrack.services.stamping_service import get_stamping_service, validate_stamping_data
from moldtrack.utils.logger import get_inventory_logger
from moldtrack.utils.parsing import (
    file_type_for, parse_date, parse_optional_number, require_text, validate_custom_fields,
)

log = get_inventory_logger()

# kind -> (modelo, nombre para mensajes)
ENTITY_KINDS = {
    'mold': (Mold, 'Molde'),
    'component': (Component, 'Componente'),
    'machine': (Machine, 'Máquina'),
}


def _check_status(value, allowed):
    if value not in allowed:
        raise ValidationError(f"Estado inválido '{value}'. Permitidos: {', '.join(allowed)}", field='status')
    return value


def _normalize_location(location):
    if location is None:
        return LOCATION_INTERNAL, None
    if not isinstance(location, dict):
        raise ValidationError('location debe ser un objeto {type, value}', field='location')
    location_type = location.get('type', LOCATION_INTERNAL)
    if location_type not in LOCATION_TYPES:
        raise ValidationError(f"Tipo de ubicación inválido '{location_type}'", field='location')
    return location_type, location.get('value')


def _normalize_checklist(items):
    if items is None:
        return []
    if not isinstance(items, list):
        raise ValidationError('checklist debe ser una lista', field='checklist')
    checklist = []
    for item in items:
        if not isinstance(item, dict):
            raise ValidationError('checklist: cada ítem debe ser un objeto', field='checklist')
        checklist.append({
            'id': item.get('id') or uuid.uuid4().hex,
            'text': require_text(item.get('text'), 'checklist.text'),
            'isChecked': bool(item.get('isChecked', False)),
        })
    return checklist


def _normalize_schedules(tasks):
    """Plan de mantenimiento: asigna ids y deriva nextDue = lastPerformed + intervalDays."""
    if tasks is None:
        return []
    if not isinstance(tasks, list):
        raise ValidationError('maintenance_schedules debe ser una lista', field='maintenance_schedules')
    schedules = []
    for task in tasks:
        if not isinstance(task, dict):
            raise ValidationError('maintenance_schedules: cada tarea debe ser un objeto', field='maintenance_schedules')
        interval = task.get('intervalDays')
        if isinstance(interval, bool) or not isinstance(interval, int) or interval <= 0:
            raise ValidationError('intervalDays debe ser un entero positivo', field='maintenance_schedules')
        last = parse_date(task.get('lastPerformed'), 'lastPerformed')
        next_due = compute_next_due(last, interval)
        if next_due is None:
            # Sin última realización se respeta la fecha dada por el planificador externo
            given = parse_date(task.get('nextDue'), 'nextDue')
            next_due = given.isoformat() if given else None
        schedules.append({
            'id': task.get('id') or uuid.uuid4().hex,
            'description': require_text(task.get('description'), 'maintenance_schedules.description'),
            'intervalDays': interval,
            'lastPerformed': last.isoformat() if last else None,
            'nextDue': next_due,
        })
    return schedules


def build_mold_forest(molds: List[Mold]) -> List[dict]:
    """
    Arma el árbol de moldes a partir de parent_code.

    Un molde cuyo padre no está en la lista (borrado o inexistente) queda en
    el nivel superior. Los hijos se indexan al leer, no se guardan.
    """
    by_code = {m.code: m for m in molds}
    children_index = defaultdict(list)
    roots = []
    for mold in molds:
        if mold.parent_code and mold.parent_code in by_code and mold.parent_code != mold.code:
            children_index[mold.parent_code].append(mold)
        else:
            roots.append(mold)

    visited = set()

    def render(mold):
        visited.add(mold.code)
        children = [render(c) for c in children_index[mold.code] if c.code not in visited]
        return mold.to_dict(children=children)

    forest = [render(m) for m in roots]
    # Ciclos heredados de datos viejos: no tienen raíz, se muestran arriba
    for mold in molds:
        if mold.code not in visited:
            forest.append(render(mold))
    return forest


class InventoryService:
    """Servicio CRUD para moldes, componentes y máquinas."""

    # === Lectura ===

    def _get_active(self, kind: str, code: str):
        model, _ = ENTITY_KINDS[kind]
        record = db.session.get(model, code)
        if record is None or record.is_deleted:
            return None
        return record

    def _require_active(self, kind: str, code: str):
        record = self._get_active(kind, code)
        if record is None:
            raise NotFoundError(ENTITY_KINDS[kind][1], code)
        return record

    def get_mold(self, code: str) -> Optional[Mold]:
        return self._get_active('mold', code)

    def get_component(self, code: str) -> Optional[Component]:
        return self._get_active('component', code)

    def get_machine(self, code: str) -> Optional[Machine]:
        return self._get_active('machine', code)

    def get_molds(self) -> List[dict]:
        """Moldes no borrados, ordenados por código, como bosque con 'children'."""
        molds = Mold.query.filter_by(is_deleted=False).order_by(Mold.code).all()
        return build_mold_forest(molds)

    def get_components(self) -> List[Component]:
        return Component.query.filter_by(is_deleted=False).order_by(Component.code).all()

    def get_machines(self) -> List[Machine]:
        return Machine.query.filter_by(is_deleted=False).order_by(Machine.code).all()

    def get_components_for_mold(self, mold_code: str) -> List[Component]:
        return [c for c in self.get_components() if mold_code in (c.associated_molds or [])]

    # === Altas ===

    def _ensure_code_free(self, session, model, entity: str, code: str):
        if session.get(model, code) is not None:
            log.warning(f"Alta rechazada: {entity} {code} ya existe")
            raise DuplicateCodeError(entity, code)

    def create_mold(self, data: dict) -> Mold:
        code = require_text(data.get('code'), 'code')
        location_type, location_value = _normalize_location(data.get('location'))
        parent_code = data.get('parent') or None
        if parent_code is not None and self.get_mold(parent_code) is None:
            raise NotFoundError('Molde padre', parent_code)

        with unit_of_work(conflict=DuplicateCodeError('Molde', code)) as session:
            self._ensure_code_free(session, Mold, 'Molde', code)
            # Moldes y máquinas comparten el espacio de códigos (source_id de eventos)
            self._ensure_code_free(session, Machine, 'Máquina', code)
            mold = Mold(
                code=code,
                description=data.get('description') or '',
                parent_code=parent_code,
                location_type=location_type,
                location_value=location_value,
                machine_code=data.get('machine_code'),
                technical_data=data.get('technical_data'),
                management_data=data.get('management_data'),
                custom_fields=validate_custom_fields(data.get('custom_fields')),
                attachments=[],
            )
            session.add(mold)

        log.info(f"✅ Molde {code} creado")
        return mold

    def create_component(self, data: dict) -> Component:
        code = require_text(data.get('code'), 'code')
        stamping_data = data.get('stamping_data')
        if stamping_data is not None:
            stamping_data = validate_stamping_data(stamping_data)
        checklist = _normalize_checklist(data.get('checklist'))
        weight = parse_optional_number(data.get('weight'), 'weight', minimum=0)
        release_date = parse_date(data.get('release_date'), 'release_date')

        with unit_of_work(conflict=DuplicateCodeError('Componente', code)) as session:
            self._ensure_code_free(session, Component, 'Componente', code)
            component = Component(
                code=code,
                description=data.get('description') or '',
                material=data.get('material'),
                weight=weight,
                total_cycles=0,
                associated_molds=sorted(set(data.get('associated_molds') or [])),
                stamping_data=stamping_data,
                checklist=checklist,
                raw_material_code=data.get('raw_material_code'),
                release_date=release_date,
                is_aesthetic=bool(data.get('is_aesthetic', False)),
                is_food_contact=bool(data.get('is_food_contact', False)),
                custom_fields=validate_custom_fields(data.get('custom_fields')),
                attachments=[],
            )
            session.add(component)

        log.info(f"✅ Componente {code} creado")
        return component

    def create_machine(self, data: dict) -> Machine:
        code = require_text(data.get('code'), 'code')
        schedules = _normalize_schedules(data.get('maintenance_schedules'))
        purchase_cost = parse_optional_number(data.get('purchase_cost'), 'purchase_cost', minimum=0)

        with unit_of_work(conflict=DuplicateCodeError('Máquina', code)) as session:
            self._ensure_code_free(session, Mold, 'Molde', code)
            self._ensure_code_free(session, Machine, 'Máquina', code)
            machine = Machine(
                code=code,
                description=data.get('description') or '',
                machine_type=data.get('machine_type'),
                purchase_cost=purchase_cost,
                manufacturing_year=data.get('manufacturing_year'),
                serial_number=data.get('serial_number'),
                maintenance_schedules=schedules,
                custom_fields=validate_custom_fields(data.get('custom_fields')),
                attachments=[],
            )
            session.add(machine)

        log.info(f"✅ Máquina {code} creada")
        return machine

    # === Modificaciones ===

    def _descendant_codes(self, code: str) -> set:
        """Códigos de todos los descendientes de un molde (incluye borrados)."""
        children_index = defaultdict(list)
        for child_code, parent_code in Mold.query.with_entities(Mold.code, Mold.parent_code):
            if parent_code:
                children_index[parent_code].append(child_code)
        found, pending = set(), [code]
        while pending:
            for child in children_index[pending.pop()]:
                if child not in found:
                    found.add(child)
                    pending.append(child)
        return found

    def update_mold(self, code: str, data: dict) -> Mold:
        with unit_of_work():
            mold = self._require_active('mold', code)

            if 'description' in data:
                mold.description = data['description'] or ''
            if 'status' in data:
                mold.status = _check_status(data['status'], MOLD_STATUSES)
            if 'location' in data:
                mold.location_type, mold.location_value = _normalize_location(data['location'])
            if 'machine_code' in data:
                mold.machine_code = data['machine_code']
            if 'technical_data' in data:
                mold.technical_data = data['technical_data']
            if 'management_data' in data:
                mold.management_data = data['management_data']
            if 'custom_fields' in data:
                mold.custom_fields = validate_custom_fields(data['custom_fields'])
            if 'parent' in data:
                parent_code = data['parent'] or None
                if parent_code is not None:
                    if parent_code == code or parent_code in self._descendant_codes(code):
                        raise ValidationError('Un molde no puede colgar de sí mismo ni de un descendiente', field='parent')
                    if self.get_mold(parent_code) is None:
                        raise NotFoundError('Molde padre', parent_code)
                mold.parent_code = parent_code

        log.info(f"Molde {code} actualizado: {sorted(data)}")
        return mold

    def update_component(self, code: str, data: dict, user_id: str = None) -> Component:
        """
        Actualiza un componente. total_cycles no es editable (lo lleva el ledger).
        Si viene stamping_data se registra la auditoría antes de escribirlo.
        """
        with unit_of_work():
            component = self._require_active('component', code)

            if 'description' in data:
                component.description = data['description'] or ''
            if 'material' in data:
                component.material = data['material']
            if 'weight' in data:
                component.weight = parse_optional_number(data['weight'], 'weight', minimum=0)
            if 'status' in data:
                component.status = _check_status(data['status'], COMPONENT_STATUSES)
            if 'associated_molds' in data:
                component.associated_molds = sorted(set(data['associated_molds'] or []))
            if 'checklist' in data:
                component.checklist = _normalize_checklist(data['checklist'])
            if 'raw_material_code' in data:
                component.raw_material_code = data['raw_material_code']
            if 'release_date' in data:
                component.release_date = parse_date(data['release_date'], 'release_date')
            if 'is_aesthetic' in data:
                component.is_aesthetic = bool(data['is_aesthetic'])
            if 'is_food_contact' in data:
                component.is_food_contact = bool(data['is_food_contact'])
            if 'custom_fields' in data:
                component.custom_fields = validate_custom_fields(data['custom_fields'])
            if data.get('stamping_data') is not None:
                get_stamping_service().apply_stamping_data(component, user_id, data['stamping_data'])

        log.info(f"Componente {code} actualizado: {sorted(data)}")
        return component

    def update_machine(self, code: str, data: dict) -> Machine:
        with unit_of_work():
            machine = self._require_active('machine', code)

            if 'description' in data:
                machine.description = data['description'] or ''
            if 'machine_type' in data:
                machine.machine_type = data['machine_type']
            if 'status' in data:
                machine.status = _check_status(data['status'], MACHINE_STATUSES)
            if 'purchase_cost' in data:
                machine.purchase_cost = parse_optional_number(data['purchase_cost'], 'purchase_cost', minimum=0)
            if 'manufacturing_year' in data:
                machine.manufacturing_year = data['manufacturing_year']
            if 'serial_number' in data:
                machine.serial_number = data['serial_number']
            if 'maintenance_schedules' in data:
                machine.maintenance_schedules = _normalize_schedules(data['maintenance_schedules'])
            if 'custom_fields' in data:
                machine.custom_fields = validate_custom_fields(data['custom_fields'])

        log.info(f"Máquina {code} actualizada: {sorted(data)}")
        return machine

    def soft_delete(self, kind: str, code: str):
        """Baja lógica: is_deleted=True. El historial se conserva."""
        if kind not in ENTITY_KINDS:
            raise ValidationError(f"Tipo de registro inválido '{kind}'", field='kind')
        with unit_of_work():
            record = self._require_active(kind, code)
            record.is_deleted = True
        log.info(f"🗑️ {ENTITY_KINDS[kind][1]} {code} archivado")

    def associate_components_to_mold(self, mold_code: str, component_codes: List[str]) -> List[Component]:
        if not component_codes:
            raise ValidationError('No se indicaron componentes', field='component_ids')

        with unit_of_work():
            self._require_active('mold', mold_code)
            components = [self._require_active('component', c) for c in component_codes]
            for component in components:
                molds = set(component.associated_molds or [])
                molds.add(mold_code)
                component.associated_molds = sorted(molds)

        log.info(f"Molde {mold_code}: asociados {len(components)} componentes")
        return components

    # === Adjuntos (solo metadatos, los bytes van al blob store) ===

    def add_attachment(self, kind: str, code: str, file_name: str, url: str, storage_path: str = None) -> dict:
        if kind not in ENTITY_KINDS:
            raise ValidationError(f"Tipo de registro inválido '{kind}'", field='kind')
        file_name = require_text(file_name, 'file_name')
        url = require_text(url, 'url')

        attachment = {
            'id': uuid.uuid4().hex,
            'fileName': file_name,
            'fileType': file_type_for(file_name),
            'url': url,
            'uploadedAt': datetime.now(timezone.utc).isoformat(),
            'storagePath': storage_path or f'{kind}s/{code}/{file_name}',
        }
        with unit_of_work():
            record = self._require_active(kind, code)
            record.attachments = list(record.attachments or []) + [attachment]

        log.info(f"📎 Adjunto {file_name} agregado a {kind} {code}")
        return attachment

    def remove_attachment(self, kind: str, code: str, attachment_id: str) -> dict:
        if kind not in ENTITY_KINDS:
            raise ValidationError(f"Tipo de registro inválido '{kind}'", field='kind')
        with unit_of_work():
            record = self._require_active(kind, code)
            current = list(record.attachments or [])
            removed = next((a for a in current if a.get('id') == attachment_id), None)
            if removed is None:
                raise NotFoundError('Adjunto', attachment_id)
            record.attachments = [a for a in current if a.get('id') != attachment_id]

        log.info(f"Adjunto {attachment_id} eliminado de {kind} {code}")
        return removed


# Instancia global
_inventory_service: Optional[InventoryService] = None


def get_inventory_service() -> InventoryService:
    """Obtiene la instancia del servicio de inventario."""
    global _inventory_service
    if _inventory_service is None:
        _inventory_service = InventoryService()
    return _inventory_service
