from datetime import date
from moldtrack import db

MOLD_OPERATIONAL = 'Operational'
MOLD_IN_MAINTENANCE = 'InMaintenance'
MOLD_PROCESSING = 'Processing'
MOLD_STOPPED = 'Stopped'

MOLD_STATUSES = (MOLD_OPERATIONAL, MOLD_IN_MAINTENANCE, MOLD_PROCESSING, MOLD_STOPPED)

LOCATION_INTERNAL = 'internal'
LOCATION_EXTERNAL = 'external'
LOCATION_TYPES = (LOCATION_INTERNAL, LOCATION_EXTERNAL)


class Mold(db.Model):
    """Molde físico de inyección. Puede tener sub-moldes (árbol por parent_code)."""

    __tablename__ = 'molds'

    # El código humano es la clave primaria
    code = db.Column(db.String(50), primary_key=True)
    description = db.Column(db.String(200), nullable=False, default='')
    created_on = db.Column(db.Date, default=date.today, nullable=False)

    # Referencia al molde padre; los hijos se calculan al leer
    parent_code = db.Column(db.String(50), nullable=True, index=True)

    status = db.Column(db.String(20), default=MOLD_OPERATIONAL, nullable=False)
    is_deleted = db.Column(db.Boolean, default=False, nullable=False, index=True)

    # Ubicación: interna (nombre de almacén) o externa (proveedor)
    location_type = db.Column(db.String(10), default=LOCATION_INTERNAL, nullable=False)
    location_value = db.Column(db.String(100), nullable=True)

    machine_code = db.Column(db.String(50), nullable=True)

    technical_data = db.Column(db.JSON, nullable=True)   # impronte, material, dimensiones/peso
    management_data = db.Column(db.JSON, nullable=True)  # costo de compra, vida útil
    custom_fields = db.Column(db.JSON, default=dict)
    attachments = db.Column(db.JSON, default=list)

    def to_dict(self, children=None):
        data = {
            'id': self.code,
            'code': self.code,
            'description': self.description,
            'created_on': self.created_on.isoformat() if self.created_on else None,
            'parent': self.parent_code,
            'status': self.status,
            'is_deleted': self.is_deleted,
            'location': {'type': self.location_type, 'value': self.location_value},
            'machine_code': self.machine_code,
            'technical_data': self.technical_data or {},
            'management_data': self.management_data or {},
            'custom_fields': self.custom_fields or {},
            'attachments': self.attachments or [],
        }
        if children is not None:
            data['children'] = children
        return data

    def __repr__(self):
        return f'<Mold {self.code} {self.status}>'
