from moldtrack import db

COMPONENT_ACTIVE = 'Active'
COMPONENT_BEING_MODIFIED = 'BeingModified'
COMPONENT_OBSOLETE = 'Obsolete'

COMPONENT_STATUSES = (COMPONENT_ACTIVE, COMPONENT_BEING_MODIFIED, COMPONENT_OBSOLETE)

# Parámetros de proceso de inyección que se auditan
STAMPING_FIELDS = (
    'programName', 'cycleTime', 'injectionTime', 'holdingPressure',
    'meltTemperature', 'moldTemperature', 'clampForce', 'injectionPressure',
    'postPressure', 'maintenanceTime', 'coolingTime', 'counterPressure',
    'injectionSpeed',
)


class Component(db.Model):
    """
    Pieza fabricada por uno o más moldes.

    total_cycles es el acumulado de (good + scrapped) de sus producciones;
    solo se modifica con incrementos atómicos desde ProductionService.
    """

    __tablename__ = 'components'

    code = db.Column(db.String(50), primary_key=True)
    description = db.Column(db.String(200), nullable=False, default='')
    material = db.Column(db.String(100), nullable=True)
    weight = db.Column(db.Float, nullable=True)

    status = db.Column(db.String(20), default=COMPONENT_ACTIVE, nullable=False)
    total_cycles = db.Column(db.Integer, default=0, nullable=False)
    is_deleted = db.Column(db.Boolean, default=False, nullable=False, index=True)

    associated_molds = db.Column(db.JSON, default=list)  # códigos de molde
    stamping_data = db.Column(db.JSON, nullable=True)
    checklist = db.Column(db.JSON, default=list)          # [{id, text, isChecked}]

    raw_material_code = db.Column(db.String(50), nullable=True)
    release_date = db.Column(db.Date, nullable=True)
    is_aesthetic = db.Column(db.Boolean, default=False)
    is_food_contact = db.Column(db.Boolean, default=False)

    custom_fields = db.Column(db.JSON, default=dict)
    attachments = db.Column(db.JSON, default=list)

    def to_dict(self):
        return {
            'id': self.code,
            'code': self.code,
            'description': self.description,
            'material': self.material,
            'weight': self.weight,
            'status': self.status,
            'total_cycles': self.total_cycles,
            'is_deleted': self.is_deleted,
            'associated_molds': self.associated_molds or [],
            'stamping_data': self.stamping_data,
            'checklist': self.checklist or [],
            'raw_material_code': self.raw_material_code,
            'release_date': self.release_date.isoformat() if self.release_date else None,
            'is_aesthetic': bool(self.is_aesthetic),
            'is_food_contact': bool(self.is_food_contact),
            'custom_fields': self.custom_fields or {},
            'attachments': self.attachments or [],
        }

    def __repr__(self):
        return f'<Component {self.code}: {self.total_cycles} ciclos>'
