from datetime import timedelta
from moldtrack import db
from moldtrack.utils.parsing import parse_date

MACHINE_OPERATIONAL = 'Operational'
MACHINE_IN_MAINTENANCE = 'InMaintenance'
MACHINE_STOPPED = 'Stopped'

MACHINE_STATUSES = (MACHINE_OPERATIONAL, MACHINE_IN_MAINTENANCE, MACHINE_STOPPED)


class Machine(db.Model):
    """Equipo de producción (inyectora). Su estado lo editan los usuarios."""

    __tablename__ = 'machines'

    code = db.Column(db.String(50), primary_key=True)
    description = db.Column(db.String(200), nullable=False, default='')
    machine_type = db.Column(db.String(50), nullable=True)

    status = db.Column(db.String(20), default=MACHINE_OPERATIONAL, nullable=False)
    is_deleted = db.Column(db.Boolean, default=False, nullable=False, index=True)

    purchase_cost = db.Column(db.Float, nullable=True)
    manufacturing_year = db.Column(db.Integer, nullable=True)
    serial_number = db.Column(db.String(100), nullable=True)

    # [{id, description, intervalDays, lastPerformed, nextDue}]
    maintenance_schedules = db.Column(db.JSON, default=list)

    custom_fields = db.Column(db.JSON, default=dict)
    attachments = db.Column(db.JSON, default=list)

    def find_schedule(self, task_id):
        for task in self.maintenance_schedules or []:
            if task.get('id') == task_id:
                return task
        return None

    def to_dict(self):
        return {
            'id': self.code,
            'code': self.code,
            'description': self.description,
            'machine_type': self.machine_type,
            'status': self.status,
            'is_deleted': self.is_deleted,
            'purchase_cost': self.purchase_cost,
            'manufacturing_year': self.manufacturing_year,
            'serial_number': self.serial_number,
            'maintenance_schedules': self.maintenance_schedules or [],
            'custom_fields': self.custom_fields or {},
            'attachments': self.attachments or [],
        }

    def __repr__(self):
        return f'<Machine {self.code} {self.status}>'


def compute_next_due(last_performed, interval_days):
    """
    Próxima fecha de mantenimiento = última realización + intervalo.
    Retorna string ISO o None si falta alguno de los dos datos.
    """
    last = parse_date(last_performed, 'lastPerformed')
    if last is None or not interval_days:
        return None
    return (last + timedelta(days=int(interval_days))).isoformat()
