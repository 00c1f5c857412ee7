from datetime import datetime, timezone
from moldtrack import db

EVENT_MAINTENANCE = 'Maintenance'
EVENT_PROCESSING = 'Processing'
EVENT_REPAIR = 'Repair'
EVENT_COST = 'Cost'
EVENT_OTHER = 'Other'
EVENT_MAINTENANCE_END = 'MaintenanceEnd'

EVENT_TYPES = (
    EVENT_MAINTENANCE, EVENT_PROCESSING, EVENT_REPAIR,
    EVENT_COST, EVENT_OTHER, EVENT_MAINTENANCE_END,
)

EVENT_OPEN = 'Open'
EVENT_CLOSED = 'Closed'

SOURCE_MOLD = 'mold'
SOURCE_MACHINE = 'machine'


class Event(db.Model):
    """
    Ocurrencia sobre un molde o una máquina (mantenimiento, reparación, costo...).
    Se crea abierta y se cierra una sola vez; no se reabre ni se elimina.
    """

    __tablename__ = 'events'

    id = db.Column(db.Integer, primary_key=True)

    source_id = db.Column(db.String(50), nullable=False, index=True)
    source_type = db.Column(db.String(10), nullable=False)  # mold / machine

    type = db.Column(db.String(20), nullable=False)
    description = db.Column(db.Text, nullable=False, default='')
    cost = db.Column(db.Float, nullable=True)

    timestamp = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)
    estimated_end_date = db.Column(db.Date, nullable=True)
    actual_end_date = db.Column(db.Date, nullable=True)

    status = db.Column(db.String(10), default=EVENT_OPEN, nullable=False, index=True)

    # Tarea del plan de mantenimiento de la máquina (opcional)
    schedule_task_id = db.Column(db.String(50), nullable=True)

    custom_fields = db.Column(db.JSON, default=dict)
    attachments = db.Column(db.JSON, default=list)

    @property
    def is_open(self):
        return self.status == EVENT_OPEN

    def to_dict(self):
        return {
            'id': self.id,
            'source_id': self.source_id,
            'source_type': self.source_type,
            'type': self.type,
            'description': self.description,
            'cost': self.cost,
            'timestamp': self.timestamp.isoformat() if self.timestamp else None,
            'estimated_end_date': self.estimated_end_date.isoformat() if self.estimated_end_date else None,
            'actual_end_date': self.actual_end_date.isoformat() if self.actual_end_date else None,
            'status': self.status,
            'schedule_task_id': self.schedule_task_id,
            'custom_fields': self.custom_fields or {},
            'attachments': self.attachments or [],
        }

    def __repr__(self):
        return f'<Event {self.id}: {self.type} {self.source_id} ({self.status})>'
