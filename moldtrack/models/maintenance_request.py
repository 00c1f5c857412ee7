from datetime import datetime, timezone
from moldtrack import db

REQUEST_PENDING = 'Pending'
REQUEST_APPROVED = 'Approved'
REQUEST_REJECTED = 'Rejected'

REQUEST_STATUSES = (REQUEST_PENDING, REQUEST_APPROVED, REQUEST_REJECTED)


class MaintenanceRequest(db.Model):
    """
    Propuesta de mantenimiento sobre un molde o máquina.
    Pending -> Approved | Rejected, una sola vez.
    """

    __tablename__ = 'maintenance_requests'

    id = db.Column(db.Integer, primary_key=True)

    source_id = db.Column(db.String(50), nullable=False, index=True)
    source_code = db.Column(db.String(50), nullable=False)
    source_type = db.Column(db.String(10), nullable=False)  # mold / machine

    description = db.Column(db.Text, nullable=False)
    requester_id = db.Column(db.String(50), nullable=False)
    requester_name = db.Column(db.String(100), nullable=True)

    status = db.Column(db.String(10), default=REQUEST_PENDING, nullable=False)
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)
    resolved_at = db.Column(db.DateTime, nullable=True)

    # Evento generado al aprobar
    event_id = db.Column(db.Integer, db.ForeignKey('events.id'), nullable=True)

    def to_dict(self):
        return {
            'id': self.id,
            'source_id': self.source_id,
            'source_code': self.source_code,
            'source_type': self.source_type,
            'description': self.description,
            'requester_id': self.requester_id,
            'requester_name': self.requester_name,
            'status': self.status,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'resolved_at': self.resolved_at.isoformat() if self.resolved_at else None,
            'event_id': self.event_id,
        }

    def __repr__(self):
        return f'<MaintenanceRequest {self.id}: {self.source_code} ({self.status})>'
