from datetime import datetime, timezone
from moldtrack import db


class StampingHistoryEntry(db.Model):
    """Auditoría de cambios en los parámetros de inyección. Solo se agregan filas."""

    __tablename__ = 'stamping_history'

    id = db.Column(db.Integer, primary_key=True)
    component_code = db.Column(db.String(50), db.ForeignKey('components.code'), nullable=False, index=True)
    timestamp = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)
    user_id = db.Column(db.String(50), nullable=True)
    changed_data = db.Column(db.JSON, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'component_id': self.component_code,
            'timestamp': self.timestamp.isoformat() if self.timestamp else None,
            'user': self.user_id,
            'changed_data': self.changed_data,
        }
