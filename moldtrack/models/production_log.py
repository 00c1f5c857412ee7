from datetime import datetime, timezone
from moldtrack import db


class ProductionLog(db.Model):
    """Registro de una corrida de producción (piezas buenas y scrap)"""

    __tablename__ = 'production_logs'

    id = db.Column(db.Integer, primary_key=True)
    component_code = db.Column(db.String(50), db.ForeignKey('components.code'), nullable=False, index=True)

    good = db.Column(db.Integer, nullable=False, default=0)
    scrapped = db.Column(db.Integer, nullable=False, default=0)
    scrap_reason = db.Column(db.Text, nullable=True)

    timestamp = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)
    user_id = db.Column(db.String(50), nullable=True)

    @property
    def total(self):
        return (self.good or 0) + (self.scrapped or 0)

    def to_dict(self):
        return {
            'id': self.id,
            'component_id': self.component_code,
            'good': self.good,
            'scrapped': self.scrapped,
            'scrap_reason': self.scrap_reason,
            'timestamp': self.timestamp.isoformat() if self.timestamp else None,
            'user': self.user_id,
        }

    def __repr__(self):
        return f'<ProductionLog {self.id}: {self.component_code} +{self.total}>'
