from moldtrack.routes.molds import molds_bp
from moldtrack.routes.components import components_bp
from moldtrack.routes.machines import machines_bp
from moldtrack.routes.events import events_bp
from moldtrack.routes.production import production_bp
from moldtrack.routes.maintenance_requests import maintenance_requests_bp
from moldtrack.routes.users import users_bp
from moldtrack.routes.analytics import analytics_bp

__all__ = [
    'molds_bp', 'components_bp', 'machines_bp', 'events_bp', 'production_bp',
    'maintenance_requests_bp', 'users_bp', 'analytics_bp',
]
