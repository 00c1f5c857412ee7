from moldtrack.services.inventory_service import InventoryService
from moldtrack.services.event_service import EventService
from moldtrack.services.production_service import ProductionService
from moldtrack.services.stamping_service import StampingService
from moldtrack.services.request_service import RequestService
from moldtrack.services.user_service import UserService
from moldtrack.services.analytics_service import AnalyticsService

__all__ = [
    'InventoryService', 'EventService', 'ProductionService', 'StampingService',
    'RequestService', 'UserService', 'AnalyticsService',
]
