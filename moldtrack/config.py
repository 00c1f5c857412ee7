import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    """Configuración de la aplicación"""

    # Flask
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key')
    DEBUG = os.getenv('DEBUG', 'True').lower() == 'true'
    TESTING = False

    # Database (SQLite por defecto, PostgreSQL en producción)
    SQLALCHEMY_DATABASE_URI = os.getenv(
        'DATABASE_URL',
        'sqlite:///moldtrack.db'
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # API Backend Port
    API_PORT = int(os.getenv('API_PORT', '5050'))

    # Solicitudes de mantenimiento: duración estimada del evento generado al aprobar
    REQUEST_DEFAULT_DURATION_DAYS = int(os.getenv('REQUEST_DEFAULT_DURATION_DAYS', '14'))

    # Analytics: ventana por defecto para la tasa de scrap
    SCRAP_RATE_DEFAULT_DAYS = int(os.getenv('SCRAP_RATE_DEFAULT_DAYS', '30'))


class TestConfig(Config):
    """Configuración para pytest: base de datos en memoria."""

    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
