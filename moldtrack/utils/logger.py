"""
Configuración de logging para MoldTrack.
Escribe logs a archivo y consola.
"""
import logging
import os
from datetime import datetime
from logging.handlers import RotatingFileHandler

# Directorio de logs (LOG_DIR en el entorno o ./logs junto al paquete)
LOG_DIR = os.getenv('LOG_DIR') or os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(__file__))), 'logs')
os.makedirs(LOG_DIR, exist_ok=True)

# Nombre del archivo de log con fecha
LOG_FILE = os.path.join(LOG_DIR, f'moldtrack_{datetime.now().strftime("%Y%m%d")}.log')

# Formato de log
LOG_FORMAT = '%(asctime)s [%(levelname)s] [%(name)s] %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logger(name: str = 'moldtrack') -> logging.Logger:
    """
    Configura y retorna un logger que escribe a archivo y consola.

    Args:
        name: Nombre del logger (ej: 'inventory', 'events', 'production')

    Returns:
        Logger configurado
    """
    logger = logging.getLogger(f'moldtrack.{name}')

    # Evitar duplicar handlers si ya existe
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG)

    # Handler para archivo (rotativo, max 5MB, mantiene 5 archivos)
    file_handler = RotatingFileHandler(
        LOG_FILE,
        maxBytes=5*1024*1024,  # 5MB
        backupCount=5,
        encoding='utf-8'
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))

    # Handler para consola
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    return logger


# Loggers pre-configurados para cada área
def get_inventory_logger():
    return setup_logger('inventory')

def get_event_logger():
    return setup_logger('events')

def get_production_logger():
    return setup_logger('production')

def get_request_logger():
    return setup_logger('requests')

def get_api_logger():
    return setup_logger('api')
