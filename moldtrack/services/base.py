"""
Unidad de trabajo compartida por los servicios.

Cada operación pública de un servicio abre un `unit_of_work()`: todas sus
escrituras van en la misma transacción y se confirman con un único commit.
Los métodos internos que solo hacen flush (open_event, _append_history...)
se llaman dentro de la unidad de trabajo del llamador.
"""
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from moldtrack import db
from moldtrack.exceptions import MoldTrackError, StoreError


@contextmanager
def unit_of_work(conflict: MoldTrackError = None):
    """
    with unit_of_work() as session: ... -> commit al salir, rollback si falla.

    Args:
        conflict: error a lanzar si el commit viola una restricción única
                  (ej: DuplicateCodeError en altas concurrentes del mismo código)
    """
    session = db.session
    try:
        yield session
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        if conflict is not None:
            raise conflict from exc
        raise StoreError(f'Violación de integridad: {exc.orig}') from exc
    except SQLAlchemyError as exc:
        session.rollback()
        raise StoreError(f'Error de base de datos: {exc}') from exc
    except Exception:
        session.rollback()
        raise
