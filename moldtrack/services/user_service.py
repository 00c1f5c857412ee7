"""
Servicio de usuarios. El código del usuario es su credencial de ingreso.
"""
from typing import List, Optional

from moldtrack import db
from moldtrack.exceptions import DuplicateCodeError, NotFoundError, ValidationError
from moldtrack.models.user import User, LANGUAGES
from moldtrack.services.base import unit_of_work
from moldtrack.utils.logger import get_inventory_logger
from moldtrack.utils.parsing import require_text

log = get_inventory_logger()


def _check_allowed_codes(codes):
    if codes is None:
        return []
    if not isinstance(codes, list) or not all(isinstance(c, str) and c.strip() for c in codes):
        raise ValidationError('allowed_codes debe ser una lista de códigos', field='allowed_codes')
    return sorted({c.strip() for c in codes})


def _check_language(language):
    if language is not None and language not in LANGUAGES:
        raise ValidationError(f"Idioma no soportado '{language}'", field='language')
    return language


class UserService:

    def get_user(self, code: str) -> Optional[User]:
        if not code:
            return None
        return db.session.get(User, code)

    def get_users(self) -> List[User]:
        return User.query.order_by(User.code).all()

    def create_user(self, code: str, name: str, is_admin: bool = False,
                    allowed_codes: list = None, language: str = None) -> User:
        code = require_text(code, 'code')
        name = require_text(name, 'name')
        allowed_codes = _check_allowed_codes(allowed_codes)
        language = _check_language(language)

        with unit_of_work(conflict=DuplicateCodeError('Usuario', code)) as session:
            if session.get(User, code) is not None:
                log.warning(f"Alta rechazada: usuario {code} ya existe")
                raise DuplicateCodeError('Usuario', code)
            user = User(
                code=code,
                name=name,
                is_admin=bool(is_admin),
                allowed_codes=allowed_codes,
                language=language,
            )
            session.add(user)

        log.info(f"✅ Usuario {code} creado")
        return user

    def update_user(self, code: str, data: dict) -> User:
        with unit_of_work() as session:
            user = session.get(User, code)
            if user is None:
                raise NotFoundError('Usuario', code)

            if 'name' in data:
                user.name = require_text(data['name'], 'name')
            if 'is_admin' in data:
                user.is_admin = bool(data['is_admin'])
            if 'allowed_codes' in data:
                user.allowed_codes = _check_allowed_codes(data['allowed_codes'])
            if 'language' in data:
                user.language = _check_language(data['language'])

        log.info(f"Usuario {code} actualizado: {sorted(data)}")
        return user


# Instancia global
_user_service: Optional[UserService] = None


def get_user_service() -> UserService:
    """Obtiene la instancia del servicio de usuarios."""
    global _user_service
    if _user_service is None:
        _user_service = UserService()
    return _user_service
