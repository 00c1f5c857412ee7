from moldtrack import db

LANGUAGES = ('en', 'it')


class User(db.Model):
    """Usuario identificado por su código (no hay contraseña)"""

    __tablename__ = 'users'

    code = db.Column(db.String(50), primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    is_admin = db.Column(db.Boolean, default=False, nullable=False)

    # Códigos de molde/componente/máquina visibles para usuarios no admin
    allowed_codes = db.Column(db.JSON, default=list)
    language = db.Column(db.String(2), nullable=True)

    def to_dict(self):
        return {
            'id': self.code,
            'code': self.code,
            'name': self.name,
            'is_admin': self.is_admin,
            'allowed_codes': self.allowed_codes or [],
            'language': self.language,
        }

    def __repr__(self):
        return f'<User {self.code}{" (admin)" if self.is_admin else ""}>'
