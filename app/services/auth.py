import logging
from datetime import datetime, timedelta
from typing import Optional
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import AuthenticationException
from app.core.security import verify_password, create_access_token
from app.models.enums import NombreRol
from app.models.user import Usuario
from app.schemas.auth import LoginResponse, UserResponse
from app.services.catalogo import CatalogService

logger = logging.getLogger(__name__)


def es_superadmin(user: Usuario) -> bool:
    if settings.SUPERADMIN_USERNAME and user.login_username == settings.SUPERADMIN_USERNAME:
        return True
    return NombreRol.SUPERADMIN.value in user.role_names


class AuthService:
    def __init__(self, db: Session, catalog: Optional[CatalogService] = None):
        self.db = db
        self.catalog = catalog

    def authenticate_user(self, username: str, password: str) -> Optional[Usuario]:
        """Autenticar usuario por username/password"""
        user = self.db.query(Usuario).filter(Usuario.login_username == username).first()
        if not user:
            return None
        if not verify_password(password, user.password_hash):
            return None
        return user

    def user_response(self, user: Usuario) -> UserResponse:
        nombre = None
        if self.catalog and user.codigo_trabajador:
            nombre = self.catalog.nombres_trabajadores([user.codigo_trabajador]).get(user.codigo_trabajador)
        return UserResponse(
            id_usuario=user.id_usuario,
            login_username=user.login_username,
            codigo_trabajador=user.codigo_trabajador,
            is_active=user.is_active,
            ultimo_acceso=user.ultimo_acceso,
            roles=user.role_names,
            nombre_completo=nombre,
            es_superadmin=es_superadmin(user)
        )

    def login(self, username: str, password: str) -> LoginResponse:
        """
        Proceso completo de login: valida credenciales, registra el acceso y
        emite el token con roles y código de trabajador.
        """
        user = self.authenticate_user(username, password)
        if not user:
            logger.warning("Intento de login fallido para '%s'", username)
            raise AuthenticationException("Usuario o contraseña incorrectos")
        if not user.is_active:
            raise AuthenticationException("Usuario inactivo")

        user.ultimo_acceso = datetime.now()
        self.db.commit()

        token_data = {
            "sub": user.login_username,
            "id": user.id_usuario,
            "roles": user.role_names,
            "codigo_trabajador": user.codigo_trabajador
        }
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        access_token = create_access_token(data=token_data, expires_delta=expires_delta)

        logger.info("Login de %s", user.login_username)
        return LoginResponse(access_token=access_token, user=self.user_response(user))
