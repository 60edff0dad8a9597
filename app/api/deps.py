# app/api/deps.py

from typing import Callable, Optional
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db, get_db_rrhh
from app.core.exceptions import PermissionException
from app.core.security import decode_access_token
from app.models.enums import NombreRol
from app.models.user import Usuario
from app.services.auth import es_superadmin
from app.services.catalogo import CatalogService

# Esquema de seguridad para los endpoints
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/login")

# Roles con acceso a la administración de vacaciones
ROLES_CONFIGURACION = (NombreRol.ADMIN_VACACIONES.value,)
ROLES_GESTION = (NombreRol.ADMIN_VACACIONES.value, NombreRol.RRHH.value)


def get_current_user(
    db: Session = Depends(get_db),
    token: str = Depends(oauth2_scheme)
) -> Usuario:
    """
    Obtiene el usuario actual a partir del token JWT.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="No se pudieron validar las credenciales",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = decode_access_token(token)
        username: str = payload.get("sub")
        if username is None:
            raise credentials_exception
    except ValueError:
        raise credentials_exception

    user = db.query(Usuario).filter(Usuario.login_username == username).first()
    if user is None or not user.is_active:
        raise credentials_exception
    return user


def get_catalog(db_rrhh: Session = Depends(get_db_rrhh)) -> CatalogService:
    return CatalogService(db_rrhh)


def user_has_role(user: Usuario, *roles: str) -> bool:
    """SUPERADMIN (por rol o por nombre de usuario) pasa cualquier verificación."""
    if es_superadmin(user):
        return True
    return any(rol in user.role_names for rol in roles)


def require_roles(*roles: str) -> Callable[..., Usuario]:
    """
    Dependency que exige al menos uno de los roles indicados.
    """
    def dependency(current_user: Usuario = Depends(get_current_user)) -> Usuario:
        if not user_has_role(current_user, *roles):
            raise PermissionException("No tienes el rol necesario para realizar esta acción")
        return current_user
    return dependency


def require_trabajador(current_user: Usuario = Depends(get_current_user)) -> Usuario:
    """
    Dependency que exige un usuario vinculado a un trabajador de RRHH.
    """
    if not current_user.codigo_trabajador:
        raise PermissionException("El usuario no está vinculado a un trabajador")
    return current_user


def puede_decidir(user: Usuario, codigo_aprobador: str) -> bool:
    """El aprobador asignado al nivel, o un administrador de vacaciones."""
    if user.codigo_trabajador and user.codigo_trabajador == codigo_aprobador:
        return True
    return user_has_role(user, *ROLES_GESTION)


def get_client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None
