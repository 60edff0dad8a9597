# app/api/v1/auth.py

from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from app.api.deps import get_catalog, get_current_user
from app.core.database import get_db
from app.models.user import Usuario
from app.schemas.auth import LoginResponse, UserResponse
from app.services.auth import AuthService
from app.services.catalogo import CatalogService

router = APIRouter()


@router.post("/login", response_model=LoginResponse)
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog)
):
    """
    Login con usuario y contraseña (hash bcrypt).
    El token incluye los roles y el código de trabajador del usuario.
    """
    return AuthService(db, catalog).login(form_data.username, form_data.password)


@router.get("/me", response_model=UserResponse)
def read_current_user(
    current_user: Usuario = Depends(get_current_user),
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog)
):
    return AuthService(db, catalog).user_response(current_user)
