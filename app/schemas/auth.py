from typing import Optional, List
from pydantic import BaseModel, ConfigDict
from datetime import datetime


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id_usuario: int
    login_username: str
    codigo_trabajador: Optional[str] = None
    is_active: bool
    ultimo_acceso: Optional[datetime] = None
    roles: List[str] = []
    nombre_completo: Optional[str] = None
    es_superadmin: bool = False


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
