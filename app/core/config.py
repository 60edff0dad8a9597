# app/core/config.py

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Optional, List
import secrets

class Settings(BaseSettings):
    """
    Settings for the application, loaded from a .env file.
    """
    # --- Project Info ---
    PROJECT_NAME: str = "Vacaciones y Permisos API"
    API_V1_STR: str = "/api/v1"
    VERSION: str = "1.0.0"

    # --- Security ---
    SECRET_KEY: str = secrets.token_urlsafe(32)
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24  # 24 horas
    ALGORITHM: str = "HS256"
    SUPERADMIN_USERNAME: Optional[str] = Field("superadmin", description="Usuario con acceso total a la administración")

    FRONTEND_URL: str = Field(default="http://localhost:8080", description="Frontend application URL")
    ALLOWED_ORIGINS: List[str] = Field(default_factory=lambda: ["http://localhost:8080"])

    # --- Database ---
    DATABASE_URL: str = Field(..., description="Database URL for vacaciones/aprobaciones")
    RRHH_DATABASE_URL: str = Field(..., description="Database URL for the RRHH catalogs")

    # --- Logging ---
    LOG_LEVEL: str = "INFO"

    # --- Paginación ---
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    # --- Reglas de negocio ---
    DIAS_VACACIONES_DEFAULT: int = 30

    # Pydantic V2 necesita esta configuración para leer desde .env
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding='utf-8', extra='ignore')

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        # Configurar ALLOWED_ORIGINS basado en FRONTEND_URL si no se especifica explícitamente
        if 'ALLOWED_ORIGINS' not in self.model_fields_set:
            self.ALLOWED_ORIGINS = [self.FRONTEND_URL]

# Se crea una única instancia que será usada en toda la aplicación
settings = Settings()
