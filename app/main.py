# app/main.py

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app.api.v1 import api_router
from app.core.config import settings
from app.core.exceptions import BaseAppException

# Importar todos los modelos para que SQLAlchemy los reconozca
from app.models import Base
from app.core.database import engine

Base.metadata.create_all(bind=engine)

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)

# Inicialización de la aplicación FastAPI
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="API para la gestión de solicitudes de vacaciones y permisos con aprobación multinivel",
)


# Exception Handler for Custom Business Exceptions
@app.exception_handler(BaseAppException)
async def app_exception_handler(request: Request, exc: BaseAppException):
    """Convierte las excepciones de la aplicación en respuestas JSON con su código HTTP."""
    if exc.status_code >= 500:
        logger.error("%s en %s %s: %s", exc.title, request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.title,
            "message": exc.message,
            "details": exc.details,
            "type": exc.error_type
        }
    )


# Configuración de CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["*"],
)

# Incluir todas las rutas de la API definidas en /api/v1/__init__.py
app.include_router(api_router, prefix=settings.API_V1_STR)


@app.get("/", tags=["Root"])
async def root():
    """
    Endpoint de bienvenida que verifica que la API está funcionando.
    """
    return {"message": "Bienvenido a la API de Vacaciones y Permisos"}
