# app/api/v1/__init__.py

from fastapi import APIRouter

from .auth import router as auth_router
from .solicitudes import router as solicitudes_router
from .aprobaciones import router as aprobaciones_router
from .vacaciones_admin import router as vacaciones_admin_router
from .catalogos import router as catalogos_router

api_router = APIRouter()

# Registrar los routers
api_router.include_router(auth_router, prefix="/auth", tags=["Auth"])
api_router.include_router(solicitudes_router, prefix="/vacaciones", tags=["Solicitudes"])
api_router.include_router(aprobaciones_router, prefix="/vacaciones/aprobaciones", tags=["Aprobaciones"])
api_router.include_router(catalogos_router, prefix="/vacaciones/admin/buscar", tags=["Catálogos"])
api_router.include_router(vacaciones_admin_router, prefix="/vacaciones/admin", tags=["Administración Vacaciones"])
