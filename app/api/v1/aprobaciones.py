# app/api/v1/aprobaciones.py

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import get_catalog, require_trabajador
from app.core.config import settings
from app.core.database import get_db
from app.models.user import Usuario
from app.schemas.solicitud import AprobacionPendienteList, PendientesCount
from app.services.catalogo import CatalogService
from app.services.solicitud import SolicitudService

router = APIRouter()


@router.get("/pendientes", response_model=AprobacionPendienteList)
def list_pendientes(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog),
    current_user: Usuario = Depends(require_trabajador)
):
    """Solicitudes cuyo nivel activo espera la decisión del usuario."""
    return SolicitudService(db, catalog).pendientes(current_user.codigo_trabajador, page, limit)


@router.get("/pendientes/count", response_model=PendientesCount)
def count_pendientes(
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(require_trabajador)
):
    return {"total": SolicitudService(db).count_pendientes(current_user.codigo_trabajador)}
