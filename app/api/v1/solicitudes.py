# app/api/v1/solicitudes.py

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session
from typing import Optional
from datetime import date

from app.api.deps import (
    ROLES_GESTION,
    get_catalog,
    get_client_ip,
    get_current_user,
    puede_decidir,
    user_has_role
)
from app.core.config import settings
from app.core.database import get_db
from app.core.exceptions import PermissionException
from app.models.user import Usuario
from app.schemas.solicitud import DecisionRequest, SolicitudCreate, SolicitudList, SolicitudResponse
from app.services.catalogo import CatalogService
from app.services.solicitud import SolicitudService

router = APIRouter()


@router.post("/solicitudes", response_model=SolicitudResponse, status_code=status.HTTP_201_CREATED)
def create_solicitud(
    data: SolicitudCreate,
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog),
    current_user: Usuario = Depends(get_current_user)
):
    """
    Registra una solicitud de vacaciones o permiso y crea su cadena de aprobación.

    Un trabajador registra a su nombre; el área/sección/cargo se toma de RRHH.
    RRHH y administradores pueden registrar a nombre de otro trabajador e
    indicar el alcance explícitamente.
    """
    es_gestor = user_has_role(current_user, *ROLES_GESTION)
    codigo_trabajador = data.codigo_trabajador or current_user.codigo_trabajador

    if not codigo_trabajador:
        raise PermissionException("El usuario no está vinculado a un trabajador")
    if codigo_trabajador != current_user.codigo_trabajador and not es_gestor:
        raise PermissionException("No puede registrar solicitudes a nombre de otro trabajador")
    if not es_gestor:
        data = data.model_copy(update={"codigo_area": None, "codigo_seccion": None, "codigo_cargo": None})

    service = SolicitudService(db, catalog)
    solicitud = service.submit(data, codigo_trabajador, current_user.login_username)
    return service.enriquecer([solicitud])[0]


@router.get("/solicitudes/mias", response_model=SolicitudList)
def list_mis_solicitudes(
    estado: Optional[str] = Query(None, pattern="^[PARN]$"),
    tipo_solicitud: Optional[str] = Query(None, pattern="^[VP]$"),
    fecha_desde: Optional[date] = Query(None),
    fecha_hasta: Optional[date] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog),
    current_user: Usuario = Depends(get_current_user)
):
    if not current_user.codigo_trabajador:
        raise PermissionException("El usuario no está vinculado a un trabajador")
    filters = {
        "estado": estado,
        "tipo_solicitud": tipo_solicitud,
        "fecha_desde": fecha_desde,
        "fecha_hasta": fecha_hasta
    }
    return SolicitudService(db, catalog).mis_solicitudes(current_user.codigo_trabajador, filters, page, limit)


@router.get("/solicitudes/{id_solicitud}", response_model=SolicitudResponse)
def get_solicitud(
    id_solicitud: int,
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog),
    current_user: Usuario = Depends(get_current_user)
):
    """El solicitante, sus aprobadores y RRHH pueden ver la solicitud."""
    service = SolicitudService(db, catalog)
    solicitud = service.get_solicitud(id_solicitud)

    codigo = current_user.codigo_trabajador
    involucrado = codigo is not None and (
        solicitud.codigo_trabajador == codigo
        or any(a.codigo_trabajador_aprueba == codigo for a in solicitud.aprobaciones)
    )
    if not involucrado and not user_has_role(current_user, *ROLES_GESTION):
        raise PermissionException("No tiene acceso a esta solicitud")
    return service.enriquecer([solicitud])[0]


@router.post("/solicitudes/{id_solicitud}/decision", response_model=SolicitudResponse)
def decide_solicitud(
    id_solicitud: int,
    payload: DecisionRequest,
    request: Request,
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog),
    current_user: Usuario = Depends(get_current_user)
):
    """
    Aprueba o rechaza el nivel pendiente de la solicitud.
    Si se indica ``nivel`` debe ser el nivel activo.
    """
    service = SolicitudService(db, catalog)
    solicitud = service.get_solicitud(id_solicitud)

    nivel = payload.nivel
    if nivel is None and solicitud.nivel_activo is not None:
        nivel = solicitud.nivel_activo.nivel
    objetivo = next((a for a in solicitud.aprobaciones if a.nivel == nivel), None)
    if objetivo is not None and not puede_decidir(current_user, objetivo.codigo_trabajador_aprueba):
        raise PermissionException("No es el aprobador asignado a este nivel")

    solicitud = service.decide_level(
        id_solicitud,
        payload.decision,
        payload.observacion,
        current_user.login_username,
        nivel=nivel,
        ip=get_client_ip(request)
    )
    return service.enriquecer([solicitud])[0]
