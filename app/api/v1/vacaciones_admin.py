# app/api/v1/vacaciones_admin.py

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session
from typing import Optional
from datetime import date, datetime

from app.api.deps import ROLES_CONFIGURACION, ROLES_GESTION, get_catalog, require_roles
from app.core.config import settings
from app.core.database import get_db
from app.models.user import Usuario
from app.schemas.flujo import (
    AprobadorSimulado,
    ConfigFlujoCreate,
    ConfigFlujoList,
    ConfigFlujoResponse,
    ConfigFlujoUpdate,
    JerarquiaCreate,
    JerarquiaList,
    JerarquiaResponse,
    JerarquiaUpdate,
    SimularFlujoRequest,
    SimularFlujoResponse,
    SustitutoCreate,
    SustitutoList,
    SustitutoResponse,
    SustitutoUpdate
)
from app.schemas.reportes import EstadisticasResponse, SaldosList
from app.schemas.solicitud import AnulacionRequest, SolicitudList, SolicitudResponse
from app.services.catalogo import CatalogService
from app.services.config_flujo import ConfigFlujoService
from app.services.jerarquia import JerarquiaService
from app.services.matching import OrgScope, codigo
from app.services.reports import ReportService
from app.services.solicitud import SolicitudService
from app.services.sustituto import SustitutoService

router = APIRouter()

gestion = require_roles(*ROLES_GESTION)
configuracion = require_roles(*ROLES_CONFIGURACION)


# ===============================================
# SOLICITUDES
# ===============================================

def _filtros_solicitudes(
    estado: Optional[str] = Query(None, pattern="^[PARN]$"),
    tipo_solicitud: Optional[str] = Query(None, pattern="^[VP]$"),
    codigo_trabajador: Optional[str] = Query(None),
    codigo_permiso: Optional[str] = Query(None),
    codigo_area: Optional[str] = Query(None),
    codigo_seccion: Optional[str] = Query(None),
    fecha_desde: Optional[date] = Query(None),
    fecha_hasta: Optional[date] = Query(None)
) -> dict:
    return {
        "estado": estado,
        "tipo_solicitud": tipo_solicitud,
        "codigo_trabajador": codigo_trabajador,
        "codigo_permiso": codigo_permiso,
        "codigo_area": codigo_area,
        "codigo_seccion": codigo_seccion,
        "fecha_desde": fecha_desde,
        "fecha_hasta": fecha_hasta
    }


@router.get("/solicitudes", response_model=SolicitudList)
def list_solicitudes(
    filters: dict = Depends(_filtros_solicitudes),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog),
    current_user: Usuario = Depends(gestion)
):
    return SolicitudService(db, catalog).get_solicitudes(filters, page, limit)


@router.get("/solicitudes/export")
def export_solicitudes(
    filters: dict = Depends(_filtros_solicitudes),
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog),
    current_user: Usuario = Depends(gestion)
):
    """Exportar la lista filtrada de solicitudes a Excel"""
    output = ReportService(db, catalog).export_solicitudes(filters)
    filename = f"solicitudes_{datetime.now().strftime('%Y%m%d_%H%M%S')}.xlsx"
    return StreamingResponse(
        output,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )


@router.get("/solicitud/{id_solicitud}", response_model=SolicitudResponse)
def get_solicitud(
    id_solicitud: int,
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog),
    current_user: Usuario = Depends(gestion)
):
    service = SolicitudService(db, catalog)
    return service.enriquecer([service.get_solicitud(id_solicitud)])[0]


@router.post("/solicitud/{id_solicitud}/anular", response_model=SolicitudResponse)
def anular_solicitud(
    id_solicitud: int,
    payload: AnulacionRequest,
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog),
    current_user: Usuario = Depends(gestion)
):
    """Anula la solicitud desde cualquier estado salvo Anulado. Las aprobaciones no se modifican."""
    service = SolicitudService(db, catalog)
    solicitud = service.anular(id_solicitud, payload.motivo, current_user.login_username)
    return service.enriquecer([solicitud])[0]


# ===============================================
# CONFIGURACIÓN DE FLUJO
# ===============================================

@router.get("/config-flujo", response_model=ConfigFlujoList)
def list_config_flujo(
    tipo_solicitud: Optional[str] = Query(None, pattern="^[VP]$"),
    codigo_area: Optional[str] = Query(None),
    codigo_permiso: Optional[str] = Query(None),
    activo: Optional[str] = Query(None, pattern="^[SN]$"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog),
    current_user: Usuario = Depends(configuracion)
):
    filters = {
        "tipo_solicitud": tipo_solicitud,
        "codigo_area": codigo_area,
        "codigo_permiso": codigo_permiso,
        "activo": activo
    }
    return ConfigFlujoService(db, catalog).get_configuraciones(filters, page, limit)


@router.get("/config-flujo/{id_config}", response_model=ConfigFlujoResponse)
def get_config_flujo(
    id_config: int,
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog),
    current_user: Usuario = Depends(configuracion)
):
    service = ConfigFlujoService(db, catalog)
    return service.enriquecer([service.get_configuracion(id_config)])[0]


@router.post("/config-flujo", response_model=ConfigFlujoResponse, status_code=201)
def create_config_flujo(
    data: ConfigFlujoCreate,
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog),
    current_user: Usuario = Depends(configuracion)
):
    service = ConfigFlujoService(db, catalog)
    return service.enriquecer([service.create_configuracion(data, current_user.login_username)])[0]


@router.put("/config-flujo/{id_config}", response_model=ConfigFlujoResponse)
def update_config_flujo(
    id_config: int,
    data: ConfigFlujoUpdate,
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog),
    current_user: Usuario = Depends(configuracion)
):
    service = ConfigFlujoService(db, catalog)
    return service.enriquecer([service.update_configuracion(id_config, data, current_user.login_username)])[0]


@router.delete("/config-flujo/{id_config}", response_model=ConfigFlujoResponse)
def delete_config_flujo(
    id_config: int,
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog),
    current_user: Usuario = Depends(configuracion)
):
    service = ConfigFlujoService(db, catalog)
    return service.enriquecer([service.delete_configuracion(id_config, current_user.login_username)])[0]


# ===============================================
# JERARQUÍA DE APROBACIÓN
# ===============================================

@router.get("/jerarquia", response_model=JerarquiaList)
def list_jerarquia(
    codigo_area: Optional[str] = Query(None),
    codigo_trabajador_aprobador: Optional[str] = Query(None),
    nivel_jerarquico: Optional[int] = Query(None, ge=1),
    activo: Optional[str] = Query(None, pattern="^[SN]$"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog),
    current_user: Usuario = Depends(configuracion)
):
    filters = {
        "codigo_area": codigo_area,
        "codigo_trabajador_aprobador": codigo_trabajador_aprobador,
        "nivel_jerarquico": nivel_jerarquico,
        "activo": activo
    }
    return JerarquiaService(db, catalog).get_jerarquias(filters, page, limit)


@router.get("/jerarquia/{id_jerarquia}", response_model=JerarquiaResponse)
def get_jerarquia(
    id_jerarquia: int,
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog),
    current_user: Usuario = Depends(configuracion)
):
    service = JerarquiaService(db, catalog)
    return service.enriquecer([service.get_jerarquia(id_jerarquia)])[0]


@router.post("/jerarquia", response_model=JerarquiaResponse, status_code=201)
def create_jerarquia(
    data: JerarquiaCreate,
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog),
    current_user: Usuario = Depends(configuracion)
):
    service = JerarquiaService(db, catalog)
    return service.enriquecer([service.create_jerarquia(data, current_user.login_username)])[0]


@router.put("/jerarquia/{id_jerarquia}", response_model=JerarquiaResponse)
def update_jerarquia(
    id_jerarquia: int,
    data: JerarquiaUpdate,
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog),
    current_user: Usuario = Depends(configuracion)
):
    service = JerarquiaService(db, catalog)
    return service.enriquecer([service.update_jerarquia(id_jerarquia, data, current_user.login_username)])[0]


@router.delete("/jerarquia/{id_jerarquia}", response_model=JerarquiaResponse)
def delete_jerarquia(
    id_jerarquia: int,
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog),
    current_user: Usuario = Depends(configuracion)
):
    service = JerarquiaService(db, catalog)
    return service.enriquecer([service.delete_jerarquia(id_jerarquia, current_user.login_username)])[0]


# ===============================================
# SUSTITUTOS
# ===============================================

@router.get("/sustitutos", response_model=SustitutoList)
def list_sustitutos(
    codigo_trabajador_titular: Optional[str] = Query(None),
    codigo_trabajador_sustituto: Optional[str] = Query(None),
    activo: Optional[str] = Query(None, pattern="^[SN]$"),
    vigente_en: Optional[date] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog),
    current_user: Usuario = Depends(configuracion)
):
    filters = {
        "codigo_trabajador_titular": codigo_trabajador_titular,
        "codigo_trabajador_sustituto": codigo_trabajador_sustituto,
        "activo": activo,
        "vigente_en": vigente_en
    }
    return SustitutoService(db, catalog).get_sustitutos(filters, page, limit)


@router.get("/sustituto/{id_sustituto}", response_model=SustitutoResponse)
def get_sustituto(
    id_sustituto: int,
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog),
    current_user: Usuario = Depends(configuracion)
):
    service = SustitutoService(db, catalog)
    return service.enriquecer([service.get_sustituto(id_sustituto)])[0]


@router.post("/sustituto", response_model=SustitutoResponse, status_code=201)
def create_sustituto(
    data: SustitutoCreate,
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog),
    current_user: Usuario = Depends(configuracion)
):
    service = SustitutoService(db, catalog)
    return service.enriquecer([service.create_sustituto(data, current_user.login_username)])[0]


@router.put("/sustituto/{id_sustituto}", response_model=SustitutoResponse)
def update_sustituto(
    id_sustituto: int,
    data: SustitutoUpdate,
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog),
    current_user: Usuario = Depends(configuracion)
):
    service = SustitutoService(db, catalog)
    return service.enriquecer([service.update_sustituto(id_sustituto, data, current_user.login_username)])[0]


@router.delete("/sustituto/{id_sustituto}", response_model=SustitutoResponse)
def delete_sustituto(
    id_sustituto: int,
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog),
    current_user: Usuario = Depends(configuracion)
):
    service = SustitutoService(db, catalog)
    return service.enriquecer([service.delete_sustituto(id_sustituto, current_user.login_username)])[0]


# ===============================================
# SIMULACIÓN Y REPORTES
# ===============================================

@router.post("/simular-flujo", response_model=SimularFlujoResponse)
def simular_flujo(
    data: SimularFlujoRequest,
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog),
    current_user: Usuario = Depends(configuracion)
):
    """
    Muestra qué regla y qué aprobadores recibiría una solicitud con estos datos,
    sin registrar nada.
    """
    alcance = OrgScope(
        codigo_area=codigo(data.codigo_area),
        codigo_seccion=codigo(data.codigo_seccion),
        codigo_cargo=codigo(data.codigo_cargo)
    )
    if alcance == OrgScope() and data.codigo_trabajador:
        alcance = catalog.alcance_trabajador(data.codigo_trabajador)

    fecha = data.fecha_evaluacion or date.today()
    regla, cadena = SolicitudService(db, catalog).enrutar(
        data.tipo_solicitud, data.dias_solicitados, alcance, fecha, data.codigo_permiso
    )
    nombres = catalog.nombres_trabajadores(a.codigo_trabajador_aprueba for a in cadena)
    return SimularFlujoResponse(
        id_config=regla.id_config,
        niveles_requeridos=regla.niveles_requeridos,
        descripcion=regla.descripcion,
        fecha_evaluacion=fecha,
        aprobadores=[
            AprobadorSimulado(
                nivel=a.nivel,
                codigo_trabajador_aprueba=a.codigo_trabajador_aprueba,
                codigo_trabajador_titular=a.codigo_trabajador_titular,
                id_jerarquia=a.id_jerarquia,
                id_sustituto=a.id_sustituto,
                aprobador_nombre=nombres.get(a.codigo_trabajador_aprueba)
            )
            for a in cadena
        ]
    )


@router.get("/estadisticas", response_model=EstadisticasResponse)
def get_estadisticas(
    fecha_desde: Optional[date] = Query(None),
    fecha_hasta: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog),
    current_user: Usuario = Depends(gestion)
):
    return ReportService(db, catalog).estadisticas(fecha_desde, fecha_hasta)


@router.get("/saldos", response_model=SaldosList)
def get_saldos(
    codigo_area: Optional[str] = Query(None),
    codigo_seccion: Optional[str] = Query(None),
    anio: Optional[int] = Query(None, ge=2000, le=2100),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog),
    current_user: Usuario = Depends(gestion)
):
    return ReportService(db, catalog).saldos(codigo_area, codigo_seccion, anio, page, limit)
