# app/schemas/solicitud.py

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Literal
from datetime import date, datetime
from decimal import Decimal


class SolicitudCreate(BaseModel):
    tipo_solicitud: Literal['V', 'P']
    codigo_permiso: Optional[str] = Field(None, max_length=20)
    fecha_inicio: date
    fecha_fin: date
    dias_solicitados: Decimal = Field(..., gt=0)
    observacion: Optional[str] = None
    motivo: Optional[str] = None
    # Solo administradores pueden registrar a nombre de otro trabajador
    codigo_trabajador: Optional[str] = Field(None, max_length=20)
    codigo_area: Optional[str] = Field(None, max_length=20)
    codigo_seccion: Optional[str] = Field(None, max_length=20)
    codigo_cargo: Optional[str] = Field(None, max_length=20)


class AprobacionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id_aprobacion: int
    id_solicitud: int
    nivel: int
    codigo_trabajador_aprueba: str
    codigo_trabajador_titular: Optional[str] = None
    estado: str
    observacion: Optional[str] = None
    fecha: Optional[datetime] = None
    usuario: Optional[str] = None
    ip_dispositivo: Optional[str] = None
    aprobador_nombre: Optional[str] = None


class SolicitudResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id_solicitud: int
    tipo_solicitud: str
    codigo_permiso: Optional[str] = None
    codigo_trabajador: str
    fecha_inicio: date
    fecha_fin: date
    dias_solicitados: Decimal
    observacion: Optional[str] = None
    motivo: Optional[str] = None
    estado: str
    codigo_area: Optional[str] = None
    codigo_seccion: Optional[str] = None
    codigo_cargo: Optional[str] = None
    id_config: Optional[int] = None
    fecha_registro: datetime
    usuario_registro: Optional[str] = None
    fecha_modificacion: Optional[datetime] = None
    usuario_modificacion: Optional[str] = None
    fecha_anulacion: Optional[datetime] = None
    usuario_anulacion: Optional[str] = None
    motivo_anulacion: Optional[str] = None
    trabajador_nombre: Optional[str] = None
    area_nombre: Optional[str] = None
    permiso_nombre: Optional[str] = None
    aprobaciones: List[AprobacionResponse] = []


class SolicitudList(BaseModel):
    solicitudes: List[SolicitudResponse]
    total: int
    page: int
    limit: int
    total_pages: int


class DecisionRequest(BaseModel):
    decision: Literal['A', 'R']
    observacion: Optional[str] = None
    nivel: Optional[int] = Field(None, ge=1)


class AnulacionRequest(BaseModel):
    motivo: str = Field(..., min_length=1)


class AprobacionPendiente(BaseModel):
    """Elemento de la bandeja de aprobaciones pendientes."""
    id_aprobacion: int
    id_solicitud: int
    nivel: int
    niveles_requeridos: int
    tipo_solicitud: str
    codigo_permiso: Optional[str] = None
    codigo_trabajador: str
    trabajador_nombre: Optional[str] = None
    fecha_inicio: date
    fecha_fin: date
    dias_solicitados: Decimal
    observacion: Optional[str] = None
    fecha_registro: datetime
    codigo_trabajador_titular: Optional[str] = None


class AprobacionPendienteList(BaseModel):
    aprobaciones: List[AprobacionPendiente]
    total: int
    page: int
    limit: int
    total_pages: int


class PendientesCount(BaseModel):
    total: int
