# app/schemas/flujo.py

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Literal
from datetime import date, datetime
from decimal import Decimal


# === CONFIGURACIÓN DE FLUJO ===
class ConfigFlujoBase(BaseModel):
    tipo_solicitud: Literal['V', 'P']
    codigo_permiso: Optional[str] = Field(None, max_length=20)
    codigo_area: Optional[str] = Field(None, max_length=20)
    codigo_seccion: Optional[str] = Field(None, max_length=20)
    codigo_cargo: Optional[str] = Field(None, max_length=20)
    dias_desde: Optional[Decimal] = Field(None, ge=0)
    dias_hasta: Optional[Decimal] = Field(None, ge=0)
    niveles_requeridos: int = Field(..., ge=1)
    orden: int = 1
    activo: Literal['S', 'N'] = 'S'
    fecha_desde: date = Field(default_factory=date.today)
    fecha_hasta: Optional[date] = None
    descripcion: Optional[str] = None

class ConfigFlujoCreate(ConfigFlujoBase):
    pass

class ConfigFlujoUpdate(BaseModel):
    tipo_solicitud: Optional[Literal['V', 'P']] = None
    codigo_permiso: Optional[str] = Field(None, max_length=20)
    codigo_area: Optional[str] = Field(None, max_length=20)
    codigo_seccion: Optional[str] = Field(None, max_length=20)
    codigo_cargo: Optional[str] = Field(None, max_length=20)
    dias_desde: Optional[Decimal] = Field(None, ge=0)
    dias_hasta: Optional[Decimal] = Field(None, ge=0)
    niveles_requeridos: Optional[int] = Field(None, ge=1)
    orden: Optional[int] = None
    activo: Optional[Literal['S', 'N']] = None
    fecha_desde: Optional[date] = None
    fecha_hasta: Optional[date] = None
    descripcion: Optional[str] = None

class ConfigFlujoResponse(ConfigFlujoBase):
    model_config = ConfigDict(from_attributes=True)

    id_config: int
    fecha_registro: datetime
    usuario_registro: Optional[str] = None
    fecha_modificacion: Optional[datetime] = None
    usuario_modificacion: Optional[str] = None
    # Nombres de catálogo, cuando la BD de RRHH responde
    area_nombre: Optional[str] = None
    seccion_nombre: Optional[str] = None
    cargo_nombre: Optional[str] = None
    permiso_nombre: Optional[str] = None

class ConfigFlujoList(BaseModel):
    configuraciones: List[ConfigFlujoResponse]
    total: int
    page: int
    limit: int
    total_pages: int


# === JERARQUÍA DE APROBACIÓN ===
class JerarquiaBase(BaseModel):
    codigo_area: Optional[str] = Field(None, max_length=20)
    codigo_seccion: Optional[str] = Field(None, max_length=20)
    codigo_cargo: Optional[str] = Field(None, max_length=20)
    codigo_trabajador_aprobador: str = Field(..., min_length=1, max_length=20)
    tipo_relacion: Literal['J', 'G', 'D']
    nivel_jerarquico: int = Field(..., ge=1)
    activo: Literal['S', 'N'] = 'S'
    fecha_desde: date = Field(default_factory=date.today)
    fecha_hasta: Optional[date] = None
    descripcion: Optional[str] = None

class JerarquiaCreate(JerarquiaBase):
    pass

class JerarquiaUpdate(BaseModel):
    codigo_area: Optional[str] = Field(None, max_length=20)
    codigo_seccion: Optional[str] = Field(None, max_length=20)
    codigo_cargo: Optional[str] = Field(None, max_length=20)
    codigo_trabajador_aprobador: Optional[str] = Field(None, min_length=1, max_length=20)
    tipo_relacion: Optional[Literal['J', 'G', 'D']] = None
    nivel_jerarquico: Optional[int] = Field(None, ge=1)
    activo: Optional[Literal['S', 'N']] = None
    fecha_desde: Optional[date] = None
    fecha_hasta: Optional[date] = None
    descripcion: Optional[str] = None

class JerarquiaResponse(JerarquiaBase):
    model_config = ConfigDict(from_attributes=True)

    id_jerarquia: int
    fecha_registro: datetime
    usuario_registro: Optional[str] = None
    fecha_modificacion: Optional[datetime] = None
    usuario_modificacion: Optional[str] = None
    area_nombre: Optional[str] = None
    seccion_nombre: Optional[str] = None
    cargo_nombre: Optional[str] = None
    aprobador_nombre: Optional[str] = None

class JerarquiaList(BaseModel):
    jerarquias: List[JerarquiaResponse]
    total: int
    page: int
    limit: int
    total_pages: int


# === SUSTITUTOS ===
class SustitutoBase(BaseModel):
    codigo_trabajador_titular: str = Field(..., min_length=1, max_length=20)
    codigo_trabajador_sustituto: str = Field(..., min_length=1, max_length=20)
    fecha_desde: date
    fecha_hasta: date
    motivo: Optional[str] = Field(None, max_length=255)
    observacion: Optional[str] = None
    activo: Literal['S', 'N'] = 'S'

class SustitutoCreate(SustitutoBase):
    pass

class SustitutoUpdate(BaseModel):
    codigo_trabajador_titular: Optional[str] = Field(None, min_length=1, max_length=20)
    codigo_trabajador_sustituto: Optional[str] = Field(None, min_length=1, max_length=20)
    fecha_desde: Optional[date] = None
    fecha_hasta: Optional[date] = None
    motivo: Optional[str] = Field(None, max_length=255)
    observacion: Optional[str] = None
    activo: Optional[Literal['S', 'N']] = None

class SustitutoResponse(SustitutoBase):
    model_config = ConfigDict(from_attributes=True)

    id_sustituto: int
    fecha_registro: datetime
    usuario_registro: Optional[str] = None
    fecha_modificacion: Optional[datetime] = None
    usuario_modificacion: Optional[str] = None
    titular_nombre: Optional[str] = None
    sustituto_nombre: Optional[str] = None

class SustitutoList(BaseModel):
    sustitutos: List[SustitutoResponse]
    total: int
    page: int
    limit: int
    total_pages: int


# === SIMULACIÓN ===
class SimularFlujoRequest(BaseModel):
    tipo_solicitud: Literal['V', 'P']
    codigo_permiso: Optional[str] = None
    codigo_trabajador: Optional[str] = None
    codigo_area: Optional[str] = None
    codigo_seccion: Optional[str] = None
    codigo_cargo: Optional[str] = None
    dias_solicitados: Decimal = Field(..., gt=0)
    fecha_evaluacion: Optional[date] = None

class AprobadorSimulado(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    nivel: int
    codigo_trabajador_aprueba: str
    codigo_trabajador_titular: str
    id_jerarquia: int
    id_sustituto: Optional[int] = None
    aprobador_nombre: Optional[str] = None

class SimularFlujoResponse(BaseModel):
    id_config: int
    niveles_requeridos: int
    descripcion: Optional[str] = None
    fecha_evaluacion: date
    aprobadores: List[AprobadorSimulado]
