# app/schemas/reportes.py

from pydantic import BaseModel
from typing import Optional, List
from datetime import date
from decimal import Decimal


class ConteoPorClave(BaseModel):
    clave: str
    descripcion: Optional[str] = None
    total: int


class EstadisticasResponse(BaseModel):
    fecha_desde: Optional[date] = None
    fecha_hasta: Optional[date] = None
    total_solicitudes: int
    solicitudes_pendientes: int
    solicitudes_aprobadas: int
    solicitudes_rechazadas: int
    solicitudes_anuladas: int
    total_vacaciones: int
    total_permisos: int
    dias_solicitados_totales: Decimal
    dias_aprobados_totales: Decimal
    permisos_por_tipo: List[ConteoPorClave]
    solicitudes_por_area: List[ConteoPorClave]
    solicitudes_por_mes: List[ConteoPorClave]


class SaldoTrabajador(BaseModel):
    codigo_trabajador: str
    nombre_completo: str
    codigo_area: Optional[str] = None
    codigo_seccion: Optional[str] = None
    dias_asignados_totales: Decimal
    dias_usados: Decimal
    dias_pendientes: Decimal
    saldo_disponible: Decimal


class SaldosList(BaseModel):
    saldos: List[SaldoTrabajador]
    total: int
    page: int
    limit: int
    total_pages: int
