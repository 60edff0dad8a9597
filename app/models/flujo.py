# app/models/flujo.py

from datetime import date
from decimal import Decimal
from typing import Optional
from sqlalchemy import Integer, String, Date, Numeric, Text, Index, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, AuditoriaMixin
from .enums import ActivoInactivo


class ConfigFlujo(Base, AuditoriaMixin):
    """Regla que asigna la cantidad de niveles de aprobación a un tipo de solicitud."""
    __tablename__ = "config_flujo"
    __table_args__ = (
        CheckConstraint("niveles_requeridos >= 1", name="ck_config_flujo_niveles"),
        Index("ix_config_flujo_tipo_activo", "tipo_solicitud", "activo"),
    )

    id_config: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    tipo_solicitud: Mapped[str] = mapped_column(String(1), nullable=False)

    # Predicados de alcance: NULL = cualquiera
    codigo_permiso: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    codigo_area: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    codigo_seccion: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    codigo_cargo: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    dias_desde: Mapped[Optional[Decimal]] = mapped_column(Numeric(6, 1), nullable=True)
    dias_hasta: Mapped[Optional[Decimal]] = mapped_column(Numeric(6, 1), nullable=True)

    niveles_requeridos: Mapped[int] = mapped_column(Integer, nullable=False)
    orden: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    activo: Mapped[str] = mapped_column(String(1), nullable=False, default=ActivoInactivo.ACTIVO.value)
    fecha_desde: Mapped[date] = mapped_column(Date, nullable=False, default=date.today)
    fecha_hasta: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    descripcion: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class Jerarquia(Base, AuditoriaMixin):
    """Asignación de un aprobador a un alcance organizacional y un nivel."""
    __tablename__ = "jerarquia_aprobacion"
    __table_args__ = (
        CheckConstraint("nivel_jerarquico >= 1", name="ck_jerarquia_nivel"),
        Index("ix_jerarquia_nivel_activo", "nivel_jerarquico", "activo"),
    )

    id_jerarquia: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    codigo_area: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    codigo_seccion: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    codigo_cargo: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    codigo_trabajador_aprobador: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    tipo_relacion: Mapped[str] = mapped_column(String(1), nullable=False)
    nivel_jerarquico: Mapped[int] = mapped_column(Integer, nullable=False)
    activo: Mapped[str] = mapped_column(String(1), nullable=False, default=ActivoInactivo.ACTIVO.value)
    fecha_desde: Mapped[date] = mapped_column(Date, nullable=False, default=date.today)
    fecha_hasta: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    descripcion: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class Sustituto(Base, AuditoriaMixin):
    """Delegación temporal: mientras el titular está ausente aprueba el sustituto."""
    __tablename__ = "sustitutos"
    __table_args__ = (
        CheckConstraint("codigo_trabajador_titular <> codigo_trabajador_sustituto", name="ck_sustituto_distinto"),
        CheckConstraint("fecha_hasta >= fecha_desde", name="ck_sustituto_fechas"),
    )

    id_sustituto: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    codigo_trabajador_titular: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    codigo_trabajador_sustituto: Mapped[str] = mapped_column(String(20), nullable=False)
    fecha_desde: Mapped[date] = mapped_column(Date, nullable=False)
    fecha_hasta: Mapped[date] = mapped_column(Date, nullable=False)
    motivo: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    observacion: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    activo: Mapped[str] = mapped_column(String(1), nullable=False, default=ActivoInactivo.ACTIVO.value)
