# app/models/solicitud.py

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from sqlalchemy import Integer, String, Date, DateTime, Numeric, Text, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from .base import Base
from .enums import EstadoSolicitud, EstadoAprobacion


class Solicitud(Base):
    __tablename__ = "solicitudes"
    __table_args__ = (
        CheckConstraint("fecha_fin >= fecha_inicio", name="ck_solicitud_fechas"),
    )

    id_solicitud: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    tipo_solicitud: Mapped[str] = mapped_column(String(1), nullable=False)
    codigo_permiso: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    codigo_trabajador: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    fecha_inicio: Mapped[date] = mapped_column(Date, nullable=False)
    fecha_fin: Mapped[date] = mapped_column(Date, nullable=False)
    dias_solicitados: Mapped[Decimal] = mapped_column(Numeric(6, 1), nullable=False)
    observacion: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    motivo: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    estado: Mapped[str] = mapped_column(String(1), nullable=False, default=EstadoSolicitud.PENDIENTE.value, index=True)

    # Alcance del solicitante al momento del registro
    codigo_area: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    codigo_seccion: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    codigo_cargo: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    id_config: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("config_flujo.id_config"), nullable=True)

    fecha_registro: Mapped[datetime] = mapped_column(DateTime, default=func.now(), nullable=False)
    usuario_registro: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    fecha_modificacion: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    usuario_modificacion: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    fecha_anulacion: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    usuario_anulacion: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    motivo_anulacion: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    aprobaciones: Mapped[List["Aprobacion"]] = relationship(
        "Aprobacion",
        back_populates="solicitud",
        order_by="Aprobacion.nivel",
        cascade="all, delete-orphan"
    )

    __mapper_args__ = {"version_id_col": version}

    @property
    def nivel_activo(self) -> Optional["Aprobacion"]:
        """Aprobación pendiente de menor nivel, o None si no queda ninguna."""
        if self.estado != EstadoSolicitud.PENDIENTE:
            return None
        pendientes = [a for a in self.aprobaciones if a.estado == EstadoAprobacion.PENDIENTE]
        return min(pendientes, key=lambda a: a.nivel) if pendientes else None

    @property
    def niveles_requeridos(self) -> int:
        return len(self.aprobaciones)


class Aprobacion(Base):
    __tablename__ = "aprobaciones"
    __table_args__ = (
        UniqueConstraint("id_solicitud", "nivel", name="uq_aprobacion_solicitud_nivel"),
    )

    id_aprobacion: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    id_solicitud: Mapped[int] = mapped_column(Integer, ForeignKey("solicitudes.id_solicitud"), nullable=False, index=True)
    nivel: Mapped[int] = mapped_column(Integer, nullable=False)
    codigo_trabajador_aprueba: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    codigo_trabajador_titular: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    estado: Mapped[str] = mapped_column(String(1), nullable=False, default=EstadoAprobacion.PENDIENTE.value)
    observacion: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    fecha: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    usuario: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    ip_dispositivo: Mapped[Optional[str]] = mapped_column(String(45), nullable=True)

    solicitud: Mapped["Solicitud"] = relationship("Solicitud", back_populates="aprobaciones")
