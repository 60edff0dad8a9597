# app/models/base.py

from datetime import datetime
from typing import Optional
from sqlalchemy import DateTime, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func


class Base(DeclarativeBase):
    """Base declarativa de la BD de vacaciones."""


class RRHHBase(DeclarativeBase):
    """Base declarativa de los catálogos de la BD de RRHH (solo lectura)."""


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(DateTime, default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)


class AuditoriaMixin:
    """Campos de auditoría de las tablas administrables."""
    fecha_registro: Mapped[datetime] = mapped_column(DateTime, default=func.now(), nullable=False)
    usuario_registro: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    fecha_modificacion: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True, onupdate=func.now())
    usuario_modificacion: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
