# app/models/catalogo.py
# Tablas de la BD de RRHH. Este sistema solo las lee.

from typing import Optional
from sqlalchemy import Integer, String, Boolean
from sqlalchemy.orm import Mapped, mapped_column

from .base import RRHHBase


class Area(RRHHBase):
    __tablename__ = "areas"

    codigo: Mapped[str] = mapped_column(String(20), primary_key=True)
    descripcion: Mapped[str] = mapped_column(String(150), nullable=False)


class Seccion(RRHHBase):
    __tablename__ = "secciones"

    codigo: Mapped[str] = mapped_column(String(20), primary_key=True)
    descripcion: Mapped[str] = mapped_column(String(150), nullable=False)
    codigo_area: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)


class Cargo(RRHHBase):
    __tablename__ = "cargos"

    codigo: Mapped[str] = mapped_column(String(20), primary_key=True)
    descripcion: Mapped[str] = mapped_column(String(150), nullable=False)


class Trabajador(RRHHBase):
    __tablename__ = "trabajadores"

    codigo: Mapped[str] = mapped_column(String(20), primary_key=True)
    nombre_completo: Mapped[str] = mapped_column(String(200), nullable=False)
    numero_dni: Mapped[Optional[str]] = mapped_column(String(20), nullable=True, index=True)
    codigo_area: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    codigo_seccion: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    codigo_cargo: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    dias_vacaciones_anuales: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    activo: Mapped[bool] = mapped_column(Boolean, default=True)


class TipoPermiso(RRHHBase):
    __tablename__ = "tipos_permiso"

    codigo: Mapped[str] = mapped_column(String(20), primary_key=True)
    descripcion: Mapped[str] = mapped_column(String(150), nullable=False)
