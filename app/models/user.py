# app/models/user.py

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Text, Table
from sqlalchemy.orm import relationship, Mapped, mapped_column
from typing import List, Optional
from .base import Base, TimestampMixin
from datetime import datetime

# Definición de la tabla de asociación
UsuarioRol = Table(
    'usuario_rol',
    Base.metadata,
    Column('id_usuario', Integer, ForeignKey('usuarios.id_usuario'), primary_key=True),
    Column('id_rol', Integer, ForeignKey('roles.id_rol'), primary_key=True),
)

class Rol(Base, TimestampMixin):
    __tablename__ = "roles"

    id_rol: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    nombre_rol: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    descripcion: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    usuarios: Mapped[List["Usuario"]] = relationship("Usuario", secondary=UsuarioRol, back_populates="roles")

class Usuario(Base, TimestampMixin):
    __tablename__ = "usuarios"

    id_usuario: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    login_username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    codigo_trabajador: Mapped[Optional[str]] = mapped_column(String(20), nullable=True, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    ultimo_acceso: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    roles: Mapped[List["Rol"]] = relationship("Rol", secondary=UsuarioRol, back_populates="usuarios", lazy="selectin")

    @property
    def role_names(self) -> List[str]:
        return [rol.nombre_rol for rol in self.roles]

