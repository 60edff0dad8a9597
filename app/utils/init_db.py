# app/utils/init_db.py

import os
from sqlalchemy.orm import Session
from app.core.config import settings
from app.core.database import engine
from app.core.security import get_password_hash
from app.models.base import Base
from app.models.enums import NombreRol
from app.models.user import Rol, Usuario

ROLES = [
    (NombreRol.SUPERADMIN.value, "Acceso total a la administración"),
    (NombreRol.ADMIN_VACACIONES.value, "Configura reglas de flujo, jerarquías y sustitutos"),
    (NombreRol.RRHH.value, "Gestiona solicitudes, anulaciones y reportes"),
    (NombreRol.APROBADOR.value, "Aprueba o rechaza los niveles asignados"),
    (NombreRol.EMPLEADO.value, "Registra sus solicitudes de vacaciones y permisos"),
]


def create_tables():
    """Crear todas las tablas en la base de datos de vacaciones"""
    Base.metadata.create_all(bind=engine)
    print("✅ Tablas creadas exitosamente")


def init_roles(db: Session):
    """Crear los roles básicos del sistema"""
    for nombre, descripcion in ROLES:
        if not db.query(Rol).filter(Rol.nombre_rol == nombre).first():
            db.add(Rol(nombre_rol=nombre, descripcion=descripcion))
    db.commit()
    print("✅ Roles creados exitosamente")


def init_admin_user(db: Session, password: str):
    """Crear el usuario superadministrador si no existe"""
    username = settings.SUPERADMIN_USERNAME or "superadmin"
    if db.query(Usuario).filter(Usuario.login_username == username).first():
        print(f"ℹ️  Usuario administrador '{username}' ya existe")
        return

    rol = db.query(Rol).filter(Rol.nombre_rol == NombreRol.SUPERADMIN.value).first()
    admin_user = Usuario(
        login_username=username,
        password_hash=get_password_hash(password),
        is_active=True,
        roles=[rol] if rol else []
    )
    db.add(admin_user)
    db.commit()
    print(f"✅ Usuario administrador creado: {username}")


def main():
    """Ejecutar inicialización completa de la base de datos"""
    print("🚀 Iniciando configuración de base de datos de vacaciones...")

    create_tables()

    password = os.environ.get("ADMIN_INITIAL_PASSWORD", "admin123")
    with Session(engine) as db:
        init_roles(db)
        init_admin_user(db, password)

    print("✅ Inicialización de base de datos completada")
    print(f"\n👥 Roles configurados: {', '.join(nombre for nombre, _ in ROLES)}")


if __name__ == "__main__":
    main()
