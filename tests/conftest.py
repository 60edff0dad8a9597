# tests/conftest.py

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RRHH_DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "clave-de-pruebas")

from datetime import date, datetime
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import get_db, get_db_rrhh
from app.core.security import create_access_token
from app.main import app
from app.models import (
    Area,
    Base,
    Cargo,
    ConfigFlujo,
    Jerarquia,
    Rol,
    RRHHBase,
    Seccion,
    Sustituto,
    TipoPermiso,
    Trabajador,
    Usuario
)
from app.models.enums import NombreRol
from app.services.catalogo import CatalogService

FECHA_EVALUACION = date(2024, 6, 1)
VIGENCIA = date(2024, 1, 1)


def _memory_engine():
    return create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )


@pytest.fixture
def engine():
    engine = _memory_engine()
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def engine_rrhh():
    engine = _memory_engine()
    RRHHBase.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def session_factory_rrhh(engine_rrhh):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine_rrhh)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def db_rrhh(session_factory_rrhh, catalogo_rrhh):
    session = session_factory_rrhh()
    yield session
    session.close()


@pytest.fixture
def catalog(db_rrhh):
    return CatalogService(db_rrhh)


@pytest.fixture
def catalogo_rrhh(session_factory_rrhh):
    """Áreas, secciones, cargos, trabajadores y tipos de permiso de prueba."""
    session = session_factory_rrhh()
    session.add_all([
        Area(codigo="05", descripcion="Finanzas"),
        Area(codigo="06", descripcion="Operaciones"),
        Area(codigo="99", descripcion="Área sin flujo"),
        Seccion(codigo="0501", descripcion="Contabilidad", codigo_area="05"),
        Seccion(codigo="0502", descripcion="Tesorería", codigo_area="05"),
        Seccion(codigo="0601", descripcion="Logística", codigo_area="06"),
        Cargo(codigo="AN", descripcion="Analista"),
        Cargo(codigo="JF", descripcion="Jefe"),
        Trabajador(codigo="100", nombre_completo="Ana Jefa", numero_dni="40000100",
                   codigo_area="05", codigo_seccion="0501", codigo_cargo="JF", dias_vacaciones_anuales=30),
        Trabajador(codigo="150", nombre_completo="Gerardo Gerente", numero_dni="40000150",
                   codigo_area="05", codigo_cargo="JF", dias_vacaciones_anuales=30),
        Trabajador(codigo="200", nombre_completo="Bruno Suplente", numero_dni="40000200",
                   codigo_area="05", codigo_seccion="0501", codigo_cargo="AN", dias_vacaciones_anuales=30),
        Trabajador(codigo="300", nombre_completo="Carla Analista", numero_dni="40000300",
                   codigo_area="05", codigo_seccion="0501", codigo_cargo="AN", dias_vacaciones_anuales=30),
        Trabajador(codigo="301", nombre_completo="Diego Analista", numero_dni="40000301",
                   codigo_area="05", codigo_seccion="0502", codigo_cargo="AN"),
        Trabajador(codigo="900", nombre_completo="Eva Sinflujo", numero_dni="40000900",
                   codigo_area="99", codigo_cargo="AN", dias_vacaciones_anuales=15),
        Trabajador(codigo="999", nombre_completo="Fabio Cesado", numero_dni="40000999",
                   codigo_area="05", activo=False),
        TipoPermiso(codigo="PM", descripcion="Permiso médico"),
        TipoPermiso(codigo="PP", descripcion="Permiso personal"),
        TipoPermiso(codigo="X9", descripcion="Permiso especial"),
    ])
    session.commit()
    session.close()


# === Fábricas de configuración ===

def crear_regla(db, **kwargs) -> ConfigFlujo:
    datos = dict(
        tipo_solicitud="V",
        niveles_requeridos=1,
        orden=1,
        activo="S",
        fecha_desde=VIGENCIA,
        usuario_registro="pruebas"
    )
    datos.update(kwargs)
    regla = ConfigFlujo(**datos)
    db.add(regla)
    db.commit()
    db.refresh(regla)
    return regla


def crear_jerarquia(db, **kwargs) -> Jerarquia:
    datos = dict(
        tipo_relacion="J",
        activo="S",
        fecha_desde=VIGENCIA,
        usuario_registro="pruebas"
    )
    datos.update(kwargs)
    row = Jerarquia(**datos)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def crear_sustituto(db, **kwargs) -> Sustituto:
    datos = dict(activo="S", usuario_registro="pruebas")
    datos.update(kwargs)
    row = Sustituto(**datos)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


@pytest.fixture
def flujo_area_05(db):
    """
    Vacaciones: regla general de 1 nivel (1-5 días) y regla del área 05 de
    2 niveles (1-10 días). Jefe "100" en nivel 1 y gerente "150" en nivel 2.
    Permisos: regla de 1 nivel para cualquier permiso.
    """
    general = crear_regla(db, dias_desde=Decimal("1"), dias_hasta=Decimal("5"), niveles_requeridos=1)
    area = crear_regla(db, codigo_area="05", dias_desde=Decimal("1"), dias_hasta=Decimal("10"), niveles_requeridos=2)
    permisos = crear_regla(db, tipo_solicitud="P", niveles_requeridos=1, codigo_area="05")
    crear_jerarquia(db, codigo_area="05", codigo_trabajador_aprobador="100", nivel_jerarquico=1)
    crear_jerarquia(db, codigo_area="05", codigo_trabajador_aprobador="150", tipo_relacion="G", nivel_jerarquico=2)
    return {"general": general, "area": area, "permisos": permisos}


# === Usuarios y API ===

@pytest.fixture
def usuarios(db):
    roles = {}
    for nombre in NombreRol:
        rol = Rol(nombre_rol=nombre.value, descripcion=nombre.value.title())
        db.add(rol)
        roles[nombre.value] = rol
    db.flush()

    definicion = [
        ("carla", "300", [NombreRol.EMPLEADO.value]),
        ("ana", "100", [NombreRol.APROBADOR.value, NombreRol.EMPLEADO.value]),
        ("gerardo", "150", [NombreRol.APROBADOR.value]),
        ("bruno", "200", [NombreRol.EMPLEADO.value]),
        ("admin", None, [NombreRol.ADMIN_VACACIONES.value]),
        ("rrhh", None, [NombreRol.RRHH.value]),
        ("superadmin", None, []),
        ("inactivo", "301", [NombreRol.EMPLEADO.value]),
    ]
    creados = {}
    for username, codigo, nombres_roles in definicion:
        user = Usuario(
            login_username=username,
            password_hash="sin-login",
            codigo_trabajador=codigo,
            is_active=username != "inactivo",
            roles=[roles[n] for n in nombres_roles]
        )
        db.add(user)
        creados[username] = user
    db.commit()
    return creados


def auth_headers(username: str) -> dict:
    token = create_access_token(data={"sub": username})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def client(session_factory, session_factory_rrhh, catalogo_rrhh):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    def override_get_db_rrhh():
        session = session_factory_rrhh()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_db_rrhh] = override_get_db_rrhh
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def marcar_registro(db, row, fecha: datetime):
    """Fija fecha_registro para ordenar sustituciones de forma determinista."""
    row.fecha_registro = fecha
    db.commit()
    db.refresh(row)
    return row
