# app/core/database.py

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from typing import Generator
from app.core.config import settings

# --- Motor para la BD de vacaciones (solicitudes, flujo, aprobaciones) ---
engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    echo=False
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# --- Motor para la BD de RRHH (catálogos de solo lectura) ---
engine_rrhh = create_engine(
    settings.RRHH_DATABASE_URL,
    pool_pre_ping=True,
    echo=False
)
SessionLocal_rrhh = sessionmaker(autocommit=False, autoflush=False, bind=engine_rrhh)

def get_db() -> Generator[Session, None, None]:
    """
    Dependency injector que provee una sesión para la base de datos de vacaciones.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def get_db_rrhh() -> Generator[Session, None, None]:
    """
    Dependency injector que provee una sesión para la base de datos de RRHH.
    """
    db = SessionLocal_rrhh()
    try:
        yield db
    finally:
        db.close()
