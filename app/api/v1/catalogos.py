# app/api/v1/catalogos.py

from fastapi import APIRouter, Depends, Query
from typing import Optional

from app.api.deps import get_catalog, get_current_user
from app.core.config import settings
from app.models.user import Usuario
from app.schemas.catalogo import AreaItem, CargoItem, Page, PermisoItem, SeccionItem, TrabajadorItem
from app.services.catalogo import CatalogService

router = APIRouter()


@router.get("/areas", response_model=Page[AreaItem])
def buscar_areas(
    q: Optional[str] = Query(None, description="Código (prefijo) o descripción"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    catalog: CatalogService = Depends(get_catalog),
    current_user: Usuario = Depends(get_current_user)
):
    return catalog.buscar_areas(q, page, limit)


@router.get("/secciones", response_model=Page[SeccionItem])
def buscar_secciones(
    q: Optional[str] = Query(None),
    codigo_area: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    catalog: CatalogService = Depends(get_catalog),
    current_user: Usuario = Depends(get_current_user)
):
    return catalog.buscar_secciones(q, codigo_area, page, limit)


@router.get("/cargos", response_model=Page[CargoItem])
def buscar_cargos(
    q: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    catalog: CatalogService = Depends(get_catalog),
    current_user: Usuario = Depends(get_current_user)
):
    return catalog.buscar_cargos(q, page, limit)


@router.get("/trabajadores", response_model=Page[TrabajadorItem])
def buscar_trabajadores(
    q: Optional[str] = Query(None, description="Código (prefijo) o nombre"),
    codigo_area: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    catalog: CatalogService = Depends(get_catalog),
    current_user: Usuario = Depends(get_current_user)
):
    return catalog.buscar_trabajadores(q, codigo_area, page, limit)


@router.get("/permisos", response_model=Page[PermisoItem])
def buscar_permisos(
    q: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    catalog: CatalogService = Depends(get_catalog),
    current_user: Usuario = Depends(get_current_user)
):
    return catalog.buscar_permisos(q, page, limit)
