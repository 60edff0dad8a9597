# app/schemas/catalogo.py

from pydantic import BaseModel, ConfigDict
from typing import Optional, List, Generic, TypeVar

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    items: List[T]
    total: int
    page: int
    limit: int
    pages: int


class AreaItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    codigo: str
    descripcion: str


class SeccionItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    codigo: str
    descripcion: str
    codigo_area: Optional[str] = None


class CargoItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    codigo: str
    descripcion: str


class TrabajadorItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    codigo: str
    nombre_completo: str
    numero_dni: Optional[str] = None
    codigo_area: Optional[str] = None
    codigo_seccion: Optional[str] = None
    codigo_cargo: Optional[str] = None


class PermisoItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    codigo: str
    descripcion: str
