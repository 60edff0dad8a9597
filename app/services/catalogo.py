# app/services/catalogo.py

import logging
from typing import Any, Dict, Iterable, Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import ResourceNotFoundException, ValidationException
from app.models.catalogo import Area, Seccion, Cargo, Trabajador, TipoPermiso
from app.services.matching import OrgScope, codigo
from app.utils.pagination import paginar

logger = logging.getLogger(__name__)


class CatalogService:
    """
    Consultas sobre los catálogos de RRHH (áreas, secciones, cargos,
    trabajadores y tipos de permiso).

    Las búsquedas aceptan un texto libre que coincide por prefijo de código o
    por contenido de la descripción, sin distinguir mayúsculas.
    Los helpers ``nombres_*`` solo decoran respuestas: si la BD de RRHH falla
    se registra una advertencia y se devuelve un diccionario vacío.
    """

    def __init__(self, db_rrhh: Optional[Session]):
        self.db_rrhh = db_rrhh

    # === BÚSQUEDAS ===
    def _buscar(self, model, campo_texto, q: Optional[str], page: int, limit: int, *filtros) -> Dict[str, Any]:
        query = self.db_rrhh.query(model)
        for filtro in filtros:
            query = query.filter(filtro)
        if q and q.strip():
            termino = q.strip()
            query = query.filter(
                or_(
                    model.codigo.like(f"{termino}%"),
                    campo_texto.ilike(f"%{termino}%")
                )
            )
        query = query.order_by(model.codigo)
        items, total, page, limit, pages = paginar(query, page, limit)
        return {"items": items, "total": total, "page": page, "limit": limit, "pages": pages}

    def buscar_areas(self, q: Optional[str] = None, page: int = 1, limit: int = 10) -> Dict[str, Any]:
        return self._buscar(Area, Area.descripcion, q, page, limit)

    def buscar_secciones(
        self, q: Optional[str] = None, codigo_area: Optional[str] = None, page: int = 1, limit: int = 10
    ) -> Dict[str, Any]:
        filtros = [Seccion.codigo_area == codigo_area] if codigo_area else []
        return self._buscar(Seccion, Seccion.descripcion, q, page, limit, *filtros)

    def buscar_cargos(self, q: Optional[str] = None, page: int = 1, limit: int = 10) -> Dict[str, Any]:
        return self._buscar(Cargo, Cargo.descripcion, q, page, limit)

    def buscar_trabajadores(
        self, q: Optional[str] = None, codigo_area: Optional[str] = None, page: int = 1, limit: int = 10
    ) -> Dict[str, Any]:
        filtros = [Trabajador.activo.is_(True)]
        if codigo_area:
            filtros.append(Trabajador.codigo_area == codigo_area)
        return self._buscar(Trabajador, Trabajador.nombre_completo, q, page, limit, *filtros)

    def buscar_permisos(self, q: Optional[str] = None, page: int = 1, limit: int = 10) -> Dict[str, Any]:
        return self._buscar(TipoPermiso, TipoPermiso.descripcion, q, page, limit)

    # === ALCANCE DEL SOLICITANTE ===
    def get_trabajador(self, codigo_trabajador: str) -> Trabajador:
        trabajador = self.db_rrhh.query(Trabajador).filter(Trabajador.codigo == codigo_trabajador).first()
        if not trabajador:
            raise ResourceNotFoundException(f"Trabajador '{codigo_trabajador}' no encontrado en RRHH")
        return trabajador

    def alcance_trabajador(self, codigo_trabajador: str) -> OrgScope:
        """
        Área, sección y cargo del trabajador según RRHH. Los errores de BD se
        propagan: sin alcance no se puede enrutar la solicitud.
        """
        trabajador = self.get_trabajador(codigo_trabajador)
        if not trabajador.activo:
            raise ValidationException(
                f"El trabajador '{codigo_trabajador}' no está activo",
                details={"codigo_trabajador": codigo_trabajador}
            )
        return OrgScope(
            codigo_area=codigo(trabajador.codigo_area),
            codigo_seccion=codigo(trabajador.codigo_seccion),
            codigo_cargo=codigo(trabajador.codigo_cargo)
        )

    def existe_permiso(self, codigo_permiso: str) -> bool:
        """
        Si RRHH no responde el código se da por válido: la regla de flujo se
        elige igual con el código tal como llegó.
        """
        try:
            row = self.db_rrhh.query(TipoPermiso).filter(TipoPermiso.codigo == codigo_permiso).first()
        except SQLAlchemyError as e:
            logger.warning("No se pudo verificar el permiso '%s' en RRHH: %s", codigo_permiso, e)
            self.db_rrhh.rollback()
            return True
        return row is not None

    # === NOMBRES PARA ENRIQUECER RESPUESTAS ===
    def _nombres(self, model, campo, codigos: Iterable[Optional[str]]) -> Dict[str, str]:
        codigos = {c for c in codigos if c}
        if not codigos or self.db_rrhh is None:
            return {}
        try:
            rows = self.db_rrhh.query(model.codigo, campo).filter(model.codigo.in_(codigos)).all()
        except SQLAlchemyError as e:
            logger.warning("No se pudieron obtener nombres de %s desde RRHH: %s", model.__tablename__, e)
            self.db_rrhh.rollback()
            return {}
        return {row[0]: row[1] for row in rows}

    def nombres_areas(self, codigos: Iterable[Optional[str]]) -> Dict[str, str]:
        return self._nombres(Area, Area.descripcion, codigos)

    def nombres_secciones(self, codigos: Iterable[Optional[str]]) -> Dict[str, str]:
        return self._nombres(Seccion, Seccion.descripcion, codigos)

    def nombres_cargos(self, codigos: Iterable[Optional[str]]) -> Dict[str, str]:
        return self._nombres(Cargo, Cargo.descripcion, codigos)

    def nombres_trabajadores(self, codigos: Iterable[Optional[str]]) -> Dict[str, str]:
        return self._nombres(Trabajador, Trabajador.nombre_completo, codigos)

    def nombres_permisos(self, codigos: Iterable[Optional[str]]) -> Dict[str, str]:
        return self._nombres(TipoPermiso, TipoPermiso.descripcion, codigos)
