# app/services/jerarquia.py

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import ResourceNotFoundException, ValidationException
from app.models.enums import ActivoInactivo
from app.models.flujo import Jerarquia
from app.schemas.flujo import JerarquiaCreate, JerarquiaUpdate, JerarquiaResponse
from app.services.catalogo import CatalogService
from app.services.config_flujo import validar_vigencia
from app.services.matching import codigo
from app.utils.pagination import paginar

logger = logging.getLogger(__name__)

CAMPOS_ALCANCE = ("codigo_area", "codigo_seccion", "codigo_cargo")


class JerarquiaService:
    def __init__(self, db: Session, catalog: Optional[CatalogService] = None):
        self.db = db
        self.catalog = catalog

    def _validar(self, datos: Dict[str, Any]) -> None:
        if datos.get("nivel_jerarquico") is None or datos["nivel_jerarquico"] < 1:
            raise ValidationException(
                "El nivel jerárquico debe ser al menos 1",
                details={"nivel_jerarquico": datos.get("nivel_jerarquico")}
            )
        if not codigo(datos.get("codigo_trabajador_aprobador")):
            raise ValidationException("Debe indicar el trabajador aprobador")
        validar_vigencia(datos.get("fecha_desde"), datos.get("fecha_hasta"))

    def _commit(self, row: Jerarquia) -> Jerarquia:
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Error guardando jerarquía de aprobación")
            raise
        self.db.refresh(row)
        return row

    def get_jerarquias(self, filters: Dict[str, Any], page: int = 1, limit: int = 10) -> Dict[str, Any]:
        query = self.db.query(Jerarquia)
        if filters.get("codigo_area"):
            query = query.filter(Jerarquia.codigo_area == filters["codigo_area"])
        if filters.get("codigo_trabajador_aprobador"):
            query = query.filter(Jerarquia.codigo_trabajador_aprobador == filters["codigo_trabajador_aprobador"])
        if filters.get("nivel_jerarquico"):
            query = query.filter(Jerarquia.nivel_jerarquico == filters["nivel_jerarquico"])
        if filters.get("activo"):
            query = query.filter(Jerarquia.activo == filters["activo"])

        query = query.order_by(Jerarquia.codigo_area, Jerarquia.nivel_jerarquico, Jerarquia.id_jerarquia)
        items, total, page, limit, pages = paginar(query, page, limit)
        return {
            "jerarquias": self.enriquecer(items),
            "total": total,
            "page": page,
            "limit": limit,
            "total_pages": pages
        }

    def get_jerarquia(self, id_jerarquia: int) -> Jerarquia:
        row = self.db.query(Jerarquia).filter(Jerarquia.id_jerarquia == id_jerarquia).first()
        if not row:
            raise ResourceNotFoundException(f"Jerarquía {id_jerarquia} no encontrada")
        return row

    def jerarquias_activas(self) -> List[Jerarquia]:
        return self.db.query(Jerarquia).filter(Jerarquia.activo == ActivoInactivo.ACTIVO.value).all()

    def create_jerarquia(self, data: JerarquiaCreate, usuario: str) -> Jerarquia:
        datos = data.model_dump()
        for campo in CAMPOS_ALCANCE:
            datos[campo] = codigo(datos.get(campo))
        datos["codigo_trabajador_aprobador"] = codigo(datos["codigo_trabajador_aprobador"])
        self._validar(datos)

        row = Jerarquia(**datos, usuario_registro=usuario)
        self.db.add(row)
        row = self._commit(row)
        logger.info(
            "Jerarquía %s creada por %s: nivel %s -> aprobador %s",
            row.id_jerarquia, usuario, row.nivel_jerarquico, row.codigo_trabajador_aprobador
        )
        return row

    def update_jerarquia(self, id_jerarquia: int, data: JerarquiaUpdate, usuario: str) -> Jerarquia:
        row = self.get_jerarquia(id_jerarquia)
        cambios = data.model_dump(exclude_unset=True)
        for campo in CAMPOS_ALCANCE + ("codigo_trabajador_aprobador",):
            if campo in cambios:
                cambios[campo] = codigo(cambios[campo])

        datos = {c.key: getattr(row, c.key) for c in Jerarquia.__table__.columns}
        datos.update(cambios)
        self._validar(datos)

        for field, value in cambios.items():
            setattr(row, field, value)
        row.usuario_modificacion = usuario
        row = self._commit(row)
        logger.info("Jerarquía %s actualizada por %s", id_jerarquia, usuario)
        return row

    def delete_jerarquia(self, id_jerarquia: int, usuario: str) -> Jerarquia:
        row = self.get_jerarquia(id_jerarquia)
        row.activo = ActivoInactivo.INACTIVO.value
        row.usuario_modificacion = usuario
        row = self._commit(row)
        logger.info("Jerarquía %s desactivada por %s", id_jerarquia, usuario)
        return row

    def enriquecer(self, rows: List[Jerarquia]) -> List[JerarquiaResponse]:
        areas = secciones = cargos = trabajadores = {}
        if self.catalog:
            areas = self.catalog.nombres_areas(r.codigo_area for r in rows)
            secciones = self.catalog.nombres_secciones(r.codigo_seccion for r in rows)
            cargos = self.catalog.nombres_cargos(r.codigo_cargo for r in rows)
            trabajadores = self.catalog.nombres_trabajadores(r.codigo_trabajador_aprobador for r in rows)

        resultado = []
        for row in rows:
            item = JerarquiaResponse.model_validate(row)
            item.area_nombre = areas.get(row.codigo_area)
            item.seccion_nombre = secciones.get(row.codigo_seccion)
            item.cargo_nombre = cargos.get(row.codigo_cargo)
            item.aprobador_nombre = trabajadores.get(row.codigo_trabajador_aprobador)
            resultado.append(item)
        return resultado
