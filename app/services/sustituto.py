# app/services/sustituto.py

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import ResourceNotFoundException, ValidationException
from app.models.enums import ActivoInactivo
from app.models.flujo import Sustituto
from app.schemas.flujo import SustitutoCreate, SustitutoUpdate, SustitutoResponse
from app.services.catalogo import CatalogService
from app.services.matching import codigo
from app.utils.pagination import paginar

logger = logging.getLogger(__name__)


class SustitutoService:
    def __init__(self, db: Session, catalog: Optional[CatalogService] = None):
        self.db = db
        self.catalog = catalog

    def _validar(self, datos: Dict[str, Any], id_sustituto: Optional[int] = None) -> None:
        titular = codigo(datos.get("codigo_trabajador_titular"))
        sustituto = codigo(datos.get("codigo_trabajador_sustituto"))
        if not titular or not sustituto:
            raise ValidationException("Debe indicar el titular y el sustituto")
        if titular == sustituto:
            raise ValidationException(
                "El sustituto debe ser distinto del titular",
                details={"codigo_trabajador_titular": titular}
            )
        desde, hasta = datos.get("fecha_desde"), datos.get("fecha_hasta")
        if not desde or not hasta:
            raise ValidationException("Debe indicar el rango de fechas de la sustitución")
        if hasta < desde:
            raise ValidationException(
                "La fecha hasta no puede ser anterior a la fecha desde",
                details={"fecha_desde": str(desde), "fecha_hasta": str(hasta)}
            )

        if datos.get("activo") != ActivoInactivo.ACTIVO.value:
            return
        # Un titular no puede tener dos sustituciones activas que se solapen
        query = self.db.query(Sustituto).filter(
            Sustituto.codigo_trabajador_titular == titular,
            Sustituto.activo == ActivoInactivo.ACTIVO.value,
            Sustituto.fecha_desde <= hasta,
            Sustituto.fecha_hasta >= desde
        )
        if id_sustituto is not None:
            query = query.filter(Sustituto.id_sustituto != id_sustituto)
        conflicto = query.first()
        if conflicto:
            raise ValidationException(
                f"El titular '{titular}' ya tiene una sustitución activa que se solapa "
                f"({conflicto.fecha_desde} a {conflicto.fecha_hasta})",
                details={"id_sustituto_existente": conflicto.id_sustituto}
            )

    def _commit(self, row: Sustituto) -> Sustituto:
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Error guardando sustituto")
            raise
        self.db.refresh(row)
        return row

    def get_sustitutos(self, filters: Dict[str, Any], page: int = 1, limit: int = 10) -> Dict[str, Any]:
        query = self.db.query(Sustituto)
        if filters.get("codigo_trabajador_titular"):
            query = query.filter(Sustituto.codigo_trabajador_titular == filters["codigo_trabajador_titular"])
        if filters.get("codigo_trabajador_sustituto"):
            query = query.filter(Sustituto.codigo_trabajador_sustituto == filters["codigo_trabajador_sustituto"])
        if filters.get("activo"):
            query = query.filter(Sustituto.activo == filters["activo"])
        if filters.get("vigente_en"):
            query = query.filter(
                Sustituto.fecha_desde <= filters["vigente_en"],
                Sustituto.fecha_hasta >= filters["vigente_en"]
            )

        query = query.order_by(Sustituto.fecha_desde.desc(), Sustituto.id_sustituto.desc())
        items, total, page, limit, pages = paginar(query, page, limit)
        return {
            "sustitutos": self.enriquecer(items),
            "total": total,
            "page": page,
            "limit": limit,
            "total_pages": pages
        }

    def get_sustituto(self, id_sustituto: int) -> Sustituto:
        row = self.db.query(Sustituto).filter(Sustituto.id_sustituto == id_sustituto).first()
        if not row:
            raise ResourceNotFoundException(f"Sustituto {id_sustituto} no encontrado")
        return row

    def sustitutos_activos(self) -> List[Sustituto]:
        return self.db.query(Sustituto).filter(Sustituto.activo == ActivoInactivo.ACTIVO.value).all()

    def create_sustituto(self, data: SustitutoCreate, usuario: str) -> Sustituto:
        datos = data.model_dump()
        datos["codigo_trabajador_titular"] = codigo(datos["codigo_trabajador_titular"])
        datos["codigo_trabajador_sustituto"] = codigo(datos["codigo_trabajador_sustituto"])
        self._validar(datos)

        row = Sustituto(**datos, usuario_registro=usuario)
        self.db.add(row)
        row = self._commit(row)
        logger.info(
            "Sustitución %s registrada por %s: %s -> %s (%s a %s)",
            row.id_sustituto, usuario, row.codigo_trabajador_titular,
            row.codigo_trabajador_sustituto, row.fecha_desde, row.fecha_hasta
        )
        return row

    def update_sustituto(self, id_sustituto: int, data: SustitutoUpdate, usuario: str) -> Sustituto:
        row = self.get_sustituto(id_sustituto)
        cambios = data.model_dump(exclude_unset=True)
        for campo in ("codigo_trabajador_titular", "codigo_trabajador_sustituto"):
            if campo in cambios:
                cambios[campo] = codigo(cambios[campo])

        datos = {c.key: getattr(row, c.key) for c in Sustituto.__table__.columns}
        datos.update(cambios)
        self._validar(datos, id_sustituto=id_sustituto)

        for field, value in cambios.items():
            setattr(row, field, value)
        row.usuario_modificacion = usuario
        row = self._commit(row)
        logger.info("Sustitución %s actualizada por %s", id_sustituto, usuario)
        return row

    def delete_sustituto(self, id_sustituto: int, usuario: str) -> Sustituto:
        row = self.get_sustituto(id_sustituto)
        row.activo = ActivoInactivo.INACTIVO.value
        row.usuario_modificacion = usuario
        row = self._commit(row)
        logger.info("Sustitución %s desactivada por %s", id_sustituto, usuario)
        return row

    def enriquecer(self, rows: List[Sustituto]) -> List[SustitutoResponse]:
        nombres = {}
        if self.catalog:
            codigos = [r.codigo_trabajador_titular for r in rows] + [r.codigo_trabajador_sustituto for r in rows]
            nombres = self.catalog.nombres_trabajadores(codigos)

        resultado = []
        for row in rows:
            item = SustitutoResponse.model_validate(row)
            item.titular_nombre = nombres.get(row.codigo_trabajador_titular)
            item.sustituto_nombre = nombres.get(row.codigo_trabajador_sustituto)
            resultado.append(item)
        return resultado
