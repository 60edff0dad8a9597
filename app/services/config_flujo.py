# app/services/config_flujo.py

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import ResourceNotFoundException, ValidationException
from app.models.enums import ActivoInactivo, TipoSolicitud
from app.models.flujo import ConfigFlujo
from app.schemas.flujo import ConfigFlujoCreate, ConfigFlujoUpdate, ConfigFlujoResponse
from app.services.catalogo import CatalogService
from app.services.matching import codigo
from app.utils.pagination import paginar

logger = logging.getLogger(__name__)

CAMPOS_CODIGO = ("codigo_permiso", "codigo_area", "codigo_seccion", "codigo_cargo")


def validar_vigencia(fecha_desde: Optional[date], fecha_hasta: Optional[date]) -> None:
    if fecha_desde and fecha_hasta and fecha_hasta < fecha_desde:
        raise ValidationException(
            "La fecha hasta no puede ser anterior a la fecha desde",
            details={"fecha_desde": str(fecha_desde), "fecha_hasta": str(fecha_hasta)}
        )


class ConfigFlujoService:
    def __init__(self, db: Session, catalog: Optional[CatalogService] = None):
        self.db = db
        self.catalog = catalog

    def _validar(self, datos: Dict[str, Any]) -> None:
        if datos.get("niveles_requeridos") is None or datos["niveles_requeridos"] < 1:
            raise ValidationException(
                "Los niveles requeridos deben ser al menos 1",
                details={"niveles_requeridos": datos.get("niveles_requeridos")}
            )
        desde, hasta = datos.get("dias_desde"), datos.get("dias_hasta")
        if desde is not None and hasta is not None and desde > hasta:
            raise ValidationException(
                "El rango de días es inválido: 'dias_desde' es mayor que 'dias_hasta'",
                details={"dias_desde": str(desde), "dias_hasta": str(hasta)}
            )
        validar_vigencia(datos.get("fecha_desde"), datos.get("fecha_hasta"))
        if datos.get("codigo_permiso") and datos.get("tipo_solicitud") != TipoSolicitud.PERMISO.value:
            raise ValidationException(
                "Solo las reglas de permisos pueden indicar un código de permiso",
                details={"tipo_solicitud": datos.get("tipo_solicitud"), "codigo_permiso": datos.get("codigo_permiso")}
            )

    def _commit(self, config: ConfigFlujo) -> ConfigFlujo:
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Error guardando configuración de flujo")
            raise
        self.db.refresh(config)
        return config

    # === CONSULTAS ===
    def get_configuraciones(self, filters: Dict[str, Any], page: int = 1, limit: int = 10) -> Dict[str, Any]:
        query = self.db.query(ConfigFlujo)
        if filters.get("tipo_solicitud"):
            query = query.filter(ConfigFlujo.tipo_solicitud == filters["tipo_solicitud"])
        if filters.get("codigo_area"):
            query = query.filter(ConfigFlujo.codigo_area == filters["codigo_area"])
        if filters.get("codigo_permiso"):
            query = query.filter(ConfigFlujo.codigo_permiso == filters["codigo_permiso"])
        if filters.get("activo"):
            query = query.filter(ConfigFlujo.activo == filters["activo"])

        query = query.order_by(ConfigFlujo.tipo_solicitud, ConfigFlujo.orden, ConfigFlujo.id_config)
        items, total, page, limit, pages = paginar(query, page, limit)
        return {
            "configuraciones": self.enriquecer(items),
            "total": total,
            "page": page,
            "limit": limit,
            "total_pages": pages
        }

    def get_configuracion(self, id_config: int) -> ConfigFlujo:
        config = self.db.query(ConfigFlujo).filter(ConfigFlujo.id_config == id_config).first()
        if not config:
            raise ResourceNotFoundException(f"Configuración de flujo {id_config} no encontrada")
        return config

    def reglas_activas(self, tipo_solicitud: Optional[str] = None) -> List[ConfigFlujo]:
        """Foto de las reglas activas para el motor de enrutamiento."""
        query = self.db.query(ConfigFlujo).filter(ConfigFlujo.activo == ActivoInactivo.ACTIVO.value)
        if tipo_solicitud:
            query = query.filter(ConfigFlujo.tipo_solicitud == tipo_solicitud)
        return query.all()

    # === ESCRITURA ===
    def create_configuracion(self, data: ConfigFlujoCreate, usuario: str) -> ConfigFlujo:
        datos = data.model_dump()
        for campo in CAMPOS_CODIGO:
            datos[campo] = codigo(datos.get(campo))
        self._validar(datos)

        config = ConfigFlujo(**datos, usuario_registro=usuario)
        self.db.add(config)
        config = self._commit(config)
        logger.info("Configuración de flujo %s creada por %s", config.id_config, usuario)
        return config

    def update_configuracion(self, id_config: int, data: ConfigFlujoUpdate, usuario: str) -> ConfigFlujo:
        config = self.get_configuracion(id_config)
        cambios = data.model_dump(exclude_unset=True)
        for campo in CAMPOS_CODIGO:
            if campo in cambios:
                cambios[campo] = codigo(cambios[campo])

        datos = {c.key: getattr(config, c.key) for c in ConfigFlujo.__table__.columns}
        datos.update(cambios)
        self._validar(datos)

        for field, value in cambios.items():
            setattr(config, field, value)
        config.usuario_modificacion = usuario
        config = self._commit(config)
        logger.info("Configuración de flujo %s actualizada por %s", id_config, usuario)
        return config

    def delete_configuracion(self, id_config: int, usuario: str) -> ConfigFlujo:
        """Desactiva la regla; las solicitudes ya enrutadas conservan su cadena."""
        config = self.get_configuracion(id_config)
        config.activo = ActivoInactivo.INACTIVO.value
        config.usuario_modificacion = usuario
        config = self._commit(config)
        logger.info("Configuración de flujo %s desactivada por %s", id_config, usuario)
        return config

    # === RESPUESTAS ===
    def enriquecer(self, configs: List[ConfigFlujo]) -> List[ConfigFlujoResponse]:
        areas = secciones = cargos = permisos = {}
        if self.catalog:
            areas = self.catalog.nombres_areas(c.codigo_area for c in configs)
            secciones = self.catalog.nombres_secciones(c.codigo_seccion for c in configs)
            cargos = self.catalog.nombres_cargos(c.codigo_cargo for c in configs)
            permisos = self.catalog.nombres_permisos(c.codigo_permiso for c in configs)

        resultado = []
        for config in configs:
            item = ConfigFlujoResponse.model_validate(config)
            item.area_nombre = areas.get(config.codigo_area)
            item.seccion_nombre = secciones.get(config.codigo_seccion)
            item.cargo_nombre = cargos.get(config.codigo_cargo)
            item.permiso_nombre = permisos.get(config.codigo_permiso)
            resultado.append(item)
        return resultado
