# app/services/solicitud.py

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import and_, exists
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, aliased, selectinload
from sqlalchemy.orm.exc import StaleDataError

from app.core.exceptions import (
    InvalidTransitionException,
    ResourceNotFoundException,
    ValidationException
)
from app.models.enums import (
    DecisionAprobacion,
    EstadoAprobacion,
    EstadoSolicitud,
    TipoSolicitud
)
from app.models.solicitud import Aprobacion, Solicitud
from app.schemas.solicitud import AprobacionResponse, SolicitudCreate, SolicitudResponse
from app.services.approval_chain import AprobadorResuelto, resolve_approval_chain
from app.services.catalogo import CatalogService
from app.services.config_flujo import ConfigFlujoService
from app.services.jerarquia import JerarquiaService
from app.services.matching import CriteriosSolicitud, OrgScope, codigo, match_flow_config
from app.services.sustituto import SustitutoService
from app.utils.pagination import paginar

logger = logging.getLogger(__name__)

ESTADOS_OCUPAN_CALENDARIO = (EstadoSolicitud.PENDIENTE.value, EstadoSolicitud.APROBADO.value)
ESTADOS_ANULABLES = (
    EstadoSolicitud.PENDIENTE.value,
    EstadoSolicitud.APROBADO.value,
    EstadoSolicitud.RECHAZADO.value
)


def validar_solicitud(data: SolicitudCreate) -> None:
    """Reglas de forma de la solicitud; no toca la BD."""
    if data.fecha_fin < data.fecha_inicio:
        raise ValidationException(
            "La fecha fin no puede ser anterior a la fecha inicio",
            details={"fecha_inicio": str(data.fecha_inicio), "fecha_fin": str(data.fecha_fin)}
        )

    dias = Decimal(data.dias_solicitados)
    dias_calendario = (data.fecha_fin - data.fecha_inicio).days + 1
    if dias <= 0 or dias > dias_calendario:
        raise ValidationException(
            f"Los días solicitados deben ser mayores a 0 y no superar los {dias_calendario} días del rango",
            details={"dias_solicitados": str(dias), "dias_calendario": dias_calendario}
        )
    if (dias * 2) % 1 != 0:
        raise ValidationException(
            "Los días solicitados deben expresarse en días completos o medios días",
            details={"dias_solicitados": str(dias)}
        )

    validar_tipo_permiso(data.tipo_solicitud, data.codigo_permiso)


def validar_tipo_permiso(tipo_solicitud: str, codigo_permiso: Optional[str]) -> None:
    """Los permisos llevan tipo de permiso; las vacaciones no."""
    permiso = codigo(codigo_permiso)
    if tipo_solicitud == TipoSolicitud.PERMISO.value and not permiso:
        raise ValidationException("Debe indicar el tipo de permiso")
    if tipo_solicitud == TipoSolicitud.VACACIONES.value and permiso:
        raise ValidationException(
            "Las solicitudes de vacaciones no llevan tipo de permiso",
            details={"codigo_permiso": permiso}
        )


class SolicitudService:
    """
    Máquina de estados de las solicitudes de vacaciones y permisos.

    - Registro: valida, enruta (regla de flujo + cadena de aprobadores) y
      crea la solicitud con una aprobación pendiente por nivel. Si el
      enrutamiento falla no se guarda nada.
    - Decisión: solo el nivel pendiente más bajo puede decidirse. Aprobar el
      último nivel aprueba la solicitud; rechazar cualquier nivel la rechaza
      y los niveles siguientes quedan pendientes.
    - Anulación: desde P, A o R con motivo obligatorio. N es terminal.

    Los permisos del usuario se verifican en la capa API, no aquí.
    """

    def __init__(self, db: Session, catalog: Optional[CatalogService] = None):
        self.db = db
        self.catalog = catalog

    # === REGISTRO ===
    def resolver_alcance(self, data: SolicitudCreate, codigo_trabajador: str) -> OrgScope:
        alcance = OrgScope(
            codigo_area=codigo(data.codigo_area),
            codigo_seccion=codigo(data.codigo_seccion),
            codigo_cargo=codigo(data.codigo_cargo)
        )
        if alcance != OrgScope():
            return alcance
        if self.catalog is None:
            raise ValidationException(
                "No se pudo determinar el área del trabajador",
                details={"codigo_trabajador": codigo_trabajador}
            )
        return self.catalog.alcance_trabajador(codigo_trabajador)

    def _validar_solapamiento(self, codigo_trabajador: str, fecha_inicio: date, fecha_fin: date) -> None:
        existente = self.db.query(Solicitud).filter(
            Solicitud.codigo_trabajador == codigo_trabajador,
            Solicitud.estado.in_(ESTADOS_OCUPAN_CALENDARIO),
            Solicitud.fecha_inicio <= fecha_fin,
            Solicitud.fecha_fin >= fecha_inicio
        ).first()
        if existente:
            raise ValidationException(
                f"Ya existe la solicitud {existente.id_solicitud} para el rango "
                f"{existente.fecha_inicio} a {existente.fecha_fin}",
                details={"id_solicitud_existente": existente.id_solicitud}
            )

    def enrutar(
        self,
        tipo_solicitud: str,
        dias_solicitados: Decimal,
        alcance: OrgScope,
        fecha_evaluacion: date,
        codigo_permiso: Optional[str] = None
    ):
        """Regla de flujo aplicable y cadena de aprobadores para los datos dados."""
        validar_tipo_permiso(tipo_solicitud, codigo_permiso)
        criterios = CriteriosSolicitud(
            tipo_solicitud=tipo_solicitud,
            dias_solicitados=Decimal(dias_solicitados),
            fecha_evaluacion=fecha_evaluacion,
            alcance=alcance,
            codigo_permiso=codigo(codigo_permiso)
        )
        regla = match_flow_config(ConfigFlujoService(self.db).reglas_activas(tipo_solicitud), criterios)
        cadena = resolve_approval_chain(
            regla.niveles_requeridos,
            alcance,
            fecha_evaluacion,
            JerarquiaService(self.db).jerarquias_activas(),
            SustitutoService(self.db).sustitutos_activos()
        )
        return regla, cadena

    def submit(
        self,
        data: SolicitudCreate,
        codigo_trabajador: str,
        usuario: str,
        fecha_evaluacion: Optional[date] = None
    ) -> Solicitud:
        validar_solicitud(data)
        codigo_trabajador = codigo(codigo_trabajador)
        if not codigo_trabajador:
            raise ValidationException("El usuario no tiene un trabajador asociado")

        permiso = codigo(data.codigo_permiso)
        if permiso and self.catalog is not None and not self.catalog.existe_permiso(permiso):
            raise ValidationException(
                f"El tipo de permiso '{permiso}' no existe",
                details={"codigo_permiso": permiso}
            )

        alcance = self.resolver_alcance(data, codigo_trabajador)
        self._validar_solapamiento(codigo_trabajador, data.fecha_inicio, data.fecha_fin)

        fecha_evaluacion = fecha_evaluacion or date.today()
        regla, cadena = self.enrutar(
            data.tipo_solicitud, data.dias_solicitados, alcance, fecha_evaluacion, permiso
        )

        solicitud = Solicitud(
            tipo_solicitud=data.tipo_solicitud,
            codigo_permiso=permiso,
            codigo_trabajador=codigo_trabajador,
            fecha_inicio=data.fecha_inicio,
            fecha_fin=data.fecha_fin,
            dias_solicitados=Decimal(data.dias_solicitados),
            observacion=data.observacion,
            motivo=data.motivo,
            estado=EstadoSolicitud.PENDIENTE.value,
            codigo_area=alcance.codigo_area,
            codigo_seccion=alcance.codigo_seccion,
            codigo_cargo=alcance.codigo_cargo,
            id_config=regla.id_config,
            usuario_registro=usuario
        )
        solicitud.aprobaciones = [self._aprobacion_pendiente(aprobador) for aprobador in cadena]

        try:
            self.db.add(solicitud)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Error registrando solicitud de %s", codigo_trabajador)
            raise
        self.db.refresh(solicitud)

        logger.info(
            "Solicitud %s registrada: trabajador=%s tipo=%s dias=%s regla=%s aprobadores=%s",
            solicitud.id_solicitud, codigo_trabajador, solicitud.tipo_solicitud,
            solicitud.dias_solicitados, regla.id_config,
            [a.codigo_trabajador_aprueba for a in cadena]
        )
        return solicitud

    @staticmethod
    def _aprobacion_pendiente(aprobador: AprobadorResuelto) -> Aprobacion:
        return Aprobacion(
            nivel=aprobador.nivel,
            codigo_trabajador_aprueba=aprobador.codigo_trabajador_aprueba,
            codigo_trabajador_titular=aprobador.codigo_trabajador_titular,
            estado=EstadoAprobacion.PENDIENTE.value
        )

    # === DECISIÓN POR NIVEL ===
    def decide_level(
        self,
        id_solicitud: int,
        decision: str,
        observacion: Optional[str],
        usuario: str,
        nivel: Optional[int] = None,
        ip: Optional[str] = None
    ) -> Solicitud:
        try:
            decision = DecisionAprobacion(codigo(decision))
        except ValueError:
            raise ValidationException(
                "La decisión debe ser A (aprobar) o R (rechazar)",
                details={"decision": decision}
            )

        solicitud = (
            self.db.query(Solicitud)
            .options(selectinload(Solicitud.aprobaciones))
            .filter(Solicitud.id_solicitud == id_solicitud)
            .with_for_update()
            .populate_existing()
            .first()
        )
        if not solicitud:
            raise ResourceNotFoundException(f"Solicitud {id_solicitud} no encontrada")

        if solicitud.estado != EstadoSolicitud.PENDIENTE.value:
            raise InvalidTransitionException(
                f"La solicitud {id_solicitud} ya no está pendiente",
                id_solicitud=id_solicitud,
                estado_actual=solicitud.estado
            )

        activa = solicitud.nivel_activo
        if activa is None:
            raise InvalidTransitionException(
                f"La solicitud {id_solicitud} no tiene niveles pendientes de decisión",
                id_solicitud=id_solicitud,
                estado_actual=solicitud.estado
            )
        if nivel is not None and nivel != activa.nivel:
            if nivel < 1 or nivel > solicitud.niveles_requeridos:
                mensaje = f"La solicitud {id_solicitud} no tiene nivel {nivel}"
            elif nivel < activa.nivel:
                mensaje = f"El nivel {nivel} de la solicitud {id_solicitud} ya fue decidido"
            else:
                mensaje = (
                    f"El nivel {nivel} no puede decidirse mientras el nivel "
                    f"{activa.nivel} siga pendiente"
                )
            raise InvalidTransitionException(mensaje, id_solicitud=id_solicitud, estado_actual=solicitud.estado)

        ahora = datetime.now()
        activa.observacion = observacion
        activa.fecha = ahora
        activa.usuario = usuario
        activa.ip_dispositivo = ip

        if decision == DecisionAprobacion.RECHAZAR:
            activa.estado = EstadoAprobacion.RECHAZADO.value
            solicitud.estado = EstadoSolicitud.RECHAZADO.value
        else:
            activa.estado = EstadoAprobacion.APROBADO.value
            if activa.nivel == solicitud.niveles_requeridos:
                solicitud.estado = EstadoSolicitud.APROBADO.value

        solicitud.fecha_modificacion = ahora
        solicitud.usuario_modificacion = usuario
        self._commit_transicion(solicitud)

        logger.info(
            "Solicitud %s nivel %s %s por %s; estado solicitud=%s",
            id_solicitud, activa.nivel,
            "aprobado" if decision == DecisionAprobacion.APROBAR else "rechazado",
            usuario, solicitud.estado
        )
        return solicitud

    # === ANULACIÓN ===
    def anular(self, id_solicitud: int, motivo: str, usuario: str) -> Solicitud:
        if not motivo or not motivo.strip():
            raise ValidationException("Debe indicar el motivo de la anulación")

        solicitud = (
            self.db.query(Solicitud)
            .options(selectinload(Solicitud.aprobaciones))
            .filter(Solicitud.id_solicitud == id_solicitud)
            .with_for_update()
            .populate_existing()
            .first()
        )
        if not solicitud:
            raise ResourceNotFoundException(f"Solicitud {id_solicitud} no encontrada")
        if solicitud.estado not in ESTADOS_ANULABLES:
            raise InvalidTransitionException(
                f"La solicitud {id_solicitud} ya está anulada",
                id_solicitud=id_solicitud,
                estado_actual=solicitud.estado
            )

        estado_anterior = solicitud.estado
        ahora = datetime.now()
        solicitud.estado = EstadoSolicitud.ANULADO.value
        solicitud.fecha_anulacion = ahora
        solicitud.usuario_anulacion = usuario
        solicitud.motivo_anulacion = motivo.strip()
        solicitud.fecha_modificacion = ahora
        solicitud.usuario_modificacion = usuario
        self._commit_transicion(solicitud)

        logger.info(
            "Solicitud %s anulada por %s (estado anterior %s)",
            id_solicitud, usuario, estado_anterior
        )
        return solicitud

    def _commit_transicion(self, solicitud: Solicitud) -> None:
        id_solicitud = solicitud.id_solicitud
        try:
            self.db.commit()
        except StaleDataError:
            self.db.rollback()
            logger.warning("Conflicto de concurrencia en la solicitud %s", id_solicitud)
            raise InvalidTransitionException(
                f"La solicitud {id_solicitud} fue modificada por otro usuario. Recargue e intente de nuevo",
                id_solicitud=id_solicitud
            )
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Error guardando la transición de la solicitud %s", id_solicitud)
            raise
        self.db.refresh(solicitud)

    # === CONSULTAS ===
    def get_solicitud(self, id_solicitud: int) -> Solicitud:
        solicitud = (
            self.db.query(Solicitud)
            .options(selectinload(Solicitud.aprobaciones))
            .filter(Solicitud.id_solicitud == id_solicitud)
            .first()
        )
        if not solicitud:
            raise ResourceNotFoundException(f"Solicitud {id_solicitud} no encontrada")
        return solicitud

    def _filtrar(self, query, filters: Dict[str, Any]):
        if filters.get("codigo_trabajador"):
            query = query.filter(Solicitud.codigo_trabajador == filters["codigo_trabajador"])
        if filters.get("estado"):
            query = query.filter(Solicitud.estado == filters["estado"])
        if filters.get("tipo_solicitud"):
            query = query.filter(Solicitud.tipo_solicitud == filters["tipo_solicitud"])
        if filters.get("codigo_permiso"):
            query = query.filter(Solicitud.codigo_permiso == filters["codigo_permiso"])
        if filters.get("codigo_area"):
            query = query.filter(Solicitud.codigo_area == filters["codigo_area"])
        if filters.get("codigo_seccion"):
            query = query.filter(Solicitud.codigo_seccion == filters["codigo_seccion"])
        if filters.get("fecha_desde"):
            query = query.filter(Solicitud.fecha_inicio >= filters["fecha_desde"])
        if filters.get("fecha_hasta"):
            query = query.filter(Solicitud.fecha_inicio <= filters["fecha_hasta"])
        return query

    def query_solicitudes(self, filters: Dict[str, Any]):
        query = self.db.query(Solicitud).options(selectinload(Solicitud.aprobaciones))
        query = self._filtrar(query, filters)
        return query.order_by(Solicitud.fecha_registro.desc(), Solicitud.id_solicitud.desc())

    def get_solicitudes(self, filters: Dict[str, Any], page: int = 1, limit: int = 10) -> Dict[str, Any]:
        items, total, page, limit, pages = paginar(self.query_solicitudes(filters), page, limit)
        return {
            "solicitudes": self.enriquecer(items),
            "total": total,
            "page": page,
            "limit": limit,
            "total_pages": pages
        }

    def mis_solicitudes(
        self, codigo_trabajador: str, filters: Dict[str, Any], page: int = 1, limit: int = 10
    ) -> Dict[str, Any]:
        filters = dict(filters, codigo_trabajador=codigo_trabajador)
        return self.get_solicitudes(filters, page, limit)

    # === BANDEJA DE APROBACIONES ===
    def _query_pendientes(self, codigo_aprobador: str):
        previa = aliased(Aprobacion)
        hay_nivel_previo_pendiente = exists().where(and_(
            previa.id_solicitud == Aprobacion.id_solicitud,
            previa.nivel < Aprobacion.nivel,
            previa.estado == EstadoAprobacion.PENDIENTE.value
        ))
        return (
            self.db.query(Aprobacion, Solicitud)
            .join(Solicitud, Solicitud.id_solicitud == Aprobacion.id_solicitud)
            .filter(
                Aprobacion.codigo_trabajador_aprueba == codigo_aprobador,
                Aprobacion.estado == EstadoAprobacion.PENDIENTE.value,
                Solicitud.estado == EstadoSolicitud.PENDIENTE.value,
                ~hay_nivel_previo_pendiente
            )
        )

    def pendientes(self, codigo_aprobador: str, page: int = 1, limit: int = 10) -> Dict[str, Any]:
        query = self._query_pendientes(codigo_aprobador).order_by(
            Solicitud.fecha_registro, Solicitud.id_solicitud
        )
        rows, total, page, limit, pages = paginar(query, page, limit)

        nombres = {}
        if self.catalog:
            nombres = self.catalog.nombres_trabajadores(s.codigo_trabajador for _, s in rows)

        items = []
        for aprobacion, solicitud in rows:
            items.append({
                "id_aprobacion": aprobacion.id_aprobacion,
                "id_solicitud": solicitud.id_solicitud,
                "nivel": aprobacion.nivel,
                "niveles_requeridos": solicitud.niveles_requeridos,
                "tipo_solicitud": solicitud.tipo_solicitud,
                "codigo_permiso": solicitud.codigo_permiso,
                "codigo_trabajador": solicitud.codigo_trabajador,
                "trabajador_nombre": nombres.get(solicitud.codigo_trabajador),
                "fecha_inicio": solicitud.fecha_inicio,
                "fecha_fin": solicitud.fecha_fin,
                "dias_solicitados": solicitud.dias_solicitados,
                "observacion": solicitud.observacion,
                "fecha_registro": solicitud.fecha_registro,
                "codigo_trabajador_titular": aprobacion.codigo_trabajador_titular
            })
        return {"aprobaciones": items, "total": total, "page": page, "limit": limit, "total_pages": pages}

    def count_pendientes(self, codigo_aprobador: str) -> int:
        return self._query_pendientes(codigo_aprobador).count()

    # === RESPUESTAS ===
    def enriquecer(self, solicitudes: List[Solicitud]) -> List[SolicitudResponse]:
        trabajadores = areas = permisos = {}
        if self.catalog:
            codigos = [s.codigo_trabajador for s in solicitudes]
            codigos += [a.codigo_trabajador_aprueba for s in solicitudes for a in s.aprobaciones]
            trabajadores = self.catalog.nombres_trabajadores(codigos)
            areas = self.catalog.nombres_areas(s.codigo_area for s in solicitudes)
            permisos = self.catalog.nombres_permisos(s.codigo_permiso for s in solicitudes)

        resultado = []
        for solicitud in solicitudes:
            item = SolicitudResponse.model_validate(solicitud)
            item.trabajador_nombre = trabajadores.get(solicitud.codigo_trabajador)
            item.area_nombre = areas.get(solicitud.codigo_area)
            item.permiso_nombre = permisos.get(solicitud.codigo_permiso)
            item.aprobaciones = [
                AprobacionResponse.model_validate(a).model_copy(
                    update={"aprobador_nombre": trabajadores.get(a.codigo_trabajador_aprueba)}
                )
                for a in solicitud.aprobaciones
            ]
            resultado.append(item)
        return resultado
