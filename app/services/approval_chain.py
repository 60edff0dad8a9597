# app/services/approval_chain.py
"""
Construcción de la cadena de aprobadores de una solicitud.

Para cada nivel 1..N se elige el registro de jerarquía más específico que
aplica al alcance del solicitante y, si el titular elegido tiene un
sustituto vigente a la fecha de evaluación, el sustituto toma su lugar.
La sustitución se aplica una sola vez: el sustituto de un sustituto no se
sigue.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional

from app.core.exceptions import IncompleteApprovalChainException, ValidationException
from app.models.flujo import Jerarquia, Sustituto
from app.services.matching import OrgScope, codigo, esta_activo, puntaje_alcance, vigente_en

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AprobadorResuelto:
    nivel: int
    codigo_trabajador_aprueba: str
    codigo_trabajador_titular: str
    id_jerarquia: int
    id_sustituto: Optional[int] = None

    @property
    def es_sustitucion(self) -> bool:
        return self.id_sustituto is not None


class ApprovalChainResolver:
    """Resuelve la cadena sobre una foto de Jerarquia y Sustituto."""

    def __init__(self, jerarquias: Iterable[Jerarquia], sustitutos: Iterable[Sustituto]):
        self.jerarquias = list(jerarquias)
        self.sustitutos = list(sustitutos)

    def aprobador_nivel(self, nivel: int, alcance: OrgScope, fecha: date) -> Optional[Jerarquia]:
        candidatos = []
        for row in self.jerarquias:
            if row.nivel_jerarquico != nivel or not esta_activo(row.activo):
                continue
            if not vigente_en(fecha, row.fecha_desde, row.fecha_hasta):
                continue
            puntos = puntaje_alcance(row, alcance)
            if puntos is not None:
                candidatos.append((puntos, row))
        if not candidatos:
            return None
        candidatos.sort(key=lambda par: (-par[0], par[1].id_jerarquia or 0))
        return candidatos[0][1]

    def sustituto_vigente(self, codigo_titular: str, fecha: date) -> Optional[Sustituto]:
        vigentes = [
            s for s in self.sustitutos
            if esta_activo(s.activo)
            and codigo(s.codigo_trabajador_titular) == codigo_titular
            and vigente_en(fecha, s.fecha_desde, s.fecha_hasta)
        ]
        if not vigentes:
            return None
        # El registro más reciente manda
        vigentes.sort(
            key=lambda s: (s.fecha_registro or datetime.min, s.id_sustituto or 0),
            reverse=True
        )
        if len(vigentes) > 1:
            logger.warning(
                "Titular %s tiene %d sustituciones vigentes al %s; se usa id_sustituto=%s",
                codigo_titular, len(vigentes), fecha, vigentes[0].id_sustituto
            )
        return vigentes[0]

    def resolve(self, niveles_requeridos: int, alcance: OrgScope, fecha: date) -> List[AprobadorResuelto]:
        if niveles_requeridos < 1:
            raise ValidationException(
                "La cantidad de niveles requeridos debe ser mayor o igual a 1",
                details={"niveles_requeridos": niveles_requeridos}
            )

        seleccion: Dict[int, Jerarquia] = {}
        faltantes: List[int] = []
        for nivel in range(1, niveles_requeridos + 1):
            row = self.aprobador_nivel(nivel, alcance, fecha)
            if row is None:
                faltantes.append(nivel)
            else:
                seleccion[nivel] = row

        if faltantes:
            logger.warning(
                "Cadena incompleta para alcance %s al %s: faltan niveles %s de %d",
                alcance, fecha, faltantes, niveles_requeridos
            )
            raise IncompleteApprovalChainException(faltantes, niveles_requeridos)

        cadena = []
        for nivel in range(1, niveles_requeridos + 1):
            row = seleccion[nivel]
            titular = codigo(row.codigo_trabajador_aprobador)
            sustituto = self.sustituto_vigente(titular, fecha)
            cadena.append(AprobadorResuelto(
                nivel=nivel,
                codigo_trabajador_aprueba=codigo(sustituto.codigo_trabajador_sustituto) if sustituto else titular,
                codigo_trabajador_titular=titular,
                id_jerarquia=row.id_jerarquia,
                id_sustituto=sustituto.id_sustituto if sustituto else None
            ))
        return cadena


def resolve_approval_chain(
    niveles_requeridos: int,
    alcance: OrgScope,
    fecha: date,
    jerarquias: Iterable[Jerarquia],
    sustitutos: Iterable[Sustituto]
) -> List[AprobadorResuelto]:
    return ApprovalChainResolver(jerarquias, sustitutos).resolve(niveles_requeridos, alcance, fecha)
