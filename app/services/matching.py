# app/services/matching.py
"""
Selección de la regla de flujo (ConfigFlujo) que gobierna una solicitud.

Cada regla se evalúa como un conjunto de predicados de alcance
(permiso, área, sección, cargo). Un predicado nulo es un comodín; uno con
valor debe coincidir exactamente. Entre las reglas candidatas gana la más
específica (más predicados con valor), luego la de menor ``orden`` y por
último la de menor ``id_config``.

El módulo es puro: no consulta la BD ni el reloj. Quien lo usa le entrega
una foto de las reglas y la fecha de evaluación.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from app.core.exceptions import NoMatchingFlowConfigurationException
from app.models.enums import ActivoInactivo
from app.models.flujo import ConfigFlujo

logger = logging.getLogger(__name__)


def codigo(value: Any) -> Optional[str]:
    """Normaliza un código: enums a su valor, cadenas vacías a None."""
    if value is None:
        return None
    if isinstance(value, Enum):
        value = value.value
    value = str(value).strip()
    return value or None


@dataclass(frozen=True)
class Scope:
    """Predicado de alcance: ``Scope()`` es *cualquiera*, ``Scope("05")`` exige "05"."""
    value: Optional[str] = None

    @classmethod
    def of(cls, value: Any) -> "Scope":
        return cls(codigo(value))

    @property
    def is_any(self) -> bool:
        return self.value is None

    def score(self, candidate: Any) -> Optional[int]:
        """0 si es comodín, 1 si coincide, None si no coincide."""
        if self.is_any:
            return 0
        return 1 if codigo(candidate) == self.value else None


@dataclass(frozen=True)
class OrgScope:
    """Alcance organizacional del solicitante."""
    codigo_area: Optional[str] = None
    codigo_seccion: Optional[str] = None
    codigo_cargo: Optional[str] = None


@dataclass(frozen=True)
class CriteriosSolicitud:
    tipo_solicitud: str
    dias_solicitados: Decimal
    fecha_evaluacion: date
    alcance: OrgScope = field(default_factory=OrgScope)
    codigo_permiso: Optional[str] = None


def esta_activo(activo: Any) -> bool:
    return codigo(activo) == ActivoInactivo.ACTIVO.value


def vigente_en(fecha: date, desde: Optional[date], hasta: Optional[date]) -> bool:
    """Ventana inclusiva; un extremo nulo no limita."""
    if desde is not None and fecha < desde:
        return False
    if hasta is not None and fecha > hasta:
        return False
    return True


def puntaje_alcance(row: Any, alcance: OrgScope) -> Optional[int]:
    """
    Suma de predicados de área/sección/cargo que ``row`` fija y que coinciden
    con ``alcance``. None si alguno de ellos no coincide.
    """
    total = 0
    for predicado, valor in (
        (Scope.of(row.codigo_area), alcance.codigo_area),
        (Scope.of(row.codigo_seccion), alcance.codigo_seccion),
        (Scope.of(row.codigo_cargo), alcance.codigo_cargo),
    ):
        puntos = predicado.score(valor)
        if puntos is None:
            return None
        total += puntos
    return total


def _en_rango_dias(dias: Decimal, desde: Optional[Decimal], hasta: Optional[Decimal]) -> bool:
    if desde is not None and dias < Decimal(desde):
        return False
    if hasta is not None and dias > Decimal(hasta):
        return False
    return True


class RuleMatcher:
    """Evalúa una foto de reglas ConfigFlujo contra una solicitud."""

    def __init__(self, reglas: Iterable[ConfigFlujo]):
        self.reglas: Sequence[ConfigFlujo] = list(reglas)

    def puntaje(self, regla: ConfigFlujo, criterios: CriteriosSolicitud) -> Optional[int]:
        """Especificidad de la regla para la solicitud, o None si no aplica."""
        if not esta_activo(regla.activo):
            return None
        if codigo(regla.tipo_solicitud) != codigo(criterios.tipo_solicitud):
            return None
        if not vigente_en(criterios.fecha_evaluacion, regla.fecha_desde, regla.fecha_hasta):
            return None
        if not _en_rango_dias(Decimal(criterios.dias_solicitados), regla.dias_desde, regla.dias_hasta):
            return None

        puntos_permiso = Scope.of(regla.codigo_permiso).score(criterios.codigo_permiso)
        if puntos_permiso is None:
            return None
        puntos_alcance = puntaje_alcance(regla, criterios.alcance)
        if puntos_alcance is None:
            return None
        return puntos_permiso + puntos_alcance

    def candidatos(self, criterios: CriteriosSolicitud) -> List[Tuple[int, ConfigFlujo]]:
        """Reglas aplicables ordenadas de mayor a menor prioridad."""
        encontrados = []
        for regla in self.reglas:
            puntos = self.puntaje(regla, criterios)
            if puntos is not None:
                encontrados.append((puntos, regla))
        encontrados.sort(key=lambda par: (-par[0], par[1].orden or 0, par[1].id_config or 0))
        return encontrados

    def match(self, criterios: CriteriosSolicitud) -> ConfigFlujo:
        candidatos = self.candidatos(criterios)
        if not candidatos:
            logger.warning(
                "Sin regla de flujo para tipo=%s permiso=%s alcance=%s dias=%s fecha=%s",
                criterios.tipo_solicitud, criterios.codigo_permiso, criterios.alcance,
                criterios.dias_solicitados, criterios.fecha_evaluacion
            )
            raise NoMatchingFlowConfigurationException(
                codigo(criterios.tipo_solicitud),
                criterios.codigo_permiso,
                criterios.alcance.codigo_area
            )

        puntos, regla = candidatos[0]
        if len(candidatos) > 1 and candidatos[1][0] == puntos:
            logger.info(
                "Empate de especificidad entre reglas %s; se usa id_config=%s por orden",
                [r.id_config for p, r in candidatos if p == puntos], regla.id_config
            )
        return regla


def match_flow_config(reglas: Iterable[ConfigFlujo], criterios: CriteriosSolicitud) -> ConfigFlujo:
    return RuleMatcher(reglas).match(criterios)
