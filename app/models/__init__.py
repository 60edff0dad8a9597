from .base import Base, RRHHBase, TimestampMixin, AuditoriaMixin
from .user import Usuario, Rol
from .flujo import ConfigFlujo, Jerarquia, Sustituto
from .solicitud import Solicitud, Aprobacion
from .catalogo import Area, Seccion, Cargo, Trabajador, TipoPermiso

__all__ = [
    "Base",
    "RRHHBase",
    "TimestampMixin",
    "AuditoriaMixin",
    "Usuario",
    "Rol",
    "ConfigFlujo",
    "Jerarquia",
    "Sustituto",
    "Solicitud",
    "Aprobacion",
    "Area",
    "Seccion",
    "Cargo",
    "Trabajador",
    "TipoPermiso"
]
