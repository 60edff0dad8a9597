from enum import Enum


class TipoSolicitud(str, Enum):
    VACACIONES = "V"
    PERMISO = "P"


class EstadoSolicitud(str, Enum):
    PENDIENTE = "P"
    APROBADO = "A"
    RECHAZADO = "R"
    ANULADO = "N"


class EstadoAprobacion(str, Enum):
    PENDIENTE = "P"
    APROBADO = "A"
    RECHAZADO = "R"


class DecisionAprobacion(str, Enum):
    APROBAR = "A"
    RECHAZAR = "R"


class TipoRelacion(str, Enum):
    JEFE_DIRECTO = "J"
    GERENTE = "G"
    DIRECTOR = "D"


class ActivoInactivo(str, Enum):
    ACTIVO = "S"
    INACTIVO = "N"


class NombreRol(str, Enum):
    SUPERADMIN = "SUPERADMIN"
    ADMIN_VACACIONES = "ADMIN_VACACIONES"
    RRHH = "RRHH"
    APROBADOR = "APROBADOR"
    EMPLEADO = "EMPLEADO"
