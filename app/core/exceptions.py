"""
Custom exceptions for the Vacaciones y Permisos application.

This module defines business-specific exceptions that can be raised throughout the application
and handled by FastAPI's exception handlers to return appropriate HTTP responses.
"""

from typing import Dict, Any, Optional, List
from fastapi import status


class BaseAppException(Exception):
    """Excepción base para todas las excepciones de la aplicación"""
    error_type = "application_error"
    title = "Application Error"

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class AuthenticationException(BaseAppException):
    """Excepción para errores de autenticación"""
    error_type = "authentication_error"
    title = "Authentication Error"

    def __init__(self, message: str = "Error de autenticación"):
        super().__init__(message, status_code=status.HTTP_401_UNAUTHORIZED)


class ValidationException(BaseAppException):
    """Excepción para errores de validación"""
    error_type = "validation_error"
    title = "Validation Error"

    def __init__(self, message: str = "Error de validación", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, details=details)


class PermissionException(BaseAppException):
    """Excepción para errores de permisos"""
    error_type = "permission_error"
    title = "Permission Denied"

    def __init__(self, message: str = "No tiene permisos para realizar esta acción"):
        super().__init__(message, status_code=status.HTTP_403_FORBIDDEN)


class ResourceNotFoundException(BaseAppException):
    """Excepción para recursos no encontrados"""
    error_type = "not_found"
    title = "Not Found"

    def __init__(self, message: str = "Recurso no encontrado"):
        super().__init__(message, status_code=status.HTTP_404_NOT_FOUND)


class ConfigurationException(BaseAppException):
    """
    Vacío en los datos de configuración (reglas de flujo o jerarquía).
    Reintentar con los mismos datos no puede tener éxito: requiere que un
    administrador corrija la configuración.
    """
    error_type = "configuration_error"
    title = "Configuration Error"

    def __init__(self, message: str = "Error en la configuración", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, details=details)


class NoMatchingFlowConfigurationException(ConfigurationException):
    """Ninguna regla activa de ConfigFlujo aplica a la solicitud"""
    error_type = "no_matching_flow_configuration"

    def __init__(self, tipo_solicitud: str, codigo_permiso: Optional[str] = None, codigo_area: Optional[str] = None):
        descripcion = f"tipo '{tipo_solicitud}'"
        if codigo_permiso:
            descripcion += f", permiso '{codigo_permiso}'"
        if codigo_area:
            descripcion += f", área '{codigo_area}'"
        super().__init__(
            f"No existe una configuración de flujo activa para la solicitud ({descripcion}). "
            "Contacte al administrador.",
            details={
                "tipo_solicitud": tipo_solicitud,
                "codigo_permiso": codigo_permiso,
                "codigo_area": codigo_area
            }
        )


class IncompleteApprovalChainException(ConfigurationException):
    """Algún nivel de la cadena no tiene aprobador en la jerarquía"""
    error_type = "incomplete_approval_chain"

    def __init__(self, niveles_faltantes: List[int], niveles_requeridos: int):
        self.niveles_faltantes = niveles_faltantes
        super().__init__(
            f"La jerarquía de aprobación no tiene aprobador para el nivel {niveles_faltantes[0]} "
            f"(se requieren {niveles_requeridos} niveles). Contacte al administrador.",
            details={
                "niveles_faltantes": niveles_faltantes,
                "niveles_requeridos": niveles_requeridos
            }
        )


class WorkflowException(BaseAppException):
    """Excepción específica para errores en el flujo de trabajo"""
    error_type = "workflow_error"
    title = "Workflow Error"

    def __init__(self, message: str = "Error en el flujo de aprobación", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST, details=details)


class InvalidTransitionException(WorkflowException):
    """Transición no permitida desde el estado actual; el cliente debe recargar la solicitud"""
    error_type = "invalid_transition"
    title = "Invalid Transition"

    def __init__(self, message: str, id_solicitud: Optional[int] = None, estado_actual: Optional[str] = None):
        super().__init__(
            message,
            details={"id_solicitud": id_solicitud, "estado_actual": estado_actual}
        )
        self.status_code = status.HTTP_409_CONFLICT
