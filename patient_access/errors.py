# --------------------------------------------------------------
# File: errors.py
# Description: Jerarquía de errores del flujo de acceso de pacientes.
# --------------------------------------------------------------
"""Excepciones de dominio.

Solo ``AuthServiceError`` y ``EnrollmentDeniedError`` llegan al usuario como
mensaje principal; el resto se registra y degrada a un estado seguro.
"""


class PatientAccessError(Exception):
    """Error base con un mensaje apto para mostrar en la interfaz."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class FormValidationError(PatientAccessError):
    """Reglas de contraseña incumplidas; nunca se llega a la red."""


class AuthServiceError(PatientAccessError):
    """El servicio de autenticación rechazó el alta, el login o el cierre de sesión."""


class StatusLookupError(PatientAccessError):
    """Fallo o respuesta malformada del procedimiento de consulta de email."""


class PatientLookupError(PatientAccessError):
    """Fallo al consultar la ficha del paciente en la tabla protegida por RLS."""


class EnrollmentDeniedError(PatientAccessError):
    """Credenciales válidas pero sin ficha de paciente asociada."""

    def __init__(self, message: str = "You are not registered as a patient in this system."):
        super().__init__(message)


class MarkRegisteredError(PatientAccessError):
    """Fallo del procedimiento que marca al paciente como registrado."""
