# --------------------------------------------------------------
# File: __init__.py
# Description: Exposición pública del paquete de acceso de pacientes.
# --------------------------------------------------------------
"""Inicializa el paquete `patient_access` y documenta sus módulos principales."""

__all__ = [
    "auth_flow",
    "config",
    "errors",
    "form",
    "gateway",
    "logging_config",
    "models",
    "password_policy",
    "registration_latch",
    "session_crypto",
    "session_store",
    "status_resolver",
]
