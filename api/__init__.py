# --------------------------------------------------------------
# File: __init__.py
# Description: Adaptadores de servicios externos (Supabase) del acceso de pacientes.
# --------------------------------------------------------------
"""Inicializa el paquete `api`."""

__all__ = ["supabase_gateway"]
