# --------------------------------------------------------------
# File: logging_config.py
# Description: Configuración única del logging de la aplicación.
# --------------------------------------------------------------
"""Inicializa el logging raíz con el nivel definido en la configuración."""

import logging

from patient_access.config import LOG_LEVEL

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Aplica ``logging.basicConfig`` una sola vez por proceso.

    Streamlit reejecuta los scripts de página en cada interacción, por lo que
    la llamada repetida no debe duplicar handlers.
    """

    root = logging.getLogger()
    if root.handlers:
        return
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=_FORMAT)
