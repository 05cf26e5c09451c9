# --------------------------------------------------------------
# File: status_resolver.py
# Description: Resolución del estado de un email candidato vía procedimiento privilegiado.
# --------------------------------------------------------------
"""Consulta de existencia y registro de pacientes con descarte de respuestas obsoletas."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Optional

from patient_access.errors import StatusLookupError
from patient_access.gateway import PatientDirectory
from patient_access.models import PatientStatus, parse_status_rows

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LookupTicket:
    seq: int
    email: str


class StatusResolver:
    """Resuelve ``PatientStatus`` para el email que el paciente va escribiendo.

    Cada consulta recibe un número de secuencia creciente; solo la respuesta de
    la última consulta emitida actualiza el estado.
    """

    def __init__(self, directory: PatientDirectory):
        self._directory = directory
        self._lock = threading.Lock()
        self._issued = 0
        self.status: Optional[PatientStatus] = None
        self.email: Optional[str] = None

    @staticmethod
    def should_resolve(email: str) -> bool:
        """Filtro sintáctico mínimo: basta con que contenga ``@``."""

        return "@" in email

    def issue(self, email: str) -> LookupTicket:
        with self._lock:
            self._issued += 1
            return LookupTicket(seq=self._issued, email=email)

    def complete(self, ticket: LookupTicket, status: PatientStatus) -> bool:
        """Aplica ``status`` si ``ticket`` es la consulta más reciente.

        Returns:
            bool: ``True`` si el estado se actualizó; ``False`` si la respuesta era obsoleta.

        """

        with self._lock:
            if ticket.seq != self._issued:
                logger.debug(
                    "Discarding stale status for %s (seq %s, latest %s)",
                    ticket.email,
                    ticket.seq,
                    self._issued,
                )
                return False
            self.status = status
            self.email = ticket.email
            return True

    def lookup(self, email: str) -> PatientStatus:
        """Consulta el procedimiento y tipa la respuesta; cierra ante cualquier fallo."""

        try:
            return parse_status_rows(self._directory.check_patient_email(email))
        except StatusLookupError as exc:
            logger.warning("Patient status lookup failed for %s: %s", email, exc.message)
            return PatientStatus.not_found()

    def resolve(self, email: str) -> Optional[PatientStatus]:
        """Resuelve el estado de ``email``.

        Args:
            email (str): Email candidato, enviado tal cual al backend.

        Returns:
            Optional[PatientStatus]: ``None`` si el email no contiene ``@`` (no se
            consulta nada); en otro caso, el estado obtenido por esta llamada.

        """

        if not self.should_resolve(email):
            return None
        ticket = self.issue(email)
        status = self.lookup(email)
        self.complete(ticket, status)
        return status
