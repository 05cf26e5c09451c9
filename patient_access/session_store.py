# --------------------------------------------------------------
# File: session_store.py
# Description: Persistencia cifrada de la sesión local del paciente (clave patientSession).
# --------------------------------------------------------------
"""Almacén de la sesión local con ciclo de vida explícito: alta, caducidad y borrado.

Cada sesión de navegador tiene su propio ámbito (``scope``); dos ámbitos nunca
comparten fichero ni pueden abrir el contenido sellado del otro.
"""

from __future__ import annotations

import json
import logging
import os
import re
import uuid
from datetime import UTC, datetime, timedelta
from typing import Callable, Optional

from cryptography.exceptions import InvalidTag
from pydantic import ValidationError

from patient_access.models import LocalSession, PatientRecord
from patient_access.session_crypto import seal, unseal

__all__ = ["SESSION_KEY", "SessionStore", "new_scope"]

logger = logging.getLogger(__name__)

SESSION_KEY = "patientSession"
_ENVELOPE_VERSION = 2
_SCOPE_RE = re.compile(r"[A-Za-z0-9_-]{1,64}")


def _utcnow() -> datetime:
    return datetime.now(UTC)


def new_scope() -> str:
    """Genera un identificador aleatorio para una sesión de navegador."""

    return uuid.uuid4().hex


class SessionStore:
    """Guarda la ``LocalSession`` de un único ámbito sellada con AES-GCM en disco.

    Args:
        directory (str): Carpeta de persistencia (``STORAGE_PATH``).
        key (bytes): Clave AES-GCM derivada del secreto de la aplicación.
        ttl_seconds (int): Vigencia de cada sesión desde su creación.
        scope (str): Identificador de la sesión de navegador propietaria.
        clock (Callable[[], datetime]): Reloj inyectable para pruebas.

    Raises:
        ValueError: Si ``scope`` contiene caracteres no permitidos en un nombre de fichero.

    """

    def __init__(
        self,
        directory: str,
        key: bytes,
        ttl_seconds: int,
        scope: str,
        clock: Callable[[], datetime] = _utcnow,
    ):
        if not _SCOPE_RE.fullmatch(scope):
            raise ValueError(f"Invalid session scope: {scope!r}")
        self.scope = scope
        self.path = os.path.join(directory, f"{SESSION_KEY}-{scope}.json")
        self._aad = f"{SESSION_KEY}:{scope}".encode()
        self._key = key
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock

    def _ensure_parent_dir(self) -> None:
        parent = os.path.dirname(self.path) or "."
        os.makedirs(parent, exist_ok=True)

    def save(self, record: PatientRecord) -> LocalSession:
        """Crea la sesión local a partir de la ficha y la escribe de forma atómica.

        Args:
            record (PatientRecord): Ficha del paciente recién autenticado.

        Returns:
            LocalSession: Sesión persistida, con sus marcas de creación y caducidad.

        """

        now = self._clock()
        session = LocalSession(
            id=record.id,
            name=record.name,
            email=record.email,
            psychologist_id=record.psychologist_id,
            created_at=now,
            expires_at=now + self._ttl,
        )
        envelope = {
            "v": _ENVELOPE_VERSION,
            "key": SESSION_KEY,
            "scope": self.scope,
            "sealed": seal(self._key, session.model_dump_json().encode("utf-8"), self._aad),
        }

        self._ensure_parent_dir()
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as handler:
            json.dump(envelope, handler)
        os.replace(tmp_path, self.path)
        return session

    def load(self) -> Optional[LocalSession]:
        """Lee la sesión vigente.

        Returns:
            Optional[LocalSession]: ``None`` si no existe, está caducada o es ilegible;
            en los dos últimos casos el fichero se elimina.

        """

        try:
            with open(self.path, "r", encoding="utf-8") as handler:
                envelope = json.load(handler)
        except FileNotFoundError:
            return None
        except json.JSONDecodeError:
            logger.warning("Local session file is not valid JSON, discarding it")
            self.clear()
            return None

        try:
            plaintext = unseal(self._key, envelope["sealed"], self._aad)
            session = LocalSession.model_validate_json(plaintext)
        except (KeyError, TypeError, ValueError, InvalidTag, ValidationError) as exc:
            logger.warning("Local session could not be opened (%s), discarding it", type(exc).__name__)
            self.clear()
            return None

        if session.is_expired(self._clock()):
            logger.info("Local session for patient %s expired", session.id)
            self.clear()
            return None
        return session

    def clear(self) -> None:
        try:
            os.remove(self.path)
        except FileNotFoundError:
            pass
